"""Command handling for the Slack bridge.

This module provides usage pattern matching, the command registry and the
built-in help command.
"""

from __future__ import annotations

from .help import DefaultHelp, render_help
from .parse import Token, match, tokenize
from .registry import (
    HELP_COMMAND,
    BotCommand,
    BotLinkShare,
    CommandDefinition,
    CommandRegistry,
    CommandRegistryBuilder,
    LinkShareDefinition,
)

__all__ = [
    "HELP_COMMAND",
    "BotCommand",
    "BotLinkShare",
    "CommandDefinition",
    "CommandRegistry",
    "CommandRegistryBuilder",
    "DefaultHelp",
    "LinkShareDefinition",
    "Token",
    "match",
    "render_help",
    "tokenize",
]
