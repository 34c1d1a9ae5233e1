"""Socket Mode dispatch core for Slack bots."""

from __future__ import annotations

from .bot import SlackBot
from .bridge.commands import BotCommand, CommandDefinition, LinkShareDefinition
from .bridge.context import BotContext, Request, ResponseWriter
from .bridge.dispatch import CommandEvent
from .config import BotConfig, load_bot_config
from .errors import ConfigError, SlackApiError, SlackbotError, UnauthorizedError
from .types import MessageEvent, SharedLink

__all__ = [
    "BotCommand",
    "BotConfig",
    "BotContext",
    "CommandDefinition",
    "CommandEvent",
    "ConfigError",
    "LinkShareDefinition",
    "MessageEvent",
    "Request",
    "ResponseWriter",
    "SharedLink",
    "SlackApiError",
    "SlackBot",
    "SlackbotError",
    "UnauthorizedError",
    "load_bot_config",
]
