"""Built-in help command."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..context import BotContext, Request, ResponseWriter
    from .registry import BotCommand

CODE_FORMAT = "`{}`"
BOLD_FORMAT = "*{}*"
ITALIC_FORMAT = "_{}_"
EXAMPLE_FORMAT = ">_*Example:* {}_"
AUTHORIZED_MARKER = "*"
AUTHORIZED_USERS_ONLY = "Authorized users only"


def _format_usage(command: BotCommand) -> str:
    words = []
    for token in command.tokenize():
        if token.is_parameter:
            words.append(CODE_FORMAT.format(token.word))
        else:
            words.append(BOLD_FORMAT.format(token.word))
    return " ".join(words)


def render_help(commands: Sequence[BotCommand]) -> str:
    """Render the help listing for the registered commands.

    Restricted commands are flagged with a code `*` and explained by a
    trailing legend line.
    """
    lines: list[str] = []
    restricted = False
    for command in commands:
        definition = command.definition
        line = _format_usage(command) + " "
        if definition.description:
            line += "- " + ITALIC_FORMAT.format(definition.description)
        if definition.authorization is not None:
            restricted = True
            line += " " + CODE_FORMAT.format(AUTHORIZED_MARKER)
        lines.append(line)
        if definition.example:
            lines.append(EXAMPLE_FORMAT.format(definition.example))
    if restricted:
        lines.append(CODE_FORMAT.format(f"{AUTHORIZED_MARKER} {AUTHORIZED_USERS_ONLY}"))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


class DefaultHelp:
    """Help handler used when the bot does not configure its own."""

    def __init__(self, commands: Sequence[BotCommand] = ()) -> None:
        self.commands: Sequence[BotCommand] = tuple(commands)

    async def __call__(
        self, ctx: BotContext, request: Request, response: ResponseWriter
    ) -> None:
        await response.reply(render_help(self.commands))
