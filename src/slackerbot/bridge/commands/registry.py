"""Command and link registries."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .help import DefaultHelp
from .parse import Token, match, tokenize

if TYPE_CHECKING:
    import httpx

    from ..context import BotContext, Request, ResponseWriter

HELP_COMMAND = "help"

CommandHandler = Callable[["BotContext", "Request", "ResponseWriter"], Awaitable[Any]]
AuthorizationFunc = Callable[["BotContext", "Request"], bool | Awaitable[bool]]
LinkHandler = Callable[["BotContext", "httpx.URL", "ResponseWriter"], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    handler: CommandHandler | None = None
    authorization: AuthorizationFunc | None = None
    description: str = ""
    example: str = ""


@dataclass(frozen=True, slots=True)
class BotCommand:
    usage: str
    definition: CommandDefinition
    tokens: tuple[Token, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tokenize(self.usage))

    def tokenize(self) -> tuple[Token, ...]:
        return self.tokens

    def match(self, text: str) -> tuple[dict[str, str], bool]:
        return match(self.tokens, text)

    async def is_authorized(self, ctx: BotContext, request: Request) -> bool:
        """Run the authorization predicate, which may be sync or async."""
        authorization = self.definition.authorization
        if authorization is None:
            return True
        allowed = authorization(ctx, request)
        if inspect.isawaitable(allowed):
            allowed = await allowed
        return bool(allowed)

    async def execute(
        self, ctx: BotContext, request: Request, response: ResponseWriter
    ) -> None:
        handler = self.definition.handler
        if handler is None:
            return
        await handler(ctx, request, response)


@dataclass(frozen=True, slots=True)
class LinkShareDefinition:
    handler: LinkHandler
    description: str = ""


@dataclass(frozen=True, slots=True)
class BotLinkShare:
    domain: str
    definition: LinkShareDefinition

    async def execute(
        self, ctx: BotContext, url: httpx.URL, response: ResponseWriter
    ) -> None:
        await self.definition.handler(ctx, url, response)


@dataclass(frozen=True, slots=True)
class CommandRegistry:
    """Immutable snapshot consumed by the dispatch loop."""

    commands: tuple[BotCommand, ...] = ()
    links: tuple[BotLinkShare, ...] = ()

    def lookup(self, text: str) -> tuple[BotCommand | None, dict[str, str], bool]:
        """Return the first registered command matching `text`."""
        for command in self.commands:
            parameters, matched = command.match(text)
            if matched:
                return command, parameters, True
        return None, {}, False

    def links_for(self, domain: str) -> tuple[BotLinkShare, ...]:
        return tuple(link for link in self.links if link.domain == domain)


class CommandRegistryBuilder:
    """Collects registrations before the dispatch loop starts.

    Duplicate usage patterns are accepted; only the first one can ever match.
    """

    def __init__(self) -> None:
        self._commands: list[BotCommand] = []
        self._links: list[BotLinkShare] = []

    @property
    def commands(self) -> tuple[BotCommand, ...]:
        return tuple(self._commands)

    def command(self, usage: str, definition: CommandDefinition) -> BotCommand:
        bot_command = BotCommand(usage=usage, definition=definition)
        self._commands.append(bot_command)
        return bot_command

    def link(self, domain: str, definition: LinkShareDefinition) -> BotLinkShare:
        link = BotLinkShare(domain=domain, definition=definition)
        self._links.append(link)
        return link

    def build(
        self, *, help_definition: CommandDefinition | None = None
    ) -> CommandRegistry:
        """Freeze the registrations, prepending the help command."""
        definition = help_definition or CommandDefinition()
        default_help: DefaultHelp | None = None
        if definition.handler is None:
            default_help = DefaultHelp()
            definition = replace(definition, handler=default_help)
        if not definition.description:
            definition = replace(definition, description=HELP_COMMAND)
        help_command = BotCommand(usage=HELP_COMMAND, definition=definition)
        registry = CommandRegistry(
            commands=(help_command, *self._commands),
            links=tuple(self._links),
        )
        if default_help is not None:
            default_help.commands = registry.commands
        return registry
