"""Event dispatch loop.

One task reads raw events from the source, classifies them and routes each
one. Slash commands and interactive actions are handled inline and
acknowledged afterwards, in read order. Message-like events are spawned into
the loop's task group and acknowledged right away, so they may finish in any
order. Every handler runs under a supervisor that logs and swallows
exceptions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import anyio
import httpx
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectSendStream

from ..errors import DEFAULT_UNAUTHORIZED_ERROR
from ..logging import get_logger
from ..types import (
    Connected,
    Connecting,
    ConnectionFailed,
    InteractiveAction,
    MessageEvent,
    SlashCommand,
    SocketEvent,
)
from .classify import classify
from .commands.registry import CommandRegistry
from .context import (
    BotContext,
    Request,
    RequestFactory,
    ResponseFactory,
    ResponseWriter,
)

if TYPE_CHECKING:
    from ..client.api import SlackClient
    from ..client.socket import SocketModeClient

logger = get_logger(__name__)

DEFAULT_COMMAND_EVENTS_CAPACITY = 100

InteractionHandler = Callable[
    [BotContext, ResponseWriter, str, str, str, str], Awaitable[Any]
]
MessageHandler = Callable[[BotContext, ResponseWriter], Awaitable[Any]]
InitHandler = Callable[[], Awaitable[Any]]
ErrorHandler = Callable[[str], Awaitable[Any]]


class EventSource(Protocol):
    async def receive(self) -> SocketEvent: ...

    async def ack(self, event: SocketEvent) -> None: ...


@dataclass(frozen=True, slots=True)
class CommandEvent:
    usage: str
    parameters: Mapping[str, str]
    event: MessageEvent


@dataclass(frozen=True, slots=True)
class DispatchHandlers:
    interaction: InteractionHandler | None = None
    message: MessageHandler | None = None
    init: InitHandler | None = None
    error: ErrorHandler | None = None


@dataclass(frozen=True, slots=True)
class DispatchConfig:
    registry: CommandRegistry
    client: SlackClient
    bot_id: str | None = None
    handlers: DispatchHandlers = field(default_factory=DispatchHandlers)
    command_events: MemoryObjectSendStream[CommandEvent] | None = None
    unauthorized_error: BaseException | str = DEFAULT_UNAUTHORIZED_ERROR
    request_factory: RequestFactory = Request
    response_factory: ResponseFactory = ResponseWriter
    socket: SocketModeClient | None = None


def _context_event(event: InteractiveAction | SlashCommand) -> MessageEvent:
    if isinstance(event, SlashCommand):
        return MessageEvent(
            channel=event.channel,
            user=event.user,
            text=event.text,
            payload=event.payload,
        )
    return MessageEvent(
        channel=event.channel,
        user=event.user,
        text="",
        payload=event.payload,
    )


async def _supervised(
    name: str, fn: Callable[..., Awaitable[Any]], *args: Any
) -> None:
    try:
        await fn(*args)
    except Exception as exc:
        logger.exception(
            "dispatch.handler_failed",
            handler=name,
            error=str(exc),
            error_type=exc.__class__.__name__,
        )


class Dispatcher:
    def __init__(self, cfg: DispatchConfig) -> None:
        self._cfg = cfg
        self._stopping = False
        self._receive_scope: anyio.CancelScope | None = None

    def stop(self) -> None:
        """Stop reading new events; spawned handlers are left to finish."""
        self._stopping = True
        if self._receive_scope is not None:
            self._receive_scope.cancel()

    async def run(self, source: EventSource) -> None:
        async with anyio.create_task_group() as tg:
            while not self._stopping:
                raw: SocketEvent | None = None
                with anyio.CancelScope() as scope:
                    self._receive_scope = scope
                    try:
                        raw = await source.receive()
                    except (anyio.EndOfStream, anyio.ClosedResourceError):
                        logger.info("dispatch.source_closed")
                self._receive_scope = None
                if raw is None:
                    break
                await self.dispatch(tg, source, raw)
        logger.info("dispatch.stopped")

    async def dispatch(
        self, tg: TaskGroup, source: EventSource, raw: SocketEvent
    ) -> None:
        event = classify(raw)
        handlers = self._cfg.handlers
        if isinstance(event, Connecting):
            logger.info("slack.connecting")
            if handlers.init is not None:
                tg.start_soon(_supervised, "init", handlers.init)
        elif isinstance(event, ConnectionFailed):
            logger.warning("slack.connection_failed", error=event.error)
            if handlers.error is not None:
                tg.start_soon(_supervised, "err", handlers.error, event.error)
        elif isinstance(event, Connected):
            logger.info("slack.connected")
        elif isinstance(event, InteractiveAction):
            await _supervised("interaction", self.handle_interaction, event)
        elif isinstance(event, SlashCommand):
            await _supervised("command", self.handle_slash_command, event)
        elif isinstance(event, MessageEvent):
            tg.start_soon(_supervised, "message", self.handle_message, event)
        else:
            logger.warning(
                "dispatch.unhandled_event",
                type=event.type,
                reason=event.reason,
            )
        if raw.envelope_id is not None:
            await source.ack(raw)

    def _context(self, event: MessageEvent) -> tuple[BotContext, ResponseWriter]:
        ctx = BotContext(event=event, client=self._cfg.client, socket=self._cfg.socket)
        return ctx, self._cfg.response_factory(ctx)

    async def handle_interaction(self, event: InteractiveAction) -> None:
        handler = self._cfg.handlers.interaction
        if handler is None:
            logger.info(
                "dispatch.interaction_ignored",
                callback_id=event.callback_id,
                action_id=event.action_id,
            )
            return
        ctx, response = self._context(_context_event(event))
        await handler(
            ctx,
            response,
            event.callback_id,
            event.block_id,
            event.action_id,
            event.value,
        )

    async def handle_slash_command(self, event: SlashCommand) -> None:
        ctx, response = self._context(_context_event(event))
        command, parameters, found = self._cfg.registry.lookup(event.text)
        if not found or command is None:
            logger.debug("dispatch.command_unmatched", command=event.command)
            return
        request = self._cfg.request_factory(ctx, parameters)
        if not await command.is_authorized(ctx, request):
            logger.info(
                "dispatch.command_unauthorized",
                usage=command.usage,
                user=event.user,
            )
            await response.report_error(self._cfg.unauthorized_error)
            return
        self._publish(CommandEvent(command.usage, dict(parameters), ctx.event))
        await command.execute(ctx, request, response)

    def _publish(self, record: CommandEvent) -> None:
        stream = self._cfg.command_events
        if stream is None:
            return
        try:
            stream.send_nowait(record)
        except anyio.WouldBlock:
            logger.debug("dispatch.command_event_dropped", usage=record.usage)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.debug("dispatch.command_event_stream_closed", usage=record.usage)

    async def handle_message(self, event: MessageEvent) -> None:
        bot_id = self._cfg.bot_id
        if bot_id is not None and event.bot_id == bot_id:
            logger.debug("dispatch.own_message_ignored", channel=event.channel)
            return
        ctx, response = self._context(event)
        for link in event.links:
            for link_share in self._cfg.registry.links_for(link.domain):
                try:
                    url = httpx.URL(link.url)
                except httpx.InvalidURL as exc:
                    logger.warning(
                        "dispatch.link_invalid_url",
                        url=link.url,
                        error=str(exc),
                    )
                    continue
                await _supervised("link", link_share.execute, ctx, url, response)
        handler = self._cfg.handlers.message
        if handler is not None:
            await handler(ctx, response)
