"""Bot entry point: registration API and the listen loop."""

from __future__ import annotations

from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream

from .bridge.commands.registry import (
    BotCommand,
    CommandDefinition,
    CommandRegistry,
    CommandRegistryBuilder,
    LinkShareDefinition,
)
from .bridge.context import Request, RequestFactory, ResponseFactory, ResponseWriter
from .bridge.dispatch import (
    DEFAULT_COMMAND_EVENTS_CAPACITY,
    CommandEvent,
    Dispatcher,
    DispatchConfig,
    DispatchHandlers,
    ErrorHandler,
    EventSource,
    InitHandler,
    InteractionHandler,
    MessageHandler,
)
from .client.api import SlackClient
from .client.socket import DEFAULT_RECONNECT_DELAY_S, SocketModeClient
from .config import BotConfig
from .errors import DEFAULT_UNAUTHORIZED_ERROR
from .logging import get_logger, setup_logging

logger = get_logger(__name__)


class SlackBot:
    """Collects handlers, then dispatches Socket Mode events to them.

    All registration calls must happen before `listen()`; afterwards they
    raise `RuntimeError`.
    """

    def __init__(
        self,
        client: SlackClient,
        socket: SocketModeClient,
        *,
        bot_id: str | None,
        command_events_capacity: int = DEFAULT_COMMAND_EVENTS_CAPACITY,
    ) -> None:
        self._client = client
        self._socket = socket
        self._bot_id = bot_id
        self._builder = CommandRegistryBuilder()
        self._help_definition: CommandDefinition | None = None
        self._interaction: InteractionHandler | None = None
        self._message: MessageHandler | None = None
        self._init: InitHandler | None = None
        self._error: ErrorHandler | None = None
        self._unauthorized_error: BaseException | str = DEFAULT_UNAUTHORIZED_ERROR
        self._request_factory: RequestFactory = Request
        self._response_factory: ResponseFactory = ResponseWriter
        self._command_send, self._command_receive = (
            anyio.create_memory_object_stream[CommandEvent](
                max_buffer_size=command_events_capacity
            )
        )
        self._registry: CommandRegistry | None = None
        self._dispatcher: Dispatcher | None = None
        self._stop_requested = False

    @classmethod
    async def create(
        cls,
        bot_token: str,
        app_token: str,
        *,
        command_events_capacity: int = DEFAULT_COMMAND_EVENTS_CAPACITY,
        reconnect_delay_s: float = DEFAULT_RECONNECT_DELAY_S,
    ) -> SlackBot:
        """Build a bot, resolving its own bot id with `auth.test`."""
        client = SlackClient(bot_token)
        auth = await client.auth_test()
        logger.info("slack.auth_ok", user_id=auth.user_id, bot_id=auth.bot_id)
        socket = SocketModeClient(
            client, app_token, reconnect_delay_s=reconnect_delay_s
        )
        return cls(
            client,
            socket,
            bot_id=auth.bot_id,
            command_events_capacity=command_events_capacity,
        )

    @classmethod
    async def from_config(cls, config: BotConfig) -> SlackBot:
        setup_logging(debug=config.debug)
        return await cls.create(
            config.bot_token,
            config.app_token,
            command_events_capacity=config.command_events_capacity,
            reconnect_delay_s=config.reconnect_delay_s,
        )

    @property
    def client(self) -> SlackClient:
        return self._client

    @property
    def socket(self) -> SocketModeClient:
        return self._socket

    @property
    def bot_id(self) -> str | None:
        return self._bot_id

    def _ensure_setup(self) -> None:
        if self._dispatcher is not None:
            raise RuntimeError("cannot register handlers after listen() has started")

    def bot_commands(self) -> tuple[BotCommand, ...]:
        """Registered commands; includes `help` once `listen()` has started."""
        if self._registry is not None:
            return self._registry.commands
        return self._builder.commands

    def command(self, usage: str, definition: CommandDefinition) -> None:
        self._ensure_setup()
        self._builder.command(usage, definition)

    def link(self, domain: str, definition: LinkShareDefinition) -> None:
        self._ensure_setup()
        self._builder.link(domain, definition)

    def interact(self, handler: InteractionHandler) -> None:
        self._ensure_setup()
        self._interaction = handler

    def message(self, handler: MessageHandler) -> None:
        self._ensure_setup()
        self._message = handler

    def help(self, definition: CommandDefinition) -> None:
        self._ensure_setup()
        self._help_definition = definition

    def init(self, handler: InitHandler) -> None:
        self._ensure_setup()
        self._init = handler

    def err(self, handler: ErrorHandler) -> None:
        self._ensure_setup()
        self._error = handler

    def unauthorized_error(self, error: BaseException | str) -> None:
        self._ensure_setup()
        self._unauthorized_error = error

    def custom_request(self, factory: RequestFactory) -> None:
        self._ensure_setup()
        self._request_factory = factory

    def custom_response(self, factory: ResponseFactory) -> None:
        self._ensure_setup()
        self._response_factory = factory

    def command_events(self) -> MemoryObjectReceiveStream[CommandEvent]:
        """Read side of the command observer stream (drop-on-full)."""
        return self._command_receive

    async def get_user_info(self, user: str) -> dict[str, Any]:
        return await self._client.users_info(user)

    def _build_dispatcher(self) -> Dispatcher:
        registry = self._builder.build(help_definition=self._help_definition)
        self._registry = registry
        return Dispatcher(
            DispatchConfig(
                registry=registry,
                client=self._client,
                bot_id=self._bot_id,
                handlers=DispatchHandlers(
                    interaction=self._interaction,
                    message=self._message,
                    init=self._init,
                    error=self._error,
                ),
                command_events=self._command_send,
                unauthorized_error=self._unauthorized_error,
                request_factory=self._request_factory,
                response_factory=self._response_factory,
                socket=self._socket,
            )
        )

    async def listen(self, source: EventSource | None = None) -> None:
        """Run the dispatch loop until `stop()` or the source closes.

        With no explicit source the Socket Mode connection is opened and kept
        alive for the duration of the loop.
        """
        if self._dispatcher is not None:
            raise RuntimeError("listen() has already been started")
        dispatcher = self._build_dispatcher()
        self._dispatcher = dispatcher
        if self._stop_requested:
            dispatcher.stop()
        if source is not None:
            await dispatcher.run(source)
            return
        async with anyio.create_task_group() as tg:
            tg.start_soon(self._socket.run)
            await dispatcher.run(self._socket)
            tg.cancel_scope.cancel()

    def stop(self) -> None:
        """Stop the listen loop; a stop before `listen()` makes it return at once."""
        self._stop_requested = True
        if self._dispatcher is not None:
            self._dispatcher.stop()

    async def close(self) -> None:
        self._command_send.close()
        await self._client.close()
