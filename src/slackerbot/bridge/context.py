"""Per-event context handed to handlers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..client.content_builders import _build_error_text
from ..types import MessageEvent

if TYPE_CHECKING:
    from ..client.api import SlackClient
    from ..client.socket import SocketModeClient

_TRUE_VALUES = frozenset({"1", "t", "true"})
_FALSE_VALUES = frozenset({"0", "f", "false"})


@dataclass(frozen=True, slots=True)
class BotContext:
    event: MessageEvent
    client: SlackClient
    socket: SocketModeClient | None = None


class Request:
    """Command invocation with the parameters captured from the usage pattern."""

    def __init__(self, ctx: BotContext, parameters: Mapping[str, str]) -> None:
        self._ctx = ctx
        self._parameters = dict(parameters)

    @property
    def ctx(self) -> BotContext:
        return self._ctx

    @property
    def parameters(self) -> dict[str, str]:
        return dict(self._parameters)

    def param(self, key: str, default: str = "") -> str:
        return self.string_param(key, default)

    def string_param(self, key: str, default: str = "") -> str:
        value = self._parameters.get(key)
        if value is None:
            return default
        return value

    def boolean_param(self, key: str, default: bool = False) -> bool:
        value = self._parameters.get(key)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return default

    def integer_param(self, key: str, default: int = 0) -> int:
        value = self._parameters.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def float_param(self, key: str, default: float = 0.0) -> float:
        value = self._parameters.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default


class ResponseWriter:
    """Sends replies back to the channel the event came from."""

    def __init__(self, ctx: BotContext) -> None:
        self._ctx = ctx

    def _thread_ts(self, in_thread: bool) -> str | None:
        if not in_thread:
            return None
        event = self._ctx.event
        return event.thread_timestamp or event.timestamp

    async def reply(
        self,
        text: str,
        *,
        in_thread: bool = False,
        blocks: list[dict[str, Any]] | None = None,
    ) -> str | None:
        return await self._ctx.client.post_message(
            channel=self._ctx.event.channel,
            text=text,
            thread_ts=self._thread_ts(in_thread),
            blocks=blocks,
        )

    async def report_error(
        self, error: BaseException | str, *, in_thread: bool = False
    ) -> str | None:
        return await self._ctx.client.post_message(
            channel=self._ctx.event.channel,
            text=_build_error_text(error),
            thread_ts=self._thread_ts(in_thread),
        )


RequestFactory = Callable[[BotContext, Mapping[str, str]], Request]
ResponseFactory = Callable[[BotContext], ResponseWriter]
