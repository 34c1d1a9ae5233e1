"""Normalized Socket Mode events.

Raw envelopes are decoded once at the boundary (see
`slackerbot.bridge.classify`) into one of the variants below; the dispatch
loop only ever matches on these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

MessageKind = Literal["message", "app_mention", "link_shared"]

EVENT_CONNECTING = "connecting"
EVENT_CONNECTED = "connected"
EVENT_CONNECTION_ERROR = "connection_error"

DIRECT_CHANNEL_MARKER = "D"
SLACKBOT_USER = "USLACKBOT"


@dataclass(frozen=True, slots=True)
class SocketEvent:
    """A raw event as delivered by the event source.

    `envelope_id` is set when the platform expects an acknowledgment.
    """

    type: str
    payload: Any = None
    envelope_id: str | None = None


@dataclass(frozen=True, slots=True)
class SharedLink:
    domain: str
    url: str


@dataclass(frozen=True, slots=True)
class Connecting:
    pass


@dataclass(frozen=True, slots=True)
class ConnectionFailed:
    error: str = ""


@dataclass(frozen=True, slots=True)
class Connected:
    pass


@dataclass(frozen=True, slots=True)
class InteractiveAction:
    channel: str
    user: str
    callback_id: str
    block_id: str
    action_id: str
    value: str
    payload: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True, slots=True)
class SlashCommand:
    channel: str
    user: str
    text: str
    command: str = ""
    payload: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """Common shape for message, app mention, link shared and command events."""

    channel: str
    user: str
    text: str
    kind: MessageKind | None = None
    timestamp: str | None = None
    thread_timestamp: str | None = None
    bot_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict, repr=False)
    links: tuple[SharedLink, ...] = ()

    def is_thread(self) -> bool:
        return bool(self.thread_timestamp) and self.thread_timestamp != self.timestamp

    def is_bot(self) -> bool:
        return bool(self.bot_id) or self.user == SLACKBOT_USER

    def is_direct_message(self) -> bool:
        return self.channel.startswith(DIRECT_CHANNEL_MARKER)


@dataclass(frozen=True, slots=True)
class Unhandled:
    type: str
    payload: Any = None
    reason: str = ""


NormalizedEvent = (
    Connecting
    | ConnectionFailed
    | Connected
    | InteractiveAction
    | SlashCommand
    | MessageEvent
    | Unhandled
)
