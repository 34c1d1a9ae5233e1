"""Socket Mode event source.

The client owns the websocket and reconnects with a fixed delay; it never
interprets events beyond the envelope. `hello` frames are swallowed,
`disconnect` frames trigger a reconnect. Lifecycle changes are reported as
synthetic `connecting`, `connected` and `connection_error` events on the same
stream the dispatcher reads from.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs

import anyio
import httpx
import websockets
from websockets.exceptions import WebSocketException

from ..errors import SlackApiError
from ..logging import get_logger
from ..types import (
    EVENT_CONNECTED,
    EVENT_CONNECTING,
    EVENT_CONNECTION_ERROR,
    SocketEvent,
)
from .api import SlackClient
from .content_builders import _build_ack_frame

logger = get_logger(__name__)

FRAME_HELLO = "hello"
FRAME_DISCONNECT = "disconnect"
DEFAULT_RECONNECT_DELAY_S = 1.0
DEFAULT_BUFFER_SIZE = 100


def _parse_form_payload(raw: str) -> dict[str, str]:
    parsed = parse_qs(raw, keep_blank_values=True)
    return {key: values[-1] if values else "" for key, values in parsed.items()}


def _coerce_socket_payload(payload: object) -> object:
    if not isinstance(payload, str):
        return payload
    raw = payload.strip()
    if raw.startswith("{") and raw.endswith("}"):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
    parsed = _parse_form_payload(raw)
    if "payload" in parsed:
        try:
            decoded = json.loads(parsed["payload"])
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, dict):
            return decoded
    return parsed


def _parse_frame(raw: str | bytes) -> SocketEvent | None:
    """Decode one websocket frame into a raw event, or None if unusable."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", "ignore")
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("slack.socket.bad_payload")
        return None
    if not isinstance(envelope, dict):
        logger.warning("slack.socket.bad_payload")
        return None
    frame_type = envelope.get("type")
    if not isinstance(frame_type, str) or not frame_type:
        logger.warning("slack.socket.missing_type")
        return None
    envelope_id = envelope.get("envelope_id")
    if not isinstance(envelope_id, str) or not envelope_id:
        envelope_id = None
    return SocketEvent(
        type=frame_type,
        payload=_coerce_socket_payload(envelope.get("payload")),
        envelope_id=envelope_id,
    )


class SocketModeClient:
    def __init__(
        self,
        client: SlackClient,
        app_token: str,
        *,
        reconnect_delay_s: float = DEFAULT_RECONNECT_DELAY_S,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self._client = client
        self._app_token = app_token
        self._reconnect_delay_s = max(0.0, float(reconnect_delay_s))
        self._connect = connect
        self._ws: Any = None
        self._send, self._receive = anyio.create_memory_object_stream[SocketEvent](
            max_buffer_size=buffer_size
        )

    async def receive(self) -> SocketEvent:
        """Next raw event; raises `anyio.EndOfStream` once `run()` has exited."""
        return await self._receive.receive()

    async def ack(self, event: SocketEvent) -> None:
        if event.envelope_id is None:
            return
        ws = self._ws
        if ws is None:
            logger.warning(
                "slack.socket.ack_dropped",
                envelope_id=event.envelope_id,
                type=event.type,
            )
            return
        try:
            await ws.send(json.dumps(_build_ack_frame(event.envelope_id)))
        except (WebSocketException, OSError) as exc:
            logger.warning(
                "slack.socket.ack_failed",
                envelope_id=event.envelope_id,
                error=str(exc),
            )

    async def run(self) -> None:
        """Hold the connection open until cancelled."""
        async with self._send:
            while True:
                await self._send.send(SocketEvent(type=EVENT_CONNECTING))
                try:
                    socket_url = await self._client.open_socket_url(self._app_token)
                except (SlackApiError, httpx.HTTPError) as exc:
                    logger.warning("slack.socket.open_failed", error=str(exc))
                    await self._send.send(
                        SocketEvent(type=EVENT_CONNECTION_ERROR, payload=str(exc))
                    )
                    await anyio.sleep(self._reconnect_delay_s)
                    continue

                try:
                    async with self._connect(
                        socket_url,
                        ping_interval=10,
                        ping_timeout=10,
                    ) as ws:
                        self._ws = ws
                        await self._send.send(SocketEvent(type=EVENT_CONNECTED))
                        await self._read_frames(ws)
                except (WebSocketException, OSError) as exc:
                    logger.warning("slack.socket_failed", error=str(exc))
                    await self._send.send(
                        SocketEvent(type=EVENT_CONNECTION_ERROR, payload=str(exc))
                    )
                finally:
                    self._ws = None

                await anyio.sleep(self._reconnect_delay_s)

    async def _read_frames(self, ws: Any) -> None:
        async for raw in ws:
            event = _parse_frame(raw)
            if event is None:
                continue
            if event.type == FRAME_HELLO:
                logger.info("slack.socket.hello")
                continue
            if event.type == FRAME_DISCONNECT:
                logger.info("slack.socket.disconnect")
                return
            await self._send.send(event)
