"""Tests for client/socket.py - Socket Mode framing and connection loop."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import anyio
import pytest

from slackerbot.client.socket import (
    SocketModeClient,
    _coerce_socket_payload,
    _parse_frame,
)
from slackerbot.types import SocketEvent


class FakeWebSocket:
    def __init__(self, frames: list[str | bytes]) -> None:
        self._frames = frames
        self.sent: list[str] = []

    async def __aenter__(self) -> FakeWebSocket:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self._frames:
            yield frame

    async def send(self, data: str) -> None:
        self.sent.append(data)


# --- framing ---


def test_parse_frame_with_envelope() -> None:
    frame = json.dumps(
        {"envelope_id": "e1", "type": "events_api", "payload": {"event": {}}}
    )
    assert _parse_frame(frame) == SocketEvent(
        type="events_api", payload={"event": {}}, envelope_id="e1"
    )


def test_parse_frame_decodes_bytes() -> None:
    event = _parse_frame(b'{"type": "hello"}')
    assert event == SocketEvent(type="hello")


@pytest.mark.parametrize("frame", ["not json", "[1, 2]", '{"payload": {}}'])
def test_parse_frame_rejects_bad_frames(frame: str) -> None:
    assert _parse_frame(frame) is None


def test_coerce_payload_json_string() -> None:
    assert _coerce_socket_payload('{"a": 1}') == {"a": 1}


def test_coerce_payload_form_encoded() -> None:
    assert _coerce_socket_payload("text=greet+Ada&user_id=U1") == {
        "text": "greet Ada",
        "user_id": "U1",
    }


def test_coerce_payload_form_wrapped_json() -> None:
    raw = "payload=%7B%22type%22%3A%22block_actions%22%7D"
    assert _coerce_socket_payload(raw) == {"type": "block_actions"}


def test_coerce_payload_passes_objects_through() -> None:
    payload = {"type": "x"}
    assert _coerce_socket_payload(payload) is payload


# --- ack ---


@pytest.mark.anyio
async def test_ack_sends_envelope_id() -> None:
    socket = SocketModeClient(SimpleNamespace(), "xapp")  # type: ignore[arg-type]
    ws = FakeWebSocket([])
    socket._ws = ws

    await socket.ack(SocketEvent("events_api", envelope_id="e1"))
    await socket.ack(SocketEvent("connected"))

    assert [json.loads(data) for data in ws.sent] == [{"envelope_id": "e1"}]


@pytest.mark.anyio
async def test_ack_without_connection_is_dropped() -> None:
    socket = SocketModeClient(SimpleNamespace(), "xapp")  # type: ignore[arg-type]

    await socket.ack(SocketEvent("events_api", envelope_id="e1"))


# --- connection loop ---


@pytest.mark.anyio
async def test_run_emits_lifecycle_and_events() -> None:
    event_frame = json.dumps(
        {
            "envelope_id": "e1",
            "type": "slash_commands",
            "payload": {"text": "ping", "channel_id": "C1", "user_id": "U1"},
        }
    )
    sockets = [
        FakeWebSocket(
            [json.dumps({"type": "hello"}), event_frame, json.dumps({"type": "disconnect"})]
        )
    ]
    urls: list[str] = []

    def connect(url: str, **kwargs: Any) -> FakeWebSocket:
        urls.append(url)
        if not sockets:
            raise OSError("connection refused")
        return sockets.pop(0)

    client = SimpleNamespace(open_socket_url=AsyncMock(return_value="wss://socket.test"))
    socket = SocketModeClient(
        client,  # type: ignore[arg-type]
        "xapp",
        reconnect_delay_s=0,
        connect=connect,
    )

    received: list[SocketEvent] = []
    with anyio.fail_after(1):
        async with anyio.create_task_group() as tg:
            tg.start_soon(socket.run)
            for _ in range(5):
                received.append(await socket.receive())
            tg.cancel_scope.cancel()

    assert [event.type for event in received] == [
        "connecting",
        "connected",
        "slash_commands",
        "connecting",
        "connection_error",
    ]
    assert received[2].envelope_id == "e1"
    assert received[2].payload["text"] == "ping"
    assert received[4].payload == "connection refused"
    assert urls[:2] == ["wss://socket.test", "wss://socket.test"]
    client.open_socket_url.assert_awaited_with("xapp")

    with pytest.raises(anyio.EndOfStream):
        while True:
            await socket.receive()
