"""Decode raw Socket Mode events into normalized events."""

from __future__ import annotations

from typing import Any

from ..types import (
    EVENT_CONNECTED,
    EVENT_CONNECTING,
    EVENT_CONNECTION_ERROR,
    Connected,
    Connecting,
    ConnectionFailed,
    InteractiveAction,
    MessageEvent,
    MessageKind,
    NormalizedEvent,
    SharedLink,
    SlashCommand,
    SocketEvent,
    Unhandled,
)

EVENT_INTERACTIVE = "interactive"
EVENT_SLASH_COMMANDS = "slash_commands"
EVENT_EVENTS_API = "events_api"

MESSAGE_KINDS: frozenset[str] = frozenset({"message", "app_mention", "link_shared"})


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _nested_id(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if isinstance(value, dict):
        return _str(value.get("id"))
    return _str(value)


def _classify_interactive(raw: SocketEvent) -> NormalizedEvent:
    payload = raw.payload
    if not isinstance(payload, dict):
        return Unhandled(raw.type, payload, "payload is not an object")
    if not isinstance(payload.get("user"), dict):
        return Unhandled(raw.type, payload, "missing user")
    actions = payload.get("actions")
    if not isinstance(actions, list) or not actions:
        return Unhandled(raw.type, payload, "missing actions")
    # Only the first block action of a callback is routed.
    action = actions[0]
    if not isinstance(action, dict):
        return Unhandled(raw.type, payload, "action is not an object")
    return InteractiveAction(
        channel=_nested_id(payload, "channel"),
        user=_nested_id(payload, "user"),
        callback_id=_str(payload.get("callback_id")),
        block_id=_str(action.get("block_id")),
        action_id=_str(action.get("action_id")),
        value=_str(action.get("value")),
        payload=payload,
    )


def _classify_slash_command(raw: SocketEvent) -> NormalizedEvent:
    payload = raw.payload
    if not isinstance(payload, dict):
        return Unhandled(raw.type, payload, "payload is not an object")
    channel = payload.get("channel_id")
    user = payload.get("user_id")
    if not isinstance(channel, str) or not isinstance(user, str):
        return Unhandled(raw.type, payload, "missing channel_id or user_id")
    return SlashCommand(
        channel=channel,
        user=user,
        text=_str(payload.get("text")),
        command=_str(payload.get("command")),
        payload=payload,
    )


def _parse_links(value: object) -> tuple[SharedLink, ...]:
    if not isinstance(value, list):
        return ()
    links: list[SharedLink] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        domain = item.get("domain")
        url = item.get("url")
        if not isinstance(domain, str) or not isinstance(url, str):
            continue
        links.append(SharedLink(domain=domain, url=url))
    return tuple(links)


def _message_event(kind: MessageKind, event: dict[str, Any]) -> MessageEvent:
    if kind == "link_shared":
        return MessageEvent(
            channel=_str(event.get("channel")),
            user=_str(event.get("user")),
            text="",
            kind=kind,
            timestamp=_opt_str(event.get("message_ts")),
            thread_timestamp=_opt_str(event.get("thread_ts")),
            payload=event,
            links=_parse_links(event.get("links")),
        )
    return MessageEvent(
        channel=_str(event.get("channel")),
        user=_str(event.get("user")),
        text=_str(event.get("text")),
        kind=kind,
        timestamp=_opt_str(event.get("ts")),
        thread_timestamp=_opt_str(event.get("thread_ts")),
        bot_id=_opt_str(event.get("bot_id")),
        payload=event,
    )


def _classify_events_api(raw: SocketEvent) -> NormalizedEvent:
    payload = raw.payload
    if not isinstance(payload, dict):
        return Unhandled(raw.type, payload, "payload is not an object")
    event = payload.get("event")
    if not isinstance(event, dict):
        return Unhandled(raw.type, payload, "missing inner event")
    inner_type = event.get("type")
    if inner_type not in MESSAGE_KINDS:
        return Unhandled(raw.type, payload, f"unsupported inner event: {inner_type}")
    return _message_event(inner_type, event)


def classify(raw: SocketEvent) -> NormalizedEvent:
    """Map a raw event to exactly one normalized variant."""
    if raw.type == EVENT_CONNECTING:
        return Connecting()
    if raw.type == EVENT_CONNECTION_ERROR:
        return ConnectionFailed(error=_str(raw.payload))
    if raw.type == EVENT_CONNECTED:
        return Connected()
    if raw.type == EVENT_INTERACTIVE:
        return _classify_interactive(raw)
    if raw.type == EVENT_SLASH_COMMANDS:
        return _classify_slash_command(raw)
    if raw.type == EVENT_EVENTS_API:
        return _classify_events_api(raw)
    return Unhandled(raw.type, raw.payload, "unsupported event type")
