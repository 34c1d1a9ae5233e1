"""Content builders for Slack message payloads."""

from __future__ import annotations

from typing import Any

ERROR_FORMAT = "*Error:* _{}_"


def _build_message_payload(
    *,
    channel: str,
    text: str,
    thread_ts: str | None = None,
    blocks: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a chat.postMessage payload, threading it when `thread_ts` is set."""
    content: dict[str, Any] = {
        "channel": channel,
        "text": text,
    }
    if blocks:
        content["blocks"] = blocks
    if thread_ts:
        content["thread_ts"] = thread_ts
    return content


def _build_error_text(error: BaseException | str) -> str:
    return ERROR_FORMAT.format(str(error))


def _build_ack_frame(envelope_id: str) -> dict[str, Any]:
    """Build the Socket Mode acknowledgment frame for an envelope."""
    return {"envelope_id": envelope_id}
