"""Minimal async Slack Web API client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import SlackApiError
from ..logging import get_logger
from .content_builders import _build_message_payload

logger = get_logger(__name__)

SLACK_API_URL = "https://slack.com/api"
DEFAULT_TIMEOUT_S = 20.0


@dataclass(frozen=True, slots=True)
class AuthInfo:
    user_id: str | None
    user_name: str | None
    bot_id: str | None
    team_id: str | None


def _parse_response(method: str, response: httpx.Response) -> dict[str, Any]:
    if response.status_code == 401:
        raise SlackApiError(method, "unauthorized (401)")
    if response.status_code >= 400:
        raise SlackApiError(method, f"http {response.status_code}")
    try:
        data = response.json()
    except ValueError as exc:
        raise SlackApiError(method, "invalid JSON response") from exc
    if not isinstance(data, dict):
        raise SlackApiError(method, "non-object JSON response")
    if not data.get("ok"):
        raise SlackApiError(method, str(data.get("error") or "unknown_error"))
    return data


def _opt_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


class SlackClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = SLACK_API_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient(timeout=timeout_s)

    async def close(self) -> None:
        await self._http.aclose()

    async def call(
        self,
        method: str,
        *,
        payload: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        response = await self._http.post(
            f"{self._base_url}/{method}",
            headers={"Authorization": f"Bearer {token or self._token}"},
            json=payload or {},
        )
        return _parse_response(method, response)

    async def auth_test(self) -> AuthInfo:
        data = await self.call("auth.test")
        return AuthInfo(
            user_id=_opt_str(data.get("user_id")),
            user_name=_opt_str(data.get("user")),
            bot_id=_opt_str(data.get("bot_id")),
            team_id=_opt_str(data.get("team_id")),
        )

    async def post_message(
        self,
        *,
        channel: str,
        text: str,
        thread_ts: str | None = None,
        blocks: list[dict[str, Any]] | None = None,
    ) -> str | None:
        """Post a message and return its timestamp."""
        payload = _build_message_payload(
            channel=channel, text=text, thread_ts=thread_ts, blocks=blocks
        )
        data = await self.call("chat.postMessage", payload=payload)
        return _opt_str(data.get("ts"))

    async def users_info(self, user: str) -> dict[str, Any]:
        response = await self._http.get(
            f"{self._base_url}/users.info",
            headers={"Authorization": f"Bearer {self._token}"},
            params={"user": user},
        )
        data = _parse_response("users.info", response)
        info = data.get("user")
        if not isinstance(info, dict):
            raise SlackApiError("users.info", "missing user object")
        return info

    async def open_socket_url(self, app_token: str) -> str:
        """Request a Socket Mode websocket URL using the app-level token."""
        data = await self.call("apps.connections.open", token=app_token)
        url = _opt_str(data.get("url"))
        if url is None:
            raise SlackApiError("apps.connections.open", "missing url")
        logger.debug("slack.socket.url_opened")
        return url
