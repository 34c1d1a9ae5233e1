"""Slack Web API and Socket Mode clients."""

from __future__ import annotations

from .api import AuthInfo, SlackClient
from .socket import SocketModeClient

__all__ = ["AuthInfo", "SlackClient", "SocketModeClient"]
