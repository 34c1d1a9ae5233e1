"""Error types raised by slackerbot."""

from __future__ import annotations


class SlackbotError(Exception):
    """Base class for slackerbot errors."""


class ConfigError(SlackbotError):
    """Missing or invalid bot configuration."""


class SlackApiError(SlackbotError):
    """The Slack Web API rejected a call."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class UnauthorizedError(SlackbotError):
    """A command's authorization predicate rejected the caller."""


DEFAULT_UNAUTHORIZED_ERROR = UnauthorizedError(
    "You are not authorized to execute this command"
)
