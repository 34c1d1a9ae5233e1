from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .bridge.dispatch import DEFAULT_COMMAND_EVENTS_CAPACITY
from .client.socket import DEFAULT_RECONNECT_DELAY_S
from .errors import ConfigError
from .logging import get_logger

logger = get_logger(__name__)

CONFIG_SECTION = "slack"


@dataclass(frozen=True, slots=True)
class BotConfig:
    bot_token: str
    app_token: str
    debug: bool = False
    command_events_capacity: int = DEFAULT_COMMAND_EVENTS_CAPACITY
    reconnect_delay_s: float = DEFAULT_RECONNECT_DELAY_S


def _expand_path(s: str | Path) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(str(s))))


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return data


def _cfg_get(d: dict[str, Any], *keys: str) -> Any:
    cur: Any = d
    for key in keys:
        if not isinstance(cur, dict) or key not in cur:
            raise ConfigError("Missing config key: " + ".".join(keys))
        cur = cur[key]
    return cur


def _env(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def _resolve_token(
    section: dict[str, Any], key: str, env_name: str
) -> tuple[str, str]:
    env_value = _env(env_name)
    if env_value:
        return env_value, "env"
    cfg_value = str(section.get(key) or "").strip()
    if cfg_value:
        return cfg_value, "config"
    raise ConfigError(f"Missing {CONFIG_SECTION}.{key} (or env {env_name})")


def _as_bool(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{CONFIG_SECTION}.{key} must be a boolean")
    return value


def _as_number(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{CONFIG_SECTION}.{key} must be a number")
    if value < 0:
        raise ConfigError(f"{CONFIG_SECTION}.{key} must not be negative")
    return value


def parse_bot_config(data: dict[str, Any]) -> BotConfig:
    section = _cfg_get(data, CONFIG_SECTION)
    if not isinstance(section, dict):
        raise ConfigError(f"{CONFIG_SECTION} must be a table")

    bot_token, bot_token_source = _resolve_token(
        section, "bot_token", "SLACK_BOT_TOKEN"
    )
    app_token, app_token_source = _resolve_token(
        section, "app_token", "SLACK_APP_TOKEN"
    )
    capacity = int(
        _as_number(section, "command_events_capacity", DEFAULT_COMMAND_EVENTS_CAPACITY)
    )
    if capacity < 1:
        raise ConfigError(f"{CONFIG_SECTION}.command_events_capacity must be >= 1")

    logger.info(
        "config.tokens_resolved",
        bot_token_source=bot_token_source,
        app_token_source=app_token_source,
    )
    return BotConfig(
        bot_token=bot_token,
        app_token=app_token,
        debug=_as_bool(section, "debug", False),
        command_events_capacity=capacity,
        reconnect_delay_s=float(
            _as_number(section, "reconnect_delay_s", DEFAULT_RECONNECT_DELAY_S)
        ),
    )


def load_bot_config(path: str | Path) -> BotConfig:
    """Load a `[slack]` table from a TOML file, with env token overrides."""
    return parse_bot_config(_load_toml(_expand_path(path)))
