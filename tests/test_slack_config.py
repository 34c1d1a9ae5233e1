"""Tests for config.py - TOML loading and env overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from slackerbot.config import BotConfig, load_bot_config, parse_bot_config
from slackerbot.errors import ConfigError


@pytest.fixture(autouse=True)
def _clear_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_APP_TOKEN", raising=False)


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "slackerbot.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_load_config_from_file(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        '[slack]\nbot_token = "xoxb-1"\napp_token = "xapp-1"\n'
        "debug = true\ncommand_events_capacity = 5\nreconnect_delay_s = 2.5\n",
    )

    assert load_bot_config(path) == BotConfig(
        bot_token="xoxb-1",
        app_token="xapp-1",
        debug=True,
        command_events_capacity=5,
        reconnect_delay_s=2.5,
    )


def test_defaults(tmp_path: Path) -> None:
    path = _write(tmp_path, '[slack]\nbot_token = "xoxb-1"\napp_token = "xapp-1"\n')

    cfg = load_bot_config(path)

    assert cfg.debug is False
    assert cfg.command_events_capacity == 100
    assert cfg.reconnect_delay_s == 1.0


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
    path = _write(tmp_path, '[slack]\nbot_token = "xoxb-1"\napp_token = "xapp-1"\n')

    cfg = load_bot_config(path)

    assert cfg.bot_token == "xoxb-env"
    assert cfg.app_token == "xapp-1"


def test_env_only_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
    monkeypatch.setenv("SLACK_APP_TOKEN", "xapp-env")

    cfg = parse_bot_config({"slack": {}})

    assert (cfg.bot_token, cfg.app_token) == ("xoxb-env", "xapp-env")


def test_missing_token_raises() -> None:
    with pytest.raises(ConfigError, match="slack.app_token"):
        parse_bot_config({"slack": {"bot_token": "xoxb-1"}})


def test_missing_section_raises() -> None:
    with pytest.raises(ConfigError, match="Missing config key: slack"):
        parse_bot_config({})


def test_invalid_types_raise() -> None:
    base = {"bot_token": "b", "app_token": "a"}
    with pytest.raises(ConfigError, match="debug"):
        parse_bot_config({"slack": {**base, "debug": "yes"}})
    with pytest.raises(ConfigError, match="command_events_capacity"):
        parse_bot_config({"slack": {**base, "command_events_capacity": 0}})
    with pytest.raises(ConfigError, match="reconnect_delay_s"):
        parse_bot_config({"slack": {**base, "reconnect_delay_s": -1}})


def test_unreadable_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read config"):
        load_bot_config(tmp_path / "missing.toml")


def test_invalid_toml_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "[slack\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_bot_config(path)
