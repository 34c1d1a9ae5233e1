"""Tests for bridge/commands/parse.py - usage pattern matching."""

from __future__ import annotations

import pytest

from slackerbot.bridge.commands.parse import Token, match, split_words, tokenize


# --- tokenize tests ---


def test_tokenize_literals_and_parameters() -> None:
    assert tokenize("greet {name} now") == (
        Token("greet"),
        Token("name", is_parameter=True),
        Token("now"),
    )


def test_tokenize_is_deterministic() -> None:
    pattern = "deploy {service} to {env}"
    assert tokenize(pattern) == tokenize(pattern)


def test_tokenize_collapses_whitespace() -> None:
    assert tokenize("  ping \t pong ") == (Token("ping"), Token("pong"))


def test_tokenize_empty_braces_are_literal() -> None:
    assert tokenize("{}") == (Token("{}"),)


def test_tokenize_partial_braces_are_literal() -> None:
    assert tokenize("{name x}") == (Token("{name"), Token("x}"))


def test_split_words_empty() -> None:
    assert split_words("   ") == ()


# --- match tests ---


def test_match_captures_parameter() -> None:
    params, matched = match("greet {name}", "greet Ada")
    assert matched is True
    assert params == {"name": "Ada"}


def test_match_rejects_extra_words() -> None:
    params, matched = match("greet {name}", "greet Ada Lovelace")
    assert matched is False
    assert params == {}


def test_match_rejects_missing_words() -> None:
    _, matched = match("greet {name}", "greet")
    assert matched is False


def test_match_literal_only() -> None:
    assert match("ping", "ping") == ({}, True)
    assert match("ping", "pong") == ({}, False)


def test_match_literals_are_case_sensitive() -> None:
    _, matched = match("ping", "PING")
    assert matched is False


def test_match_accepts_precomputed_tokens() -> None:
    tokens = tokenize("add {a} {b}")
    assert match(tokens, "add 1 2") == ({"a": "1", "b": "2"}, True)


def test_match_ignores_surrounding_whitespace() -> None:
    assert match("greet {name}", "  greet   Ada ") == ({"name": "Ada"}, True)


def test_match_repeated_parameter_keeps_last_capture() -> None:
    params, matched = match("{x} and {x}", "one and two")
    assert matched is True
    assert params == {"x": "two"}


@pytest.mark.parametrize(
    ("pattern", "text"),
    [
        ("", ""),
        ("", "anything"),
    ],
)
def test_match_empty_pattern(pattern: str, text: str) -> None:
    _, matched = match(pattern, text)
    assert matched is (text == "")
