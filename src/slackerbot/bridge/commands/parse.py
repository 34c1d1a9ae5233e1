"""Usage pattern tokenizing and matching."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

PARAMETER_OPEN = "{"
PARAMETER_CLOSE = "}"


@dataclass(frozen=True, slots=True)
class Token:
    word: str
    is_parameter: bool = False


def _parameter_name(word: str) -> str | None:
    if len(word) <= 2:
        return None
    if not (word.startswith(PARAMETER_OPEN) and word.endswith(PARAMETER_CLOSE)):
        return None
    return word[1:-1]


def split_words(text: str) -> tuple[str, ...]:
    """Split text on runs of whitespace."""
    return tuple(text.split())


def tokenize(pattern: str) -> tuple[Token, ...]:
    """Split a usage pattern into literal and parameter tokens.

    A word wrapped in braces (`{name}`) is a parameter named `name`; every
    other word is a literal. There is no escaping, so `{}` is a literal.
    """
    tokens: list[Token] = []
    for word in split_words(pattern):
        name = _parameter_name(word)
        if name is None:
            tokens.append(Token(word=word))
        else:
            tokens.append(Token(word=name, is_parameter=True))
    return tuple(tokens)


def match(
    pattern: str | Sequence[Token], text: str
) -> tuple[dict[str, str], bool]:
    """Match text against a whole usage pattern.

    Args:
        pattern: A usage pattern string or its pre-computed tokens.
        text: The input to match.

    Returns:
        A tuple of (parameters, matched). Parameters are empty when the
        match fails.
    """
    tokens = tokenize(pattern) if isinstance(pattern, str) else pattern
    words = split_words(text)
    if len(words) != len(tokens):
        return {}, False
    parameters: dict[str, str] = {}
    for token, word in zip(tokens, words):
        if token.is_parameter:
            parameters[token.word] = word
            continue
        if token.word != word:
            return {}, False
    return parameters, True
