"""Shared test fixtures and helpers."""

from __future__ import annotations

import textwrap

import pytest

from pseudolex.lexer import LexerOptions, tokenize
from pseudolex.tokens import Keyword, Operator, Punctuation, Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that dedents source and tokenizes it."""

    def _lex(source: str, **options: bool) -> list[Token]:
        return tokenize(textwrap.dedent(source), LexerOptions(**options))

    return _lex


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[object]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], tt: TokenType) -> list[Token]:
    """Return all tokens of the given type."""
    return [t for t in tokens if t.type == tt]


def values_of(tokens: list[Token]) -> list[object]:
    """Token payloads, for comparing whole streams at a glance."""
    return [t.value for t in tokens]


# Shorthands for building expected streams
KW = Keyword
OP = Operator
P = Punctuation
