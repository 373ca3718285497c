"""Lexical scanner for an indentation-sensitive pseudocode language."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pseudolex.lexer import LexerOptions
    from pseudolex.tokens import Token

__version__ = "0.1.0"


def lex(source: str, options: LexerOptions | None = None) -> list[Token]:
    """Scan pseudocode source into a flat token list, raising LexError on failure."""
    from pseudolex.lexer import tokenize

    return tokenize(source, options)
