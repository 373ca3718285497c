"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TextIO

from pseudolex.tokens import Token


def dump_tokens(tokens: list[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one token per line as `line:col TYPE value` to *file*."""
    for tok in tokens:
        start = tok.span.start
        loc = f"{start.line + 1}:{start.column + 1}"
        file.write(f"{loc:>8}  {tok.type.name:<17} {_describe_value(tok)}\n")


def _describe_value(tok: Token) -> str:
    if isinstance(tok.value, Enum):
        return f"{tok.value.name} {tok.value.value!r}"
    return repr(tok.value)


def token_to_dict(tok: Token) -> dict[str, Any]:
    """JSON-ready form of a token."""
    if isinstance(tok.value, Enum):
        value: Any = tok.value.name
    else:
        value = tok.value
    return {
        "type": tok.type.name,
        "value": value,
        "raw": tok.raw,
        "span": {
            "start": [tok.span.start.line, tok.span.start.column],
            "stop": [tok.span.stop.line, tok.span.stop.column],
        },
    }

