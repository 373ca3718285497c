"""Token types, data structures, recognition tables and character helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

# Column width of a tab, both for locations and for indentation.
TAB_WIDTH = 4


class TokenType(Enum):
    KEYWORD = auto()
    IDENTIFIER = auto()
    PUNCTUATION = auto()
    OPERATOR = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    COMMENT = auto()  # // to end of line
    MULTILINE_COMMENT = auto()  # /* ... */


class Keyword(Enum):
    FUNCTION = "function"
    END_FUNCTION = "endfunction"
    IF = "if"
    THEN = "then"
    ELSE_IF = "elseif"
    ELSE = "else"
    END_IF = "endif"
    SWITCH = "switch"
    CASE = "case"
    DEFAULT = "default"
    END_SWITCH = "endswitch"
    WHILE = "while"
    END_WHILE = "endwhile"
    DO = "do"
    UNTIL = "until"
    FOR = "for"
    TO = "to"
    NEXT = "next"
    RETURN = "return"


class Punctuation(Enum):
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    BY_REF = ":byRef"
    BY_VAL = ":byVal"
    COLON = ":"
    COMMA = ","
    QUOTE = '"'


class Operator(Enum):
    EQUALS = "="
    TIMES = "*"
    PLUS = "+"
    MINUS = "-"
    DIVIDE = "/"
    COMPARISON = "=="
    NOT_EQUALS = "!="
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    INCREMENT = "+="


@dataclass(frozen=True, slots=True)
class Loc:
    """Source location: zero-based line and column, zero-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open source range from start to stop location."""

    start: Loc
    stop: Loc


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    Equality considers only the type and the payload, so tokens produced from
    differently laid out sources compare equal when they mean the same thing.
    """

    type: TokenType
    value: Keyword | Punctuation | Operator | str | int | float
    raw: str = field(compare=False)
    span: Span = field(compare=False)


KEYWORDS: dict[str, Keyword] = {kw.value: kw for kw in Keyword}

# Longest literal first, so "==" wins over "=" and ":byRef" over ":".
PUNCTUATION_TABLE: tuple[Punctuation, ...] = tuple(
    sorted(Punctuation, key=lambda p: len(p.value), reverse=True)
)
SYMBOL_OPERATORS: tuple[Operator, ...] = tuple(
    sorted(
        (op for op in Operator if not op.value.isalpha()),
        key=lambda op: len(op.value),
        reverse=True,
    )
)
WORD_OPERATORS: dict[str, Operator] = {op.value: op for op in Operator if op.value.isalpha()}

INT64_MAX = 2**63 - 1


def is_ident_start(ch: str) -> bool:
    """Return True if ch can begin an identifier (ASCII letters only)."""
    return ch.isascii() and ch.isalpha()


def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue an identifier."""
    return ch.isascii() and ch.isalnum()


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return ch != "" and ch in "0123456789"


def is_number_char(ch: str) -> bool:
    """Return True if ch belongs to a numeral run (validated when parsed)."""
    return ch == "." or is_ident_char(ch)
