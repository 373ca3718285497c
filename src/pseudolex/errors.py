"""Error types with formatted source context."""

from __future__ import annotations

from pseudolex.tokens import Loc, Span


def _render_snippet(message: str, span: Span, source: str, filename: str) -> str:
    lines = source.splitlines(keepends=True)
    start = span.start
    line_idx = start.line

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Character index within the line; columns count tabs as several cells
    line_start = source.rfind("\n", 0, start.offset) + 1
    char_idx = max(0, min(start.offset - line_start, len(source_line)))

    # Underline the full span when on one line, otherwise to end of line
    if span.stop.line == start.line:
        underline_len = max(1, span.stop.offset - start.offset)
    else:
        underline_len = max(1, len(source_line) - char_idx)

    # Keep tabs in the padding so carets line up under tab-indented code
    pad = "".join("\t" if c == "\t" else " " for c in source_line[:char_idx])
    carets = "^" * underline_len

    line_num = str(start.line + 1)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{start.line + 1}:{start.column + 1}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first lexing error, with span and source context."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    @property
    def position(self) -> Loc:
        return self.span.start

    def format(self, filename: str = "input.pseudo") -> str:
        return _render_snippet(self.message, self.span, self.source, filename)


class UnexpectedToken(LexError):
    """A required keyword, punctuation, operator or operand was not found."""

    def __init__(
        self,
        span: Span,
        lexeme: str | None,
        source: str,
        expected: str | None = None,
    ) -> None:
        self.lexeme = lexeme
        self.expected = expected
        found = _describe_lexeme(lexeme)
        if expected is None:
            message = f"unexpected {found}"
        else:
            message = f"expected {expected}, found {found}"
        super().__init__(message, span, source)


class IndentationMismatch(LexError):
    """A line's indentation does not fit the stack of open blocks."""

    def __init__(self, location: Loc, source: str, detail: str) -> None:
        self.location = location
        super().__init__(f"indentation error: {detail}", Span(location, location), source)


class UnexpectedEndOfInput(LexError):
    """Input ended while a token, string, expression or block was incomplete."""

    def __init__(self, context: str, span: Span, source: str) -> None:
        self.context = context
        super().__init__(f"unexpected end of input in {context}", span, source)


class InvalidNumberLiteral(LexError):
    """A numeral could not be read as the implied integer or float."""

    def __init__(self, span: Span, text: str, source: str, reason: str = "") -> None:
        self.text = text
        message = f"invalid number literal '{text}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, span, source)


def _describe_lexeme(lexeme: str | None) -> str:
    if lexeme is None:
        return "end of input"
    if lexeme == "":
        return "end of line"
    return f"'{lexeme}'"
