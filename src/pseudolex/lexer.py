"""Pseudocode lexer: converts source text into a flat token stream."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from pseudolex.errors import (
    IndentationMismatch,
    InvalidNumberLiteral,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from pseudolex.tokens import (
    INT64_MAX,
    KEYWORDS,
    PUNCTUATION_TABLE,
    SYMBOL_OPERATORS,
    TAB_WIDTH,
    WORD_OPERATORS,
    Keyword,
    Loc,
    Operator,
    Punctuation,
    Span,
    Token,
    TokenType,
    is_digit,
    is_ident_char,
    is_ident_start,
    is_number_char,
)


@dataclass(frozen=True, slots=True)
class LexerOptions:
    """Optional language surface, off unless a consumer asks for it."""

    do_until: bool = False  # dispatch `do ... until` statements
    argument_modifiers: bool = False  # accept `:byRef` / `:byVal` on parameters


class Lexer:
    """Tokenize pseudocode source text into a list of Token objects.

    Statements are lexed by recursive descent over the source. Blocks are
    delimited by indentation, tracked as a stack of the widths of every open
    block; parentheses are tracked as a depth counter that never goes negative.
    """

    def __init__(self, source: str, options: LexerOptions | None = None) -> None:
        self._source = source
        self._options = options if options is not None else LexerOptions()
        self._pos = 0
        self._line = 0
        self._col = 0
        self._tokens: list[Token] = []
        self._indent_stack: list[int] = []
        self._paren_depth = 0
        self._statement_lexers: dict[Keyword, Callable[[], None]] = {
            Keyword.FUNCTION: self._lex_function,
            Keyword.IF: self._lex_if_statement,
            Keyword.SWITCH: self._lex_switch_statement,
            Keyword.WHILE: self._lex_while_statement,
            Keyword.FOR: self._lex_for_statement,
            Keyword.RETURN: self._lex_return_statement,
        }
        if self._options.do_until:
            self._statement_lexers[Keyword.DO] = self._lex_do_statement

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        self._skip_blank_lines()
        if self._at_end():
            return self._tokens

        # The first statement fixes the top-level indentation width
        self._indent_stack.append(self._measure_indent())
        while not self._at_end():
            self._expect_indent("a statement")
            try:
                self._lex_statement()
            except RecursionError:
                # Blocks recurse once per nesting level
                raise self._indentation_error("blocks nested too deeply") from None
            self._lex_newline(eof_ok=True)
            self._skip_blank_lines()

        if self._paren_depth != 0:
            raise self._end_of_input("parenthesised expression")
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _current_loc(self) -> Loc:
        return Loc(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 0
        elif ch == "\t":
            self._col += TAB_WIDTH
        else:
            self._col += 1
        return ch

    def _advance_n(self, count: int) -> None:
        for _ in range(count):
            self._advance()

    def _peek_token(self) -> str | None:
        """Return the text up to the next whitespace, or None at end of input."""
        if self._at_end():
            return None
        end = self._pos
        while end < len(self._source) and not self._source[end].isspace():
            end += 1
        return self._source[self._pos : end]

    def _word_at(self, idx: int) -> str:
        end = idx
        while end < len(self._source) and is_ident_char(self._source[end]):
            end += 1
        return self._source[idx:end]

    def _peek_word(self) -> str:
        return self._word_at(self._pos)

    def _emit(self, tt: TokenType, value: object, start: Loc) -> Token:
        tok = Token(tt, value, self._source[start.offset : self._pos], Span(start, self._current_loc()))
        self._tokens.append(tok)
        return tok

    def _unexpected(self, start: Loc, expected: str | None = None) -> UnexpectedToken:
        span = Span(start, self._current_loc())
        return UnexpectedToken(span, self._peek_token(), self._source, expected)

    def _end_of_input(self, context: str, start: Loc | None = None) -> UnexpectedEndOfInput:
        end = self._current_loc()
        if start is None:
            start = end
        return UnexpectedEndOfInput(context, Span(start, end), self._source)

    def _indentation_error(self, detail: str) -> IndentationMismatch:
        return IndentationMismatch(self._current_loc(), self._source, detail)

    # ------------------------------------------------------------------
    # Whitespace and newlines
    # ------------------------------------------------------------------

    def _consume_spaces(self) -> None:
        """Eat whitespace up to, but not including, the next newline."""
        while not self._at_end():
            ch = self._peek()
            if ch == "\n" or not ch.isspace():
                break
            self._advance()

    def _consume_newlines(self) -> None:
        while self._peek() == "\n":
            self._advance()

    def _consume_whitespace(self) -> None:
        """Eat any whitespace, newlines included."""
        while self._peek().isspace():
            self._advance()

    def _skip_blank_lines(self) -> None:
        """Eat lines holding nothing but whitespace, stopping at a line's indentation."""
        while True:
            idx = self._pos
            while idx < len(self._source) and self._source[idx] in " \t\r":
                idx += 1
            if idx >= len(self._source):
                self._consume_whitespace()
                return
            if self._source[idx] != "\n":
                return
            self._consume_spaces()
            self._consume_newlines()

    def _lex_newline(self, eof_ok: bool = False) -> None:
        """Require the end of the current line, allowing a trailing comment."""
        self._consume_spaces()
        if self._at_comment():
            self._lex_comment()
            self._consume_spaces()
        if self._at_end():
            if eof_ok:
                return
            raise self._end_of_input("block")
        if self._peek() != "\n":
            raise self._unexpected(self._current_loc(), expected="end of line")
        self._advance()

    # ------------------------------------------------------------------
    # Indentation
    # ------------------------------------------------------------------

    def _measure_indent(self) -> int:
        """Width of the leading whitespace at the cursor (space = 1, tab = 4)."""
        width = 0
        idx = self._pos
        while idx < len(self._source):
            ch = self._source[idx]
            if ch == " ":
                width += 1
            elif ch == "\t":
                width += TAB_WIDTH
            else:
                break
            idx += 1
        return width

    def _expect_indent(self, what: str) -> None:
        width = self._measure_indent()
        expected = self._indent_stack[-1]
        if width != expected:
            raise self._indentation_error(
                f"expected {what} at indentation width {expected}, found {width}"
            )
        self._consume_spaces()

    def _open_block(self) -> int:
        """Push the indentation of the next non-blank line, which must be deeper."""
        self._skip_blank_lines()
        if self._at_end():
            raise self._end_of_input("block")
        width = self._measure_indent()
        enclosing = self._indent_stack[-1]
        if width <= enclosing:
            raise self._indentation_error(
                f"expected an indented block deeper than width {enclosing}, found {width}"
            )
        self._indent_stack.append(width)
        return width

    def _lex_block(self) -> None:
        """Lex statements at one indentation width until a dedent."""
        width = self._open_block()
        while True:
            self._consume_spaces()
            self._lex_statement()
            self._lex_newline()
            self._skip_blank_lines()
            if self._at_end():
                raise self._end_of_input("block")
            current = self._measure_indent()
            if current < width:
                break
            if current > width:
                raise self._indentation_error(
                    f"unexpected indent: width {current} inside a block at width {width}"
                )

        self._indent_stack.pop()
        if current not in self._indent_stack:
            raise self._indentation_error(
                f"unindent to width {current} does not match any outer indentation level"
            )

    def _at_clause(self, keyword: Keyword) -> bool:
        """Return True if the current line opens with keyword at the enclosing width."""
        if self._measure_indent() != self._indent_stack[-1]:
            return False
        idx = self._pos
        while idx < len(self._source) and self._source[idx] in " \t":
            idx += 1
        return KEYWORDS.get(self._word_at(idx)) is keyword

    def _lex_block_end(self, keyword: Keyword) -> None:
        self._expect_indent(f"'{keyword.value}'")
        self._lex_keyword(keyword)

    # ------------------------------------------------------------------
    # Keywords, punctuation, operators
    # ------------------------------------------------------------------

    def _match_keyword(self) -> Keyword | None:
        return KEYWORDS.get(self._peek_word())

    def _lex_keyword(self, keyword: Keyword) -> None:
        self._consume_spaces()
        start = self._current_loc()
        if self._match_keyword() is not keyword:
            raise self._unexpected(start, expected=f"'{keyword.value}'")
        self._advance_n(len(keyword.value))
        self._emit(TokenType.KEYWORD, keyword, start)

    def _match_punctuation(self) -> Punctuation | None:
        for punct in PUNCTUATION_TABLE:
            if not self._source.startswith(punct.value, self._pos):
                continue
            # :byRef / :byVal end on a word boundary
            if punct.value[-1].isalpha() and is_ident_char(self._peek(len(punct.value))):
                continue
            return punct
        return None

    def _lex_punctuation(self, punct: Punctuation) -> None:
        start = self._current_loc()
        if self._match_punctuation() is not punct:
            raise self._unexpected(start, expected=f"'{punct.value}'")
        if punct is Punctuation.OPEN_PAREN:
            self._paren_depth += 1
        elif punct is Punctuation.CLOSE_PAREN:
            if self._paren_depth == 0:
                raise self._unexpected(start)
            self._paren_depth -= 1
        self._advance_n(len(punct.value))
        self._emit(TokenType.PUNCTUATION, punct, start)

    def _match_operator(self) -> Operator | None:
        word = self._peek_word()
        if word:
            return WORD_OPERATORS.get(word)
        for op in SYMBOL_OPERATORS:
            if self._source.startswith(op.value, self._pos):
                return op
        return None

    def _lex_operator(self, op: Operator) -> None:
        start = self._current_loc()
        if self._match_operator() is not op:
            raise self._unexpected(start, expected=f"'{op.value}'")
        self._advance_n(len(op.value))
        self._emit(TokenType.OPERATOR, op, start)

    def _lex_any_operator(self) -> None:
        start = self._current_loc()
        op = self._match_operator()
        if op is None:
            raise self._unexpected(start, expected="an operator")
        self._advance_n(len(op.value))
        self._emit(TokenType.OPERATOR, op, start)

    # ------------------------------------------------------------------
    # Identifiers, literals, comments
    # ------------------------------------------------------------------

    def _lex_identifier(self) -> None:
        start = self._current_loc()
        word = self._peek_word()
        if not word or not is_ident_start(word[0]) or word in KEYWORDS or word in WORD_OPERATORS:
            raise self._unexpected(start, expected="an identifier")
        self._advance_n(len(word))
        self._emit(TokenType.IDENTIFIER, word, start)

    def _lex_number(self) -> None:
        start = self._current_loc()
        while is_number_char(self._peek()):
            self._advance()
        text = self._source[start.offset : self._pos]
        span = Span(start, self._current_loc())

        if "." in text:
            try:
                value = float(text)
            except ValueError:
                raise InvalidNumberLiteral(span, text, self._source, "not a valid float") from None
            if not math.isfinite(value):
                raise InvalidNumberLiteral(span, text, self._source, "float out of range")
            self._emit(TokenType.FLOAT, value, start)
            return

        try:
            integer = int(text, 10)
        except ValueError:
            raise InvalidNumberLiteral(span, text, self._source, "not a valid integer") from None
        if integer > INT64_MAX:
            raise InvalidNumberLiteral(span, text, self._source, "out of range for a 64-bit integer")
        self._emit(TokenType.INTEGER, integer, start)

    def _lex_string(self) -> None:
        start = self._current_loc()
        self._lex_punctuation(Punctuation.QUOTE)
        text_start = self._current_loc()
        while True:
            ch = self._peek()
            if ch == "" or ch == "\n":
                raise self._end_of_input("string literal", start)
            if ch == '"':
                break
            self._advance()
        self._emit(TokenType.STRING, self._source[text_start.offset : self._pos], text_start)
        self._lex_punctuation(Punctuation.QUOTE)

    def _at_comment(self) -> bool:
        return self._source.startswith(("//", "/*"), self._pos)

    def _lex_comment(self) -> None:
        start = self._current_loc()
        if self._source.startswith("//", self._pos):
            self._advance_n(2)
            while not self._at_end() and self._peek() != "\n":
                self._advance()
            text = self._source[start.offset + 2 : self._pos]
            self._emit(TokenType.COMMENT, text.strip(), start)
            return

        self._advance_n(2)
        close = self._source.find("*/", self._pos)
        if close == -1:
            while not self._at_end():
                self._advance()
            raise self._end_of_input("block comment", start)
        text = self._source[self._pos : close]
        self._advance_n(close + 2 - self._pos)
        self._emit(TokenType.MULTILINE_COMMENT, text.strip(), start)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _lex_expression(self, call_only: bool = False) -> None:
        """Lex a flat run of operands and operators.

        Stops without consuming at the end of the line, a comment, a keyword,
        a comma or colon, or a `)` belonging to an enclosing construct. Open
        parentheses are kept on an explicit stack, so nesting depth is bounded
        by the input alone. With *call_only* set, stops once the first call
        closes.
        """
        self._consume_spaces()
        start = self._current_loc()
        emitted = len(self._tokens)
        # One entry per open paren: True for a call's argument list, False for a group
        open_parens: list[bool] = []

        while not self._at_end():
            ch = self._peek()
            if ch == "\n" or self._at_comment():
                break
            if ch == '"':
                self._lex_string()
            elif is_digit(ch):
                self._lex_number()
            elif is_ident_start(ch):
                word = self._peek_word()
                if word in KEYWORDS:
                    break
                if word in WORD_OPERATORS:
                    self._lex_any_operator()
                elif self._peek(len(word)) == "(":
                    self._lex_identifier()
                    self._lex_punctuation(Punctuation.OPEN_PAREN)
                    open_parens.append(True)
                else:
                    self._lex_identifier()
            elif ch == "(":
                self._lex_punctuation(Punctuation.OPEN_PAREN)
                open_parens.append(False)
            elif ch == ")":
                if not open_parens:
                    break
                if open_parens[-1] and self._tokens[-1].value is Punctuation.COMMA:
                    raise self._unexpected(self._current_loc(), expected="an expression")
                self._lex_punctuation(Punctuation.CLOSE_PAREN)
                open_parens.pop()
                if call_only and not open_parens:
                    break
            elif ch == "," and open_parens and open_parens[-1]:
                if self._tokens[-1].value in (Punctuation.OPEN_PAREN, Punctuation.COMMA):
                    raise self._unexpected(self._current_loc(), expected="an expression")
                self._lex_punctuation(Punctuation.COMMA)
            elif self._match_operator() is not None:
                self._lex_any_operator()
            else:
                break
            self._consume_spaces()

        if open_parens:
            if self._at_end():
                context = "function call" if open_parens[-1] else "parenthesised expression"
                raise self._end_of_input(context, start)
            raise self._unexpected(self._current_loc(), expected="')'")
        if len(self._tokens) == emitted:
            raise self._unexpected(start, expected="an expression")

    def _lex_application(self) -> None:
        """Lex a call statement: name, `(`, comma-separated expressions, `)`."""
        self._lex_expression(call_only=True)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _lex_statement(self) -> None:
        self._consume_spaces()
        if self._at_end():
            raise self._end_of_input("statement")
        if self._at_comment():
            self._lex_comment()
            return

        word = self._peek_word()
        handler = self._statement_lexers.get(KEYWORDS.get(word))
        if handler is not None:
            handler()
        elif word and self._peek(len(word)) == "(":
            self._lex_application()
        else:
            self._lex_assignment_statement()

    def _lex_assignment_statement(self) -> None:
        self._lex_identifier()
        self._consume_spaces()
        op = self._match_operator()
        if op is not Operator.EQUALS and op is not Operator.INCREMENT:
            raise self._unexpected(self._current_loc(), expected="'=' or '+='")
        self._lex_operator(op)
        self._lex_expression()

    def _lex_return_statement(self) -> None:
        self._lex_keyword(Keyword.RETURN)
        self._consume_spaces()
        if self._at_end() or self._peek() == "\n" or self._at_comment():
            return
        self._lex_expression()

    def _lex_function(self) -> None:
        self._lex_keyword(Keyword.FUNCTION)
        self._consume_spaces()
        self._lex_identifier()
        self._consume_spaces()
        self._lex_function_arguments()
        self._lex_newline()
        self._lex_block()
        self._lex_block_end(Keyword.END_FUNCTION)

    def _lex_function_arguments(self) -> None:
        self._lex_punctuation(Punctuation.OPEN_PAREN)
        self._consume_spaces()
        if self._peek() != ")":
            while True:
                self._lex_identifier()
                if self._options.argument_modifiers:
                    self._lex_argument_modifier()
                self._consume_spaces()
                if self._peek() != ",":
                    break
                self._lex_punctuation(Punctuation.COMMA)
                self._consume_spaces()
        self._lex_punctuation(Punctuation.CLOSE_PAREN)

    def _lex_argument_modifier(self) -> None:
        punct = self._match_punctuation()
        if punct is Punctuation.BY_REF or punct is Punctuation.BY_VAL:
            self._lex_punctuation(punct)

    def _lex_condition_clause(self) -> None:
        self._lex_expression()
        self._lex_keyword(Keyword.THEN)
        self._lex_newline()
        self._lex_block()

    def _lex_if_statement(self) -> None:
        self._lex_keyword(Keyword.IF)
        self._lex_condition_clause()
        while self._at_clause(Keyword.ELSE_IF):
            self._consume_spaces()
            self._lex_keyword(Keyword.ELSE_IF)
            self._lex_condition_clause()
        if self._at_clause(Keyword.ELSE):
            self._consume_spaces()
            self._lex_keyword(Keyword.ELSE)
            self._lex_newline()
            self._lex_block()
        self._lex_block_end(Keyword.END_IF)

    def _lex_switch_statement(self) -> None:
        self._lex_keyword(Keyword.SWITCH)
        self._consume_spaces()
        # Only a plain variable can be switched on
        self._lex_identifier()
        self._consume_spaces()
        self._lex_punctuation(Punctuation.COLON)
        self._lex_newline()

        # Case labels sit one level inside the switch, their bodies one more
        self._open_block()
        while self._at_clause(Keyword.CASE):
            self._consume_spaces()
            self._lex_keyword(Keyword.CASE)
            self._lex_expression()
            self._consume_spaces()
            self._lex_punctuation(Punctuation.COLON)
            self._lex_newline()
            self._lex_block()

        self._expect_indent("'case' or 'default'")
        self._lex_keyword(Keyword.DEFAULT)
        self._consume_spaces()
        self._lex_punctuation(Punctuation.COLON)
        self._lex_newline()
        self._lex_block()
        self._indent_stack.pop()
        self._lex_block_end(Keyword.END_SWITCH)

    def _lex_while_statement(self) -> None:
        self._lex_keyword(Keyword.WHILE)
        self._lex_expression()
        self._lex_newline()
        self._lex_block()
        self._lex_block_end(Keyword.END_WHILE)

    def _lex_for_statement(self) -> None:
        self._lex_keyword(Keyword.FOR)
        self._consume_spaces()
        self._lex_identifier()
        self._consume_spaces()
        self._lex_operator(Operator.EQUALS)
        self._lex_expression()
        self._lex_keyword(Keyword.TO)
        self._lex_expression()
        self._lex_newline()
        self._lex_block()
        self._lex_block_end(Keyword.NEXT)
        # The loop variable is repeated after `next`
        self._consume_spaces()
        self._lex_identifier()

    def _lex_do_statement(self) -> None:
        self._lex_keyword(Keyword.DO)
        self._lex_newline()
        self._lex_block()
        self._lex_block_end(Keyword.UNTIL)
        self._lex_expression()


def tokenize(source: str, options: LexerOptions | None = None) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, options).tokenize()
