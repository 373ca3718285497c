"""Test source locations and spans attached to tokens."""

from pseudolex.tokens import Loc, Span, TokenType

from .conftest import find_tokens


class TestLocations:
    def test_zero_based(self, lex):
        tokens = lex("x = 1")
        assert tokens[0].span.start == Loc(0, 0, 0)
        assert tokens[2].span.start == Loc(0, 4, 4)

    def test_span_is_half_open(self, lex):
        tokens = lex("value = 10")
        assert tokens[0].span == Span(Loc(0, 0, 0), Loc(0, 5, 5))
        assert tokens[2].span == Span(Loc(0, 8, 8), Loc(0, 10, 10))

    def test_newline_resets_column(self, lex):
        tokens = lex("a = 1\nbb = 2\n")
        bb = tokens[3]
        assert bb.span.start == Loc(1, 0, 6)

    def test_tab_advances_four_columns(self, lex):
        tokens = lex("while a\n\tb = 1\nendwhile\n")
        b = find_tokens(tokens, TokenType.IDENTIFIER)[1]
        assert b.span.start.line == 1
        assert b.span.start.column == 4
        assert b.span.start.offset == 9

    def test_tab_inside_line(self, lex):
        tokens = lex("x =\t7")
        assert tokens[2].span.start.column == 7
        assert tokens[2].span.start.offset == 4

    def test_keyword_span(self, lex):
        tokens = lex("while a\n    b = 1\nendwhile\n")
        end = tokens[-1]
        assert end.span.start == Loc(2, 0, 18)
        assert end.span.stop == Loc(2, 8, 26)
        assert end.raw == "endwhile"
