"""Test flat expression scanning, grouping and function applications."""

import pytest

from pseudolex.errors import UnexpectedEndOfInput, UnexpectedToken
from pseudolex.tokens import TokenType

from .conftest import KW, OP, P, values_of


class TestFlatExpressions:
    def test_no_precedence_grouping(self, lex):
        tokens = lex("x = 1 + 2 * 3 - 4 / 5")
        assert values_of(tokens)[2:] == [1, OP.PLUS, 2, OP.TIMES, 3, OP.MINUS, 4, OP.DIVIDE, 5]

    def test_spaces_are_insignificant(self, lex):
        assert lex("x=1+2") == lex("x = 1 + 2")

    def test_tabs_between_operands(self, lex):
        assert lex("x =\t1\t+\t2") == lex("x = 1 + 2")

    def test_crlf_line_endings(self, lex):
        assert lex("x = 1\r\ny = 2\r\n") == lex("x = 1\ny = 2\n")

    def test_adjacent_operands_left_to_parser(self, lex):
        tokens = lex("x = a b")
        assert values_of(tokens) == ["x", OP.EQUALS, "a", "b"]


class TestGrouping:
    def test_parenthesised_group(self, lex):
        tokens = lex("x = (1 + 2) * 3")
        assert values_of(tokens)[2:] == [
            P.OPEN_PAREN, 1, OP.PLUS, 2, P.CLOSE_PAREN, OP.TIMES, 3,
        ]  # fmt: skip

    def test_nested_groups(self, lex):
        tokens = lex("x = ((a))")
        assert values_of(tokens)[2:] == [
            P.OPEN_PAREN, P.OPEN_PAREN, "a", P.CLOSE_PAREN, P.CLOSE_PAREN,
        ]  # fmt: skip

    def test_unclosed_group_at_newline(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("x = (1 + 2\ny = 3\n")
        assert exc_info.value.expected == "')'"

    def test_unclosed_group_at_end_of_input(self, lex):
        with pytest.raises(UnexpectedEndOfInput):
            lex("x = (1 + 2")

    def test_extra_close_paren(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("x = 1 + 2)\n")
        assert exc_info.value.lexeme == ")"

    def test_empty_group_left_to_parser(self, lex):
        tokens = lex("x = ()")
        assert values_of(tokens)[2:] == [P.OPEN_PAREN, P.CLOSE_PAREN]


class TestApplications:
    def test_call_in_expression(self, lex):
        tokens = lex("y = f(x) + 1")
        assert values_of(tokens) == [
            "y", OP.EQUALS, "f", P.OPEN_PAREN, "x", P.CLOSE_PAREN, OP.PLUS, 1,
        ]  # fmt: skip

    def test_no_arguments(self, lex):
        tokens = lex("y = now()")
        assert values_of(tokens)[2:] == ["now", P.OPEN_PAREN, P.CLOSE_PAREN]

    def test_nested_calls(self, lex):
        tokens = lex("y = f(g(1), h(2, k(3)))")
        assert values_of(tokens)[2:] == [
            "f", P.OPEN_PAREN,
            "g", P.OPEN_PAREN, 1, P.CLOSE_PAREN, P.COMMA,
            "h", P.OPEN_PAREN, 2, P.COMMA, "k", P.OPEN_PAREN, 3, P.CLOSE_PAREN, P.CLOSE_PAREN,
            P.CLOSE_PAREN,
        ]  # fmt: skip

    def test_expression_arguments(self, lex):
        tokens = lex('print("n = ", n * 2, (a + b))')
        assert values_of(tokens) == [
            "print", P.OPEN_PAREN,
            P.QUOTE, "n = ", P.QUOTE, P.COMMA,
            "n", OP.TIMES, 2, P.COMMA,
            P.OPEN_PAREN, "a", OP.PLUS, "b", P.CLOSE_PAREN,
            P.CLOSE_PAREN,
        ]  # fmt: skip

    def test_space_before_paren_is_grouping(self, lex):
        tokens = lex("y = f (x)")
        assert values_of(tokens)[2:] == ["f", P.OPEN_PAREN, "x", P.CLOSE_PAREN]

    def test_trailing_comma(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("f(1,)")
        assert exc_info.value.expected == "an expression"

    def test_missing_close(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("f(1, 2\n")
        assert exc_info.value.expected == "')'"

    def test_missing_close_at_end_of_input(self, lex):
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            lex("f(1, 2")
        assert exc_info.value.context == "function call"

    def test_unclosed_call_inside_assignment(self, lex):
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            lex("x = f(1")
        assert exc_info.value.context == "function call"

    def test_leading_comma(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("f(, 1)")
        assert exc_info.value.expected == "an expression"

    def test_group_inside_call_closes_first(self, lex):
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            lex("x = f((1)")
        assert exc_info.value.context == "function call"

    def test_deeply_nested_calls(self, lex):
        depth = 5000
        tokens = lex("x = " + "f(" * depth + "1" + ")" * depth + "\n")
        assert len(tokens) == 2 + 3 * depth + 1
        assert tokens[-1].value is P.CLOSE_PAREN

    def test_deeply_nested_groups(self, lex):
        depth = 5000
        tokens = lex("x = " + "(" * depth + "1" + ")" * depth)
        assert len(tokens) == 2 + 2 * depth + 1

    def test_deeply_nested_call_statement(self, lex):
        depth = 5000
        tokens = lex("f(" * depth + ")" * depth)
        assert len(tokens) == 3 * depth

    def test_call_statement_with_spaces_in_arguments(self, lex):
        tokens = lex("draw( 1 ,  2 )")
        assert values_of(tokens) == ["draw", P.OPEN_PAREN, 1, P.COMMA, 2, P.CLOSE_PAREN]


class TestExpressionEnd:
    def test_stops_at_keyword(self, lex):
        tokens = lex("if a then\n    b = 1\nendif\n")
        assert values_of(tokens)[:3] == [KW.IF, "a", KW.THEN]

    def test_unknown_character_ends_expression(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("x = 1 ? 2\n")
        assert exc_info.value.expected == "end of line"
        assert exc_info.value.lexeme == "?"

    def test_bang_alone_is_not_an_operator(self, lex):
        with pytest.raises(UnexpectedToken):
            lex("x = !y\n")

    def test_empty_right_hand_side(self, lex):
        with pytest.raises(UnexpectedToken) as exc_info:
            lex("x =\n")
        assert exc_info.value.expected == "an expression"

    def test_types_of_call(self, lex):
        tokens = lex("f(x)")
        assert tokens[0].type == TokenType.IDENTIFIER
