# =============================================================================
# test_lexer.py - Expression Lexer Unit Tests
# =============================================================================
# Tests for the Subleqx expression tokenizer.
#
# Test coverage includes:
#   - Operand accumulation (literals, labels, @n)
#   - Operator recognition
#   - Whitespace handling
#   - Unary minus disambiguation
#   - Token variant behaviour (precedence, resolution)
# =============================================================================

import pytest
from subleqx.assembler.lexer import (
    Operand,
    Operator,
    OperatorKind,
    tokenize_expression,
)


# =============================================================================
# Helper Function
# =============================================================================

def kinds(expression: str) -> list:
    """
    Helper to render tokens compactly: operands as text, operators as their
    source character ('u' for unary minus).
    """
    result = []
    for token in tokenize_expression(expression):
        if isinstance(token, Operand):
            result.append(token.text)
        else:
            result.append(token.kind.value)
    return result


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_expression(self):
        """Empty input produces no tokens."""
        assert tokenize_expression("") == []

    def test_whitespace_only(self):
        """Spaces and tabs produce no tokens."""
        assert tokenize_expression("  \t ") == []

    def test_decimal_operand(self):
        tokens = tokenize_expression("42")
        assert tokens == [Operand(text="42")]

    def test_hex_operand(self):
        """Hex literals are a single operand; x is not an operator."""
        assert kinds("0x2A") == ["0x2A"]

    def test_label_operand(self):
        assert kinds("loop_1") == ["loop_1"]

    def test_next_address_operand(self):
        """@n is lexed as an ordinary operand."""
        assert kinds("@n") == ["@n"]

    def test_all_operators(self):
        assert kinds("(1+2-3*4/5)") == ["(", "1", "+", "2", "-", "3", "*", "4", "/", "5", ")"]


# =============================================================================
# Whitespace Tests
# =============================================================================

class TestWhitespace:
    """Whitespace is dropped everywhere."""

    def test_spaces_around_operators(self):
        assert kinds(" a +  b ") == ["a", "+", "b"]

    def test_tabs(self):
        assert kinds("a\t*\tb") == ["a", "*", "b"]

    def test_space_inside_operand_is_dropped(self):
        """Characters on either side of a space join into one operand."""
        assert kinds("1 0") == ["10"]


# =============================================================================
# Unary Minus Tests
# =============================================================================

class TestUnaryMinus:
    """Test unary/binary minus disambiguation."""

    def test_leading_minus_is_unary(self):
        assert kinds("-5") == ["u", "5"]

    def test_minus_after_operand_is_binary(self):
        assert kinds("5-3") == ["5", "-", "3"]

    def test_minus_after_operator_is_unary(self):
        assert kinds("2*-3") == ["2", "*", "u", "3"]

    def test_minus_after_open_paren_is_unary(self):
        assert kinds("(-3)") == ["(", "u", "3", ")"]

    def test_minus_after_close_paren_is_binary(self):
        assert kinds("(a)-1") == ["(", "a", ")", "-", "1"]

    def test_double_minus(self):
        """The second minus of '5--3' is unary."""
        assert kinds("5--3") == ["5", "-", "u", "3"]

    def test_unary_kind(self):
        token = tokenize_expression("-x")[0]
        assert isinstance(token, Operator)
        assert token.kind is OperatorKind.NEG
        assert token.is_unary


# =============================================================================
# Token Variant Tests
# =============================================================================

class TestTokens:
    """Test the Operator/Operand token types."""

    def test_precedence_order(self):
        """Unary minus binds tighter than * and /, which bind tighter than + and -."""
        neg = Operator(OperatorKind.NEG)
        mul = Operator(OperatorKind.MUL)
        div = Operator(OperatorKind.DIV)
        add = Operator(OperatorKind.ADD)
        sub = Operator(OperatorKind.SUB)
        assert neg.precedence > mul.precedence
        assert mul.precedence == div.precedence
        assert div.precedence > add.precedence
        assert add.precedence == sub.precedence

    def test_parenthesis_has_no_precedence(self):
        with pytest.raises(ValueError):
            Operator(OperatorKind.LPAREN).precedence

    def test_operand_resolution(self):
        """resolved() keeps the text and adds a value."""
        operand = Operand(text="loop")
        assert not operand.is_resolved
        resolved = operand.resolved(40)
        assert resolved.is_resolved
        assert resolved.value == 40
        assert resolved.text == "loop"
        assert not operand.is_resolved

    def test_repr(self):
        assert repr(Operand(text="x")) == "Operand('x')"
        assert repr(Operand(text="x", value=3)) == "Operand(3)"
        assert repr(Operator(OperatorKind.ADD)) == "Operator(+)"
