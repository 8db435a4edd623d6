# =============================================================================
# test_expressions.py - Expression Evaluator Unit Tests
# =============================================================================
# Tests for the Subleqx expression evaluator.
#
# Test coverage includes:
#   - Integer literals (decimal, hex, signed)
#   - Operator precedence and associativity
#   - Truncating division
#   - Label and @n substitution
#   - Error reporting for malformed expressions
# =============================================================================

import pytest
from subleqx.assembler.expressions import (
    ExpressionEvaluator,
    evaluate_expression,
    parse_integer,
    to_postfix,
)
from subleqx.assembler.lexer import Operand, tokenize_expression
from subleqx.assembler.symbols import SymbolTable
from subleqx.errors import (
    AssemblySyntaxError,
    ExpressionError,
    UnresolvedLabelError,
)


# =============================================================================
# Literal Tests
# =============================================================================

class TestParseInteger:
    """Test the integer literal grammar."""

    def test_decimal(self):
        assert parse_integer("42") == 42

    def test_hex(self):
        assert parse_integer("0x2A") == 42
        assert parse_integer("0XfF") == 255

    def test_signed(self):
        assert parse_integer("-7") == -7
        assert parse_integer("+7") == 7
        assert parse_integer("-0x10") == -16

    def test_large_value(self):
        """Literals are not limited to 64 bits."""
        assert parse_integer("0x10000000000000000") == 1 << 64

    @pytest.mark.parametrize("text", ["", "0x", "12a", "abc", "1.5", "--1"])
    def test_invalid(self, text):
        with pytest.raises(AssemblySyntaxError):
            parse_integer(text)


# =============================================================================
# Arithmetic Tests
# =============================================================================

class TestArithmetic:
    """Test basic arithmetic and precedence."""

    def test_single_literal(self):
        assert evaluate_expression("5") == 5

    def test_precedence(self):
        assert evaluate_expression("2+3*4") == 14

    def test_parentheses(self):
        assert evaluate_expression("(2+3)*4") == 20

    def test_unary_then_binary(self):
        assert evaluate_expression("-5 + 3") == -2

    def test_integer_division(self):
        assert evaluate_expression("10 / 3") == 3

    def test_left_associative_subtraction(self):
        assert evaluate_expression("1-2-1") == -2

    def test_left_associative_division(self):
        assert evaluate_expression("100/10/5") == 2

    def test_division_truncates_toward_zero(self):
        assert evaluate_expression("7/2") == 3
        assert evaluate_expression("-7/2") == -3
        assert evaluate_expression("7/-2") == -3
        assert evaluate_expression("-7/-2") == 3

    def test_unary_minus(self):
        assert evaluate_expression("-5") == -5
        assert evaluate_expression("2*-3") == -6
        assert evaluate_expression("-(2+3)") == -5

    def test_double_unary_minus(self):
        assert evaluate_expression("--5") == 5
        assert evaluate_expression("5--3") == 8

    def test_unary_binds_tighter_than_multiply(self):
        assert evaluate_expression("-2*3") == -6

    def test_hex_in_expression(self):
        assert evaluate_expression("0x10 + 1") == 17

    def test_unbounded_result(self):
        assert evaluate_expression("0x100000000 * 0x100000000") == 1 << 64

    def test_division_by_zero(self):
        with pytest.raises(ExpressionError, match="division by zero"):
            evaluate_expression("1/0")

    def test_division_by_zero_expression(self):
        with pytest.raises(ExpressionError):
            evaluate_expression("4/(2-2)")


# =============================================================================
# Malformed Expression Tests
# =============================================================================

class TestMalformed:
    """Test errors for structurally invalid expressions."""

    def test_empty(self):
        with pytest.raises(AssemblySyntaxError, match="empty expression"):
            evaluate_expression("")

    def test_unmatched_close_paren(self):
        with pytest.raises(AssemblySyntaxError, match=r"unmatched '\)'"):
            evaluate_expression("1+2)")

    def test_unmatched_open_paren(self):
        with pytest.raises(AssemblySyntaxError, match=r"unmatched '\('"):
            evaluate_expression("(1+2")

    def test_missing_operand(self):
        with pytest.raises(AssemblySyntaxError, match="missing operand"):
            evaluate_expression("1+")

    def test_lone_minus(self):
        with pytest.raises(AssemblySyntaxError, match="missing operand"):
            evaluate_expression("-")

    def test_missing_operator(self):
        with pytest.raises(AssemblySyntaxError, match="missing operator"):
            evaluate_expression("(1)(2)")

    def test_invalid_operand(self):
        with pytest.raises(AssemblySyntaxError, match="invalid operand"):
            evaluate_expression("12a")

    def test_postfix_order(self):
        """to_postfix reorders 1+2*3 into 1 2 3 * +."""
        postfix = to_postfix(tokenize_expression("1+2*3"))
        rendered = [
            t.text if isinstance(t, Operand) else t.kind.value for t in postfix
        ]
        assert rendered == ["1", "2", "3", "*", "+"]


# =============================================================================
# Symbol Tests
# =============================================================================

class TestSymbols:
    """Test label and @n substitution."""

    def test_label_reference(self):
        assert evaluate_expression("loop", {"loop": 40}) == 40

    def test_label_arithmetic(self):
        assert evaluate_expression("end - start", {"start": 8, "end": 72}) == 64

    def test_unresolved_label(self):
        with pytest.raises(UnresolvedLabelError) as exc_info:
            evaluate_expression("missing", {"loop": 40})
        assert exc_info.value.label == "missing"

    def test_unresolved_label_suggests_similar(self):
        with pytest.raises(UnresolvedLabelError) as exc_info:
            evaluate_expression("lop", {"loop": 40})
        assert "loop" in exc_info.value.similar_labels
        assert "did you mean 'loop'?" in str(exc_info.value)

    def test_next_address(self):
        assert evaluate_expression("@n", next_address=40) == 40
        assert evaluate_expression("@n + 8", next_address=40) == 48

    def test_next_address_not_allowed(self):
        with pytest.raises(AssemblySyntaxError, match="@n"):
            evaluate_expression("@n")

    def test_evaluator_sees_later_definitions(self):
        """The evaluator reads the table at evaluation time."""
        symbols = SymbolTable()
        evaluator = ExpressionEvaluator(symbols)
        symbols.define("later", 99)
        assert evaluator.evaluate("later + 1") == 100


# =============================================================================
# Constant Expression Tests
# =============================================================================

class TestConstant:
    """Test evaluate_constant(), used for widths and alignment."""

    def test_constant(self):
        evaluator = ExpressionEvaluator()
        assert evaluator.evaluate_constant("2*4") == 8

    def test_label_is_not_constant(self):
        symbols = SymbolTable()
        symbols.define("width", 8)
        evaluator = ExpressionEvaluator(symbols)
        with pytest.raises(AssemblySyntaxError, match="not a constant"):
            evaluator.evaluate_constant("width")

    def test_next_address_is_not_constant(self):
        with pytest.raises(AssemblySyntaxError, match="@n"):
            ExpressionEvaluator().evaluate_constant("@n")
