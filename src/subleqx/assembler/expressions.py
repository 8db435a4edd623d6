"""
Subleqx Expression Evaluator
============================

This module evaluates the arithmetic expressions that appear in operand and
data fields and in directive arguments.

Supported Operations
--------------------
- Addition (+), subtraction (-), multiplication (*)
- Division (/), truncating toward zero
- Unary minus
- Parentheses

Operands
--------
- Decimal literals: 42
- Hexadecimal literals: 0x2A
- Label names: loop
- @n: the address just after the current instruction, valid only in the
  last operand of an instruction line

Evaluation Pipeline
-------------------
1. tokenize_expression() splits the text into tokens (lexer.py)
2. to_postfix() reorders them with the shunting-yard algorithm
3. substitute() replaces @n and label operands with their addresses
4. evaluate_postfix() runs the postfix program on a value stack

All arithmetic uses Python's unbounded integers. Results are not narrowed
here; the bit encoder checks each value against its field width.

Example Usage
-------------
>>> from subleqx.assembler.expressions import ExpressionEvaluator
>>> from subleqx.assembler.symbols import SymbolTable
>>> symbols = SymbolTable()
>>> symbols.define("buffer", 0x100)
>>> evaluator = ExpressionEvaluator(symbols)
>>> evaluator.evaluate("buffer + 2 * 8")
272
"""

from typing import Optional
import re

from subleqx.errors import (
    AssemblySyntaxError,
    ExpressionError,
    UnresolvedLabelError,
)
from subleqx.assembler.lexer import (
    Operand,
    Operator,
    OperatorKind,
    Token,
    tokenize_expression,
)
from subleqx.assembler.symbols import SymbolTable, is_valid_label


# The next-instruction pseudo-symbol
NEXT_ADDRESS_SYMBOL = "@n"

# Literal grammar: optional sign, then decimal digits or 0x hex digits
INTEGER_PATTERN = re.compile(r"([+-]?)(?:0[xX]([0-9a-fA-F]+)|([0-9]+))")


# =============================================================================
# Literals
# =============================================================================

def parse_integer(text: str) -> int:
    """
    Parse an integer literal.

    Accepts decimal ("42", "-7") and hexadecimal with a 0x prefix
    ("0x2A", "-0x10").

    Raises:
        AssemblySyntaxError: If the text is not a valid literal
    """
    match = INTEGER_PATTERN.fullmatch(text)
    if match is None:
        raise AssemblySyntaxError(f"invalid integer literal '{text}'")

    sign, hex_digits, dec_digits = match.groups()
    if hex_digits is not None:
        value = int(hex_digits, 16)
    else:
        value = int(dec_digits)

    return -value if sign == "-" else value


# =============================================================================
# Shunting-Yard Conversion
# =============================================================================

def to_postfix(tokens: list[Token]) -> list[Token]:
    """
    Reorder infix tokens into postfix order.

    Binary operators of equal precedence associate left to right; unary
    minus is a prefix operator, so "--5" is 5.

    Raises:
        AssemblySyntaxError: On unbalanced parentheses
    """
    output: list[Token] = []
    stack: list[Operator] = []

    for token in tokens:
        if isinstance(token, Operand):
            output.append(token)

        elif token.kind is OperatorKind.LPAREN:
            stack.append(token)

        elif token.kind is OperatorKind.RPAREN:
            while stack and stack[-1].kind is not OperatorKind.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise AssemblySyntaxError("unmatched ')' in expression")
            stack.pop()

        else:
            # A prefix operator has no left operand to close off
            while (
                not token.is_unary
                and stack
                and stack[-1].kind is not OperatorKind.LPAREN
                and stack[-1].precedence >= token.precedence
            ):
                output.append(stack.pop())
            stack.append(token)

    while stack:
        op = stack.pop()
        if op.kind is OperatorKind.LPAREN:
            raise AssemblySyntaxError("unmatched '(' in expression")
        output.append(op)

    return output


# =============================================================================
# Operand Substitution
# =============================================================================

def substitute(
    postfix: list[Token],
    symbols: Optional[SymbolTable] = None,
    next_address: Optional[int] = None,
) -> list[Token]:
    """
    Resolve @n and label operands.

    Args:
        postfix: Tokens from to_postfix()
        symbols: Label addresses, or None for a constant expression
        next_address: Value of @n, or None where @n is not allowed

    Returns:
        A new token list; operands that are neither @n nor a known label
        are left as text and parsed as literals during evaluation.

    Raises:
        AssemblySyntaxError: If @n is used where it is not allowed
    """
    result: list[Token] = []

    for token in postfix:
        if isinstance(token, Operand) and not token.is_resolved:
            if token.text == NEXT_ADDRESS_SYMBOL:
                if next_address is None:
                    raise AssemblySyntaxError(
                        f"'{NEXT_ADDRESS_SYMBOL}' is only valid in the last "
                        "operand of an instruction"
                    )
                token = token.resolved(next_address)
            elif symbols is not None and token.text in symbols:
                token = token.resolved(symbols.address_of(token.text))
        result.append(token)

    return result


# =============================================================================
# Postfix Evaluation
# =============================================================================

def evaluate_postfix(
    postfix: list[Token],
    symbols: Optional[SymbolTable] = None,
) -> int:
    """
    Evaluate a substituted postfix token list.

    Args:
        postfix: Tokens from substitute()
        symbols: The symbol table, used only for error reporting. When None
                 the expression is treated as a constant.

    Raises:
        AssemblySyntaxError: On a malformed expression or literal
        UnresolvedLabelError: If a label operand was never defined
        ExpressionError: On division by zero
    """
    stack: list[int] = []

    for token in postfix:
        if isinstance(token, Operand):
            if token.is_resolved:
                stack.append(token.value)
            else:
                stack.append(_literal_value(token.text, symbols))
            continue

        if token.is_unary:
            if not stack:
                raise AssemblySyntaxError("missing operand for unary '-'")
            stack.append(-stack.pop())
            continue

        if len(stack) < 2:
            raise AssemblySyntaxError(f"missing operand for '{token.kind.value}'")
        right = stack.pop()
        left = stack.pop()
        stack.append(_apply(token.kind, left, right))

    if len(stack) != 1:
        if not stack:
            raise AssemblySyntaxError("empty expression")
        raise AssemblySyntaxError("missing operator in expression")

    return stack[0]


def _apply(kind: OperatorKind, left: int, right: int) -> int:
    """Apply a binary operator."""
    if kind is OperatorKind.ADD:
        return left + right
    if kind is OperatorKind.SUB:
        return left - right
    if kind is OperatorKind.MUL:
        return left * right
    if kind is OperatorKind.DIV:
        if right == 0:
            raise ExpressionError("division by zero")
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    raise AssemblySyntaxError(f"unexpected operator '{kind.value}'")


def _literal_value(text: str, symbols: Optional[SymbolTable]) -> int:
    """Parse an unresolved operand, classifying the failure."""
    if INTEGER_PATTERN.fullmatch(text) is not None:
        return parse_integer(text)

    if is_valid_label(text):
        if symbols is None:
            raise AssemblySyntaxError(
                f"'{text}' is not a constant",
                hint="labels cannot be used in header fields, data widths "
                     "or alignment amounts",
            )
        raise UnresolvedLabelError(text, similar_labels=symbols.find_similar(text))

    raise AssemblySyntaxError(f"invalid operand '{text}'")


# =============================================================================
# Expression Evaluator
# =============================================================================

class ExpressionEvaluator:
    """
    Evaluates field expressions against a symbol table.

    The evaluator does not own the symbol table; the CodeGenerator fills it
    in pass 1 and the evaluator reads it in pass 2.

    Attributes:
        symbols: The label table used for substitution
    """

    def __init__(self, symbols: Optional[SymbolTable] = None):
        self.symbols = symbols if symbols is not None else SymbolTable()

    def evaluate(self, expression: str, next_address: Optional[int] = None) -> int:
        """
        Evaluate an expression that may reference labels.

        Args:
            expression: Expression text
            next_address: Value of @n, or None where @n is not allowed

        Returns:
            The unbounded integer result
        """
        postfix = to_postfix(tokenize_expression(expression))
        return evaluate_postfix(
            substitute(postfix, self.symbols, next_address),
            self.symbols,
        )

    def evaluate_constant(self, expression: str) -> int:
        """
        Evaluate an expression made only of literals.

        Used where the value decides field widths or padding, which must be
        known in pass 1 before any label is.
        """
        postfix = to_postfix(tokenize_expression(expression))
        return evaluate_postfix(substitute(postfix))


def evaluate_expression(
    expression: str,
    symbols: Optional[dict[str, int]] = None,
    next_address: Optional[int] = None,
) -> int:
    """
    Convenience function to evaluate an expression.

    Args:
        expression: Expression text
        symbols: Plain name -> address mapping
        next_address: Value of @n, if allowed

    Returns:
        Expression result
    """
    table = SymbolTable()
    for name, address in (symbols or {}).items():
        table.define(name, address)
    return ExpressionEvaluator(table).evaluate(expression, next_address)
