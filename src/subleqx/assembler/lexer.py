"""
Subleqx Expression Lexer
========================

This module tokenizes a single expression (one field of a source line) into
a flat list of operator and operand tokens.

Token Types
-----------
- Operator: ( ) + - * / and the unary minus, written 'u'
- Operand: any other run of characters - a decimal or 0x literal, a label
  name, or the next-instruction pseudo-symbol @n

Operands are not validated here. Whether "foo" is a label and whether
"12ab" is a malformed literal is decided when the expression is evaluated,
after the symbol table is complete.

Unary Minus
-----------
A '-' is unary when it starts the expression or follows any operator other
than ')':

    -5 + 3      ->  u 5 + 3
    2 * -x      ->  2 * u x
    (a) - 1     ->  ( a ) - 1

Example
-------
>>> from subleqx.assembler.lexer import tokenize_expression
>>> tokenize_expression("loop + -0x10")
[Operand('loop'), Operator(+), Operator(u), Operand('0x10')]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# =============================================================================
# Token Types
# =============================================================================

class OperatorKind(Enum):
    """Expression operators, valued by their source character."""

    LPAREN = "("
    RPAREN = ")"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    NEG = "u"   # unary minus


# Binding strength of each arithmetic operator (higher binds tighter)
PRECEDENCE = {
    OperatorKind.ADD: 0,
    OperatorKind.SUB: 0,
    OperatorKind.MUL: 1,
    OperatorKind.DIV: 1,
    OperatorKind.NEG: 2,
}

# Characters that end an operand
OPERATOR_CHARS = {kind.value: kind for kind in OperatorKind if kind is not OperatorKind.NEG}

# Characters skipped between tokens
WHITESPACE = " \t"


@dataclass(frozen=True)
class Operator:
    """
    An operator token.

    Attributes:
        kind: Which operator this is
    """
    kind: OperatorKind

    def __repr__(self) -> str:
        return f"Operator({self.kind.value})"

    @property
    def precedence(self) -> int:
        """
        Binding strength of the operator.

        Raises:
            ValueError: For parentheses, which have no precedence
        """
        if self.kind not in PRECEDENCE:
            raise ValueError(f"'{self.kind.value}' has no precedence")
        return PRECEDENCE[self.kind]

    @property
    def is_unary(self) -> bool:
        return self.kind is OperatorKind.NEG


@dataclass(frozen=True)
class Operand:
    """
    An operand token.

    An operand either carries its raw source text or, once substituted,
    the integer it resolved to.

    Attributes:
        text: Raw source text (literal, label name or @n)
        value: Resolved integer, or None while unresolved
    """
    text: Optional[str] = None
    value: Optional[int] = None

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Operand({self.value})"
        return f"Operand({self.text!r})"

    @property
    def is_resolved(self) -> bool:
        return self.value is not None

    def resolved(self, value: int) -> "Operand":
        """Return a copy of this operand carrying a resolved value."""
        return Operand(text=self.text, value=value)


Token = Union[Operator, Operand]


# =============================================================================
# Tokenizer
# =============================================================================

def tokenize_expression(expression: str) -> list[Token]:
    """
    Split an expression into operator and operand tokens.

    Spaces and tabs are dropped everywhere, including inside operands, so
    "1 0" lexes as the single operand "10".

    Args:
        expression: Expression text, without any directive prefix

    Returns:
        Tokens in source order (possibly empty)
    """
    tokens: list[Token] = []
    pending = ""

    for char in expression:
        if char in WHITESPACE:
            continue

        kind = OPERATOR_CHARS.get(char)
        if kind is None:
            pending += char
            continue

        if pending:
            tokens.append(Operand(text=pending))
            pending = ""

        if kind is OperatorKind.SUB and _starts_operand(tokens):
            kind = OperatorKind.NEG

        tokens.append(Operator(kind))

    if pending:
        tokens.append(Operand(text=pending))

    return tokens


def _starts_operand(tokens: list[Token]) -> bool:
    """True when the next token must begin an operand (so '-' is unary)."""
    if not tokens:
        return True
    last = tokens[-1]
    return isinstance(last, Operator) and last.kind is not OperatorKind.RPAREN
