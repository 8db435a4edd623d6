"""
Subleqx Assembler Error Hierarchy
=================================

This module defines the exception hierarchy for the Subleqx assembler.
All exceptions inherit from SubleqxError, allowing callers to catch all
assembler-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
SubleqxError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - malformed lines, expressions or directives
    ├── DuplicateLabelError - label defined more than once
    ├── UnresolvedLabelError - reference to an undefined label
    ├── FieldOverflowError - value does not fit its field width
    └── ExpressionError - arithmetic failure (division by zero)

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. Errors raised deep inside the expression evaluator or the
bit encoder do not know which line they came from; the two-pass driver
attaches the location of the line being processed before the error
propagates.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SubleqxError(Exception):
    """
    Base exception for all Subleqx errors.

        try:
            assembler.assemble_file("program.sxa")
        except SubleqxError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SubleqxError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def attach_location(
        self,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Record where the error happened, if not already known.

        Existing values are kept. The formatted message is rebuilt so
        str(error) reflects the new context.
        """
        changed = False
        if self.location is None:
            self.location = location
            changed = True
        if self.source_line is None and source_line is not None:
            self.source_line = source_line
            changed = True
        if changed:
            self.args = (self._format_message(),)

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.sxa:4:9: error: unresolved label 'lop'
                a, b, lop
                      ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Wrong number of fields on an instruction line
        - Unmatched parentheses or a missing operand in an expression
        - Invalid label name or unknown directive
        - Gamma-coding a value that is not positive
    """
    pass


class DuplicateLabelError(AssemblerError):
    """
    Label defined multiple times.

    Includes the location of the original definition when available.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnresolvedLabelError(AssemblerError):
    """
    Reference to a label that was never defined.

    Raised during the second pass, when the symbol table is complete.
    Similarly-named labels are suggested to help catch typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        if not hint and self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unresolved label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class FieldOverflowError(AssemblerError):
    """
    A value does not fit in its destination field.

    Fields are checked by magnitude: unsigned fields accept 0..2^w-1,
    signed fields additionally accept negative values whose magnitude is
    below 2^(w-1).
    """

    def __init__(
        self,
        value: int,
        width: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        signed: bool = True,
    ):
        self.value = value
        self.width = width
        self.signed = signed

        if value < 0 and not signed:
            message = f"value {value} must not be negative in a {width}-bit field"
        else:
            message = f"value {value} does not fit in {width} bits"

        super().__init__(message, location=location, source_line=source_line)


class ExpressionError(AssemblerError):
    """
    Arithmetic failure while evaluating an expression.

    The only arithmetic failure with unbounded integers is division by zero;
    malformed expressions are reported as AssemblySyntaxError.
    """
    pass
