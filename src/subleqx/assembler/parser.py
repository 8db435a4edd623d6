"""
Subleqx Source Line Parser
==========================

This module splits Subleqx source lines into fields, labels and directives.
It does not evaluate anything; the code generator gives each field its
meaning from its position on the line.

Line Syntax
-----------
    [label:] field [, [label:] field ...] [# comment]

Everything from '#' onward is a comment. Fields are separated by commas and
each may be preceded by its own label, which names the address of that
field.

Line Kinds
----------
1. **Blank**: nothing but whitespace, a comment, or a lone label
   ```
   # comment
   loop:
   ```

2. **Plain**: header values and instruction operands
   ```
   8, 4, 7, 0, 1, @n       # aw, dwm1w, dwm1, a, b, c
   loop: x, y, loop        # a, b, c
   ```

3. **Data**: the first field starts with .dN; every field on the line is an
   N-bit value
   ```
   table: .d16 1, 2, 3, table
   ```

4. **Align**: a single .align field padding to a multiple of N bits
   ```
   .align 8
   ```
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional, Union
import re

from subleqx.errors import AssemblySyntaxError, SourceLocation
from subleqx.assembler.symbols import is_valid_label


# Comment marker
COMMENT_CHAR = "#"

# Field separator
FIELD_SEPARATOR = ","

# Label terminator
LABEL_SEPARATOR = ":"

# Data directive: .d followed by the field width in bits
DATA_DIRECTIVE_PATTERN = re.compile(r"\.d([0-9]+)")

ALIGN_DIRECTIVE = ".align"


# =============================================================================
# Directives
# =============================================================================

@dataclass(frozen=True)
class DataDirective:
    """
    .dN - the line holds raw data values of a fixed width.

    Attributes:
        width: Field width in bits
    """
    width: int

    def __str__(self) -> str:
        return f".d{self.width}"


@dataclass(frozen=True)
class AlignDirective:
    """.align N - pad the instruction pointer to a multiple of N bits."""

    def __str__(self) -> str:
        return ALIGN_DIRECTIVE


Directive = Union[DataDirective, AlignDirective]


# =============================================================================
# Line Records
# =============================================================================

class LineKind(Enum):
    """How the code generator treats a line."""
    BLANK = auto()
    PLAIN = auto()
    DATA = auto()
    ALIGN = auto()


@dataclass
class Field:
    """
    One comma-separated field of a source line.

    Attributes:
        text: Expression text, with label and directive removed
        location: Where the field starts
        label: Label defined at this field, if any
        directive: Directive prefixing the field, if any
    """
    text: str
    location: SourceLocation
    label: Optional[str] = None
    directive: Optional[Directive] = None


@dataclass
class SourceLine:
    """
    A parsed source line.

    Attributes:
        location: Line location (column 0)
        source: Original line text, for listings and error messages
        fields: Parsed fields, in order
    """
    location: SourceLocation
    source: str
    fields: list[Field] = field(default_factory=list)

    @property
    def kind(self) -> LineKind:
        if not self.fields:
            return LineKind.BLANK
        first = self.fields[0]
        if isinstance(first.directive, AlignDirective):
            return LineKind.ALIGN
        if isinstance(first.directive, DataDirective):
            return LineKind.DATA
        if len(self.fields) == 1 and not first.text:
            return LineKind.BLANK
        return LineKind.PLAIN

    @property
    def labels(self) -> list[str]:
        return [f.label for f in self.fields if f.label is not None]

    @property
    def data_width(self) -> Optional[int]:
        """Width of a data line's fields, or None for other lines."""
        first = self.fields[0] if self.fields else None
        if first is not None and isinstance(first.directive, DataDirective):
            return first.directive.width
        return None


# =============================================================================
# Parser
# =============================================================================

def parse_line(text: str, line_number: int, filename: str = "<input>") -> SourceLine:
    """
    Parse one source line.

    Args:
        text: Line text (without line terminator)
        line_number: 1-based line number
        filename: Source filename for error messages

    Returns:
        The parsed line

    Raises:
        AssemblySyntaxError: On an invalid label, an unknown or misplaced
                             directive, or an empty field
    """
    location = SourceLocation(filename, line_number)
    code = text.split(COMMENT_CHAR, 1)[0]

    line = SourceLine(location=location, source=text.rstrip("\r\n"))
    if not code.strip():
        return line

    offset = 0
    for raw in code.split(FIELD_SEPARATOR):
        column = offset + (len(raw) - len(raw.lstrip())) + 1
        offset += len(raw) + len(FIELD_SEPARATOR)
        try:
            line.fields.append(
                _parse_field(raw.strip(), SourceLocation(filename, line_number, column))
            )
        except AssemblySyntaxError as e:
            e.attach_location(location, line.source)
            raise

    _check_line_shape(line)
    return line


def parse_source(source: str, filename: str = "<input>") -> list[SourceLine]:
    """
    Parse a whole source text.

    Args:
        source: Subleqx source text
        filename: Source filename for error messages

    Returns:
        One SourceLine per input line, blank lines included
    """
    return parse_lines(source.splitlines(), filename)


def parse_lines(lines: Iterable[str], filename: str = "<input>") -> list[SourceLine]:
    """Parse an already-split sequence of source lines."""
    return [
        parse_line(text, number, filename)
        for number, text in enumerate(lines, start=1)
    ]


def _parse_field(text: str, location: SourceLocation) -> Field:
    """Split a field into label, directive and expression text."""
    label = None
    if LABEL_SEPARATOR in text:
        label, text = text.split(LABEL_SEPARATOR, 1)
        label = label.strip()
        text = text.strip()
        if not is_valid_label(label):
            raise AssemblySyntaxError(f"invalid label name '{label}'", location)

    directive = None
    if text.startswith("."):
        directive, text = _parse_directive(text, location)

    return Field(text=text, location=location, label=label, directive=directive)


def _parse_directive(text: str, location: SourceLocation) -> tuple[Directive, str]:
    """Decode a directive token and return it with its argument text."""
    parts = text.split(None, 1)
    name = parts[0]
    argument = parts[1].strip() if len(parts) > 1 else ""

    if name == ALIGN_DIRECTIVE:
        directive: Directive = AlignDirective()
    else:
        match = DATA_DIRECTIVE_PATTERN.fullmatch(name)
        if match is None:
            raise AssemblySyntaxError(
                f"unknown directive '{name}'",
                location,
                hint=f"valid directives are .dN (N = width in bits) and {ALIGN_DIRECTIVE}",
            )
        width = int(match.group(1))
        if width <= 0:
            raise AssemblySyntaxError(f"data width must be positive in '{name}'", location)
        directive = DataDirective(width)

    if not argument:
        raise AssemblySyntaxError(f"'{name}' requires a value", location)

    return directive, argument


def _check_line_shape(line: SourceLine) -> None:
    """Reject empty fields and directives in positions they cannot take."""
    if len(line.fields) == 1:
        return

    for index, fld in enumerate(line.fields):
        if not fld.text and fld.directive is None:
            raise AssemblySyntaxError("empty field", fld.location, source_line=line.source)

        if isinstance(fld.directive, AlignDirective):
            raise AssemblySyntaxError(
                f"'{ALIGN_DIRECTIVE}' must be the only field on its line",
                fld.location,
                source_line=line.source,
            )

        if index > 0 and fld.directive is not None:
            raise AssemblySyntaxError(
                f"'{fld.directive}' must start the line",
                fld.location,
                source_line=line.source,
                hint="a data directive applies to every field on its line",
            )
