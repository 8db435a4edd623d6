"""
Subleqx Code Generator
======================

This module turns parsed source lines into the Subleqx bit image. It
implements a two-pass assembly process:

Pass 1 (Symbol Collection)
--------------------------
- Walk every line, advancing the instruction pointer by each field's width
- Record each label at the address of the field it is attached to
- Evaluate only constants: header widths and alignment amounts

Pass 2 (Code Generation)
------------------------
- Walk the same lines again with the complete symbol table
- Evaluate every operand and data expression
- Write gamma codes, fixed-width fields and padding to the bit stream

Field widths depend only on declarations (aw, dwm1w, .dN, .align), never on
an expression's value, so both passes compute identical addresses. Pass 2
checks this for every label.

Field Positions
---------------
On a plain line each field has a meaning given by its slot:

| Slot | Meaning | Encoding               |
|------|---------|------------------------|
| 0    | aw      | gamma code             |
| 1    | dwm1w   | gamma code             |
| 2    | dwm1    | dwm1w bits, unsigned   |
| 3    | a       | aw bits                |
| 4    | b       | aw bits                |
| 5    | c       | aw bits, may use @n    |

In HeaderMode.ONCE the first plain line holds slots 0-2 (optionally followed
by 3-5) and every later plain line holds slots 3-5. In
HeaderMode.PER_INSTRUCTION every plain line holds all six slots.

Addresses
---------
Addresses count bits. The instruction pointer starts at the base address,
so labels and @n are absolute bit addresses.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional
import logging

from subleqx.config import HeaderMode, validate_base_address
from subleqx.errors import AssemblerError, AssemblySyntaxError
from subleqx.assembler.bitstream import BitWriter, gamma_code_length
from subleqx.assembler.expressions import ExpressionEvaluator
from subleqx.assembler.parser import Field, LineKind, SourceLine
from subleqx.assembler.symbols import SymbolTable

logger = logging.getLogger(__name__)


# Slot numbers on a plain line
SLOT_ADDRESS_WIDTH = 0
SLOT_WORD_WIDTH_BITS = 1
SLOT_WORD_SIZE = 2
SLOT_NEXT_ADDRESS = 5

HEADER_FIELDS = 3
OPERAND_FIELDS = 3


# =============================================================================
# Program Header
# =============================================================================

@dataclass
class ProgramHeader:
    """
    Encoding parameters declared by the program.

    Attributes:
        address_width: aw, the width of every operand field
        word_width_bits: dwm1w, the width of the dwm1 field
        word_size_minus_one: dwm1, the target's data word width minus one
                             (None until pass 2 has evaluated it)
    """
    address_width: int
    word_width_bits: int
    word_size_minus_one: Optional[int] = None


# =============================================================================
# Listing Entry
# =============================================================================

@dataclass
class ListingEntry:
    """
    One listing row, recorded in pass 2.

    Attributes:
        line: Source line number (1-based)
        address: Instruction pointer at the start of the line
        values: Emitted values, formatted for display
        source: Original source text
    """
    line: int
    address: int
    values: list[str] = field(default_factory=list)
    source: str = ""


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates the Subleqx bit image from parsed source lines.

    The code generator owns:
    - The symbol table (written in pass 1, read in pass 2)
    - The instruction pointer and header state of the current pass
    - The bit writer (pass 2 only)
    - Listing rows

    Usage:
        codegen = CodeGenerator(base_address=0)
        image = codegen.generate(parse_source(text))
        codegen.get_symbols()
    """

    def __init__(self, base_address: int = 0,
                 header_mode: HeaderMode = HeaderMode.ONCE):
        """
        Initialize the code generator.

        Args:
            base_address: Bit address of the first emitted bit
            header_mode: Header layout of plain instruction lines
        """
        self._base_address = validate_base_address(base_address)
        self._header_mode = header_mode
        self._symbols = SymbolTable()
        self._evaluator = ExpressionEvaluator(self._symbols)
        self._writer: Optional[BitWriter] = None
        self._code = b""
        self._bit_length = 0
        self._ip = base_address
        self._pass = 0

        # Header state of the current pass
        self._address_width: Optional[int] = None
        self._word_width_bits: Optional[int] = None
        self._word_size_minus_one: Optional[int] = None
        self._header_complete = False

        self._listing: list[ListingEntry] = []
        self._row_values: list[str] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, lines: list[SourceLine]) -> bytes:
        """
        Assemble parsed lines into the program image.

        Args:
            lines: Lines from parse_source()/parse_lines()

        Returns:
            The packed image, trailing byte zero-padded

        Raises:
            AssemblerError: On any error; no partial image is kept
        """
        self._symbols.clear()
        self._listing.clear()
        self._code = b""
        self._bit_length = 0

        self._pass = 1
        self._writer = None
        self._run_pass(lines)
        logger.debug(
            f"Pass 1 complete: {len(self._symbols)} labels, "
            f"{self._ip - self._base_address} bits"
        )

        self._pass = 2
        self._writer = BitWriter()
        self._run_pass(lines)

        self._bit_length = self._writer.bit_length
        self._code = self._writer.finish()
        self._writer = None
        logger.debug(
            f"Pass 2 complete: {self._bit_length} bits, {len(self._code)} bytes"
        )
        return self._code

    def get_code(self) -> bytes:
        """Return the image produced by the last generate() call."""
        return self._code

    def get_bit_length(self) -> int:
        """Number of meaningful bits in the image (before final padding)."""
        return self._bit_length

    def get_base_address(self) -> int:
        return self._base_address

    def get_header(self) -> Optional[ProgramHeader]:
        """Return the header declared by the program, if any."""
        if self._address_width is None or self._word_width_bits is None:
            return None
        return ProgramHeader(
            address_width=self._address_width,
            word_width_bits=self._word_width_bits,
            word_size_minus_one=self._word_size_minus_one,
        )

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to bit addresses
        """
        return self._symbols.as_dict()

    def get_listing_entries(self) -> list[ListingEntry]:
        return list(self._listing)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, emitted values and source lines,
            followed by the symbol table.
        """
        lines = []
        lines.append("Subleqx Assembler Listing")
        lines.append("=" * 72)
        lines.append("")
        lines.append(f"{'Addr':>8}  {'Line':>5}  {'Fields':<28}  Source")
        lines.append("-" * 72)
        for entry in self._listing:
            values = " ".join(entry.values)
            lines.append(
                f"{entry.address:>8}  {entry.line:>5}  {values:<28}  {entry.source.strip()}"
            )
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for sym in sorted(self._symbols, key=lambda s: s.name):
            lines.append(f"{sym.name:20s} = {sym.address}")
        return "\n".join(lines)

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.get_listing())
            f.write("\n")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, address in bits, sorted by name)
        """
        with open(filepath, "w", encoding="utf-8") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by sxasm\n")
            for sym in sorted(self._symbols, key=lambda s: s.name):
                f.write(f"{sym.name} {sym.address}\n")

    # =========================================================================
    # Pass Driver
    # =========================================================================

    @property
    def _emitting(self) -> bool:
        return self._pass == 2

    def _run_pass(self, lines: list[SourceLine]) -> None:
        """Walk every line once, from a fresh instruction pointer."""
        self._ip = self._base_address
        self._address_width = None
        self._word_width_bits = None
        self._word_size_minus_one = None
        self._header_complete = False

        for line in lines:
            try:
                self._process_line(line)
            except AssemblerError as e:
                e.attach_location(line.location, line.source)
                raise

    def _process_line(self, line: SourceLine) -> None:
        """Process one line in the current pass."""
        kind = line.kind

        if kind is LineKind.BLANK:
            for fld in line.fields:
                with self._at_field(fld):
                    self._define_label(fld)
            return

        if (
            kind is not LineKind.PLAIN
            and self._header_mode is HeaderMode.ONCE
            and not self._header_complete
        ):
            raise AssemblySyntaxError(
                "the program header must come before any data or alignment",
                hint="start the file with 'aw, dwm1w, dwm1'",
            )

        start = self._ip
        self._row_values = []

        if kind is LineKind.ALIGN:
            self._process_align(line.fields[0])
        elif kind is LineKind.DATA:
            self._process_data(line)
        else:
            self._process_plain(line)

        if self._emitting:
            self._listing.append(ListingEntry(
                line=line.location.line,
                address=start,
                values=self._row_values,
                source=line.source,
            ))

    @contextmanager
    def _at_field(self, fld: Field) -> Iterator[None]:
        """Attach a field's location to errors raised while processing it."""
        try:
            yield
        except AssemblerError as e:
            e.attach_location(fld.location)
            raise

    # =========================================================================
    # Labels
    # =========================================================================

    def _define_label(self, fld: Field) -> None:
        """Record (pass 1) or verify (pass 2) the label on a field."""
        if fld.label is None:
            return

        if not self._emitting:
            self._symbols.define(fld.label, self._ip, fld.location)
            logger.debug(f"Defined label '{fld.label}' at {self._ip}")
            return

        address = self._symbols.address_of(fld.label)
        if address != self._ip:
            raise AssemblerError(
                f"phase error: label '{fld.label}' was at {address} in pass 1 "
                f"but is at {self._ip} in pass 2"
            )

    # =========================================================================
    # Directives
    # =========================================================================

    def _process_align(self, fld: Field) -> None:
        """Pad the instruction pointer to a multiple of the alignment."""
        with self._at_field(fld):
            self._define_label(fld)

            alignment = self._evaluator.evaluate_constant(fld.text)
            if alignment <= 1:
                raise AssemblySyntaxError(
                    f"alignment must be greater than 1, got {alignment}"
                )

            padding = -self._ip % alignment
            self._ip += padding
            if self._emitting:
                self._writer.write_padding(padding)
                self._row_values.append(f"<{padding} zero bits>")

    def _process_data(self, line: SourceLine) -> None:
        """Emit every field of a .dN line as an N-bit value."""
        width = line.data_width

        for fld in line.fields:
            with self._at_field(fld):
                self._define_label(fld)
                self._ip += width
                if self._emitting:
                    value = self._evaluator.evaluate(fld.text)
                    self._writer.write_field(value, width)
                    self._row_values.append(str(value))

    # =========================================================================
    # Header and Instructions
    # =========================================================================

    def _process_plain(self, line: SourceLine) -> None:
        """Map a plain line's fields to slots and process them."""
        count = len(line.fields)
        full = HEADER_FIELDS + OPERAND_FIELDS

        if self._header_mode is HeaderMode.PER_INSTRUCTION:
            if count != full:
                raise self._shape_error(count, f"{full}")
            first_slot = 0
        elif not self._header_complete:
            if count not in (HEADER_FIELDS, full):
                raise self._shape_error(count, f"{HEADER_FIELDS} or {full}")
            first_slot = 0
        else:
            if count != OPERAND_FIELDS:
                raise self._shape_error(count, f"{OPERAND_FIELDS}")
            first_slot = HEADER_FIELDS

        for offset, fld in enumerate(line.fields):
            with self._at_field(fld):
                self._define_label(fld)
                self._process_slot(first_slot + offset, fld)

    def _shape_error(self, count: int, expected: str) -> AssemblySyntaxError:
        if self._header_complete and self._header_mode is HeaderMode.ONCE:
            what = "an instruction line"
            hint = "instruction lines hold three operands: a, b, c"
        else:
            what = "a header line"
            hint = "the header line holds aw, dwm1w, dwm1 and optionally a, b, c"
        return AssemblySyntaxError(
            f"{what} needs {expected} fields, found {count}",
            hint=hint,
        )

    def _process_slot(self, slot: int, fld: Field) -> None:
        """Advance the pointer past one field and emit it in pass 2."""
        if slot in (SLOT_ADDRESS_WIDTH, SLOT_WORD_WIDTH_BITS):
            value = self._evaluator.evaluate_constant(fld.text)
            self._ip += gamma_code_length(value)
            if slot == SLOT_ADDRESS_WIDTH:
                self._address_width = value
            else:
                self._word_width_bits = value
            if self._emitting:
                self._writer.write_gamma(value)
                self._row_values.append(str(value))

        elif slot == SLOT_WORD_SIZE:
            self._ip += self._word_width_bits
            if self._emitting:
                value = self._evaluator.evaluate_constant(fld.text)
                self._writer.write_field(value, self._word_width_bits, signed=False)
                self._word_size_minus_one = value
                self._row_values.append(str(value))
            self._header_complete = True

        else:
            width = self._address_width
            self._ip += width
            if self._emitting:
                next_address = self._ip if slot == SLOT_NEXT_ADDRESS else None
                value = self._evaluator.evaluate(fld.text, next_address)
                self._writer.write_field(value, width)
                self._row_values.append(str(value))
