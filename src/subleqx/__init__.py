"""
Subleqx - Bit-Packed Assembler for a Subtract-and-Branch OISC
=============================================================

This package provides an assembler for SUBLEQX, a one-instruction-set
computer whose single instruction takes three operands a, b, c: subtract
mem[a] from mem[b] and branch to c if the result is not positive.

Programs are assembled into a dense bit stream instead of bytes. Operand
and word-size field widths are declared by the program and stored at the
start of the image using the Elias gamma code.

Main Components
---------------
- **assembler**: Two-pass assembler (sxasm)
    Converts source files (.sxa) to packed images (.bin)

- **config**: Assembly settings (base address, header mode)

- **errors**: Exception hierarchy with source locations

Quick Start
-----------
Assemble a program:
    >>> from subleqx.assembler import Assembler
    >>> asm = Assembler()
    >>> image = asm.assemble_file("loop.sxa")
    >>> asm.write_binary("loop.bin")

Or use the command-line tool:
    $ sxasm loop.sxa -o loop.bin -l loop.lst

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from subleqx.assembler import Assembler
from subleqx.config import AssemblerConfig, HeaderMode
from subleqx.errors import (
    SubleqxError,
    AssemblerError,
    AssemblySyntaxError,
    DuplicateLabelError,
    UnresolvedLabelError,
    FieldOverflowError,
    ExpressionError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    # Configuration
    "AssemblerConfig",
    "HeaderMode",
    # Exception hierarchy
    "SubleqxError",
    "AssemblerError",
    "AssemblySyntaxError",
    "DuplicateLabelError",
    "UnresolvedLabelError",
    "FieldOverflowError",
    "ExpressionError",
    "SourceLocation",
]
