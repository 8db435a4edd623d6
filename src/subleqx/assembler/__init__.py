"""
Subleqx Assembler
=================

A two-pass assembler for SUBLEQX, a one-instruction computer whose only
instruction is "subtract and branch if not positive":

    a, b, c    ->    mem[b] -= mem[a]; if mem[b] <= 0: goto c

The output is a bit-packed image rather than a byte stream. The program
declares the operand width (aw) and the width of the word-size field
(dwm1w) itself, and both are written at the start of the image with the
Elias gamma code so a loader can decode them without outside information.

Main Components
---------------
- **Assembler**: Main class that drives parsing and code generation
- **parse_source / parse_line**: Split source lines into labelled fields
- **CodeGenerator**: Two-pass driver (symbol collection, emission)
- **ExpressionEvaluator**: Shunting-yard expression evaluation
- **SymbolTable**: Label name to bit address mapping
- **BitWriter**: LSB-first bit stream with gamma coding

Assembly Process
----------------
1. **Parsing**: comments stripped, lines split into fields, labels and
   directives (.dN, .align) decoded
2. **Pass 1**: instruction pointer advanced field by field, labels recorded
3. **Pass 2**: expressions evaluated, fields written to the bit stream

Example Usage
-------------
>>> from subleqx.assembler import Assembler
>>> asm = Assembler()
>>> image = asm.assemble_string("8, 4, 7, 0, 1, @n")
>>> image.hex()
'0872000128'

Supported Features
------------------
- Decimal and 0x hexadecimal literals
- Labels, including forward references
- The @n next-instruction pseudo-symbol in the last operand
- Expressions with + - * / unary minus and parentheses
- Data directives (.dN) of any width
- Alignment (.align N)
- Listing and symbol file generation
"""

from subleqx.assembler.assembler import Assembler, assemble, assemble_file
from subleqx.assembler.lexer import (
    Operand,
    Operator,
    OperatorKind,
    Token,
    tokenize_expression,
)
from subleqx.assembler.parser import (
    AlignDirective,
    DataDirective,
    Field,
    LineKind,
    SourceLine,
    parse_line,
    parse_lines,
    parse_source,
)
from subleqx.assembler.codegen import CodeGenerator, ListingEntry, ProgramHeader
from subleqx.assembler.expressions import (
    ExpressionEvaluator,
    evaluate_expression,
    parse_integer,
)
from subleqx.assembler.symbols import Symbol, SymbolTable
from subleqx.assembler.bitstream import BitWriter, check_width, gamma_code_length

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Operand",
    "Operator",
    "OperatorKind",
    "Token",
    "tokenize_expression",
    # Parser
    "AlignDirective",
    "DataDirective",
    "Field",
    "LineKind",
    "SourceLine",
    "parse_line",
    "parse_lines",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "ListingEntry",
    "ProgramHeader",
    # Expressions
    "ExpressionEvaluator",
    "evaluate_expression",
    "parse_integer",
    # Symbols
    "Symbol",
    "SymbolTable",
    # Bit stream
    "BitWriter",
    "check_width",
    "gamma_code_length",
]
