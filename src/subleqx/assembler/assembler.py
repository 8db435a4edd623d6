"""
Subleqx Assembler - Main Interface
==================================

This module provides the main Assembler class, the primary interface for
assembling Subleqx source code. It coordinates the line parser and the code
generator and writes the output files.

Example Usage
-------------
>>> from subleqx.assembler import Assembler
>>>
>>> asm = Assembler()
>>> image = asm.assemble_string('''
... 8, 4, 7, 0, 1, @n     # header, then a first instruction
... loop: x, y, loop
... x: .d8 5
... y: .d8 1
... ''')
>>> asm.get_symbols()["loop"]
40
>>> asm.write_binary("loop.bin")

Command-Line Usage
------------------
    $ sxasm loop.sxa -o loop.bin -l loop.lst -s loop.sym

Options:
    -o, --output FILE       Output image (default: input with .bin suffix)
    -b, --base-address N    Initial instruction pointer (bits)
    -l, --listing FILE      Generate listing file
    -s, --symbols FILE      Generate symbol file
    --header-mode MODE      once | per-instruction
    -v, --verbose           Verbose output
"""

from pathlib import Path
from typing import Optional
import logging

from subleqx.config import AssemblerConfig, HeaderMode
from subleqx.assembler.codegen import CodeGenerator, ProgramHeader
from subleqx.assembler.parser import parse_lines, parse_source

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main Subleqx assembler class.

    Attributes:
        config: Base address and header mode used for every assembly
    """

    def __init__(self, config: Optional[AssemblerConfig] = None,
                 base_address: Optional[int] = None,
                 header_mode: Optional[HeaderMode] = None):
        """
        Initialize the assembler.

        Args:
            config: Settings to start from (default: AssemblerConfig())
            base_address: Overrides config.base_address
            header_mode: Overrides config.header_mode
        """
        self.config = config or AssemblerConfig()
        if base_address is not None or header_mode is not None:
            self.config = AssemblerConfig(
                base_address=self.config.base_address if base_address is None else base_address,
                header_mode=self.config.header_mode if header_mode is None else header_mode,
            )

        self._codegen = CodeGenerator(
            base_address=self.config.base_address,
            header_mode=self.config.header_mode,
        )
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Subleqx source code
            filename: Virtual filename for error messages

        Returns:
            The packed program image

        Raises:
            AssemblerError: If assembly fails
        """
        lines = parse_source(source, filename)
        logger.debug(f"Parsed {len(lines)} lines from {filename}")
        return self._generate(lines)

    def assemble_lines(self, lines: list[str], filename: str = "<input>") -> bytes:
        """Assemble source that has already been split into lines."""
        return self._generate(parse_lines(lines, filename))

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to the source file

        Returns:
            The packed program image

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath
        logger.debug(f"Assembling {filepath}")

        source = filepath.read_text(encoding="utf-8")
        return self.assemble_string(source, str(filepath))

    def _generate(self, lines) -> bytes:
        code = self._codegen.generate(lines)
        logger.info(
            f"Assembled {self._codegen.get_bit_length()} bits "
            f"({len(code)} bytes), {len(self._codegen.get_symbols())} labels"
        )
        return code

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the program image of the last assembly."""
        return self._codegen.get_code()

    def get_bit_length(self) -> int:
        """Number of meaningful bits in the image (before final padding)."""
        return self._codegen.get_bit_length()

    def get_base_address(self) -> int:
        return self._codegen.get_base_address()

    def get_header(self) -> Optional[ProgramHeader]:
        """Get the aw/dwm1w/dwm1 header declared by the program."""
        return self._codegen.get_header()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to bit addresses
        """
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the program image.

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.debug(f"Wrote {len(code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        self._codegen.write_listing(filepath)
        logger.debug(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """Write the symbol table file."""
        self._codegen.write_symbols(filepath)
        logger.debug(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", base_address: int = 0,
             header_mode: HeaderMode = HeaderMode.ONCE) -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Subleqx source code
        filename: Virtual filename for errors
        base_address: Initial instruction pointer
        header_mode: Header layout of instruction lines

    Returns:
        The packed program image

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(base_address=base_address, header_mode=header_mode)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, base_address: int = 0,
                  header_mode: HeaderMode = HeaderMode.ONCE) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(base_address=base_address, header_mode=header_mode)
    return asm.assemble_file(filepath)
