"""
Subleqx Assembler - Configuration
=================================

Assembly settings that live outside the source file. Configuration can
come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options (which take precedence, see cli/sxasm.py)

Base Address
------------
The instruction pointer counts bits, not bytes. The base address is the
bit address of the first emitted bit; every label and the @n pseudo-symbol
are absolute (base address + bit offset). It must be non-negative and fit
in 63 bits.
"""

from dataclasses import dataclass
from enum import Enum
import os

from subleqx.errors import AssemblySyntaxError, FieldOverflowError


# Widest base address accepted (bits)
BASE_ADDRESS_BITS = 63


class HeaderMode(Enum):
    """
    How plain instruction lines carry the program header.

    ONCE: the header (aw, dwm1w, dwm1) is declared by the first line of the
          file and every later instruction line holds only its three
          operands.
    PER_INSTRUCTION: every instruction line re-declares aw, dwm1w and dwm1
          ahead of its operands, so each instruction is self-describing.
    """
    ONCE = "once"
    PER_INSTRUCTION = "per-instruction"


def validate_base_address(value: int) -> int:
    """
    Check that a base address is usable as the initial instruction pointer.

    Raises:
        FieldOverflowError: If the value is negative or needs more than 63 bits
    """
    if value < 0 or value >= (1 << BASE_ADDRESS_BITS):
        raise FieldOverflowError(value, BASE_ADDRESS_BITS, signed=False)
    return value


@dataclass
class AssemblerConfig:
    """
    Configuration for one assembly run.

    Attributes:
        base_address: Initial instruction pointer (bit address, default: 0)
        header_mode: Header layout of instruction lines (default: ONCE)
    """

    base_address: int = 0
    header_mode: HeaderMode = HeaderMode.ONCE

    def __post_init__(self) -> None:
        validate_base_address(self.base_address)
        if not isinstance(self.header_mode, HeaderMode):
            self.header_mode = HeaderMode(self.header_mode)

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from environment variables.

        Environment variables (all optional):
            SUBLEQX_BASE_ADDRESS: Base address (decimal or 0x hex)
            SUBLEQX_HEADER_MODE: "once" or "per-instruction"

        Returns:
            AssemblerConfig with values from environment variables

        Raises:
            AssemblySyntaxError: If a variable holds an unusable value
        """
        from subleqx.assembler.expressions import parse_integer

        config = cls()

        if base := os.environ.get("SUBLEQX_BASE_ADDRESS"):
            config.base_address = validate_base_address(parse_integer(base.strip()))

        if mode := os.environ.get("SUBLEQX_HEADER_MODE"):
            try:
                config.header_mode = HeaderMode(mode.strip().lower())
            except ValueError:
                valid = ", ".join(m.value for m in HeaderMode)
                raise AssemblySyntaxError(
                    f"invalid SUBLEQX_HEADER_MODE '{mode}'",
                    hint=f"valid modes: {valid}",
                )

        return config
