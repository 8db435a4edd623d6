"""
Subleqx Bit-Level Output Encoder
================================

The Subleqx image is a single bit stream with no byte alignment: every field
is exactly as wide as its declaration says.

Bit Order
---------
Bits are written least-significant first, both within a field and within
an output byte. The first bit of the stream is bit 0 of byte 0:

    write_value(0b101, 3); write_value(0b11, 2)

    byte 0:  bit 7 ... bit 0
             0 0 0 1 1 1 0 1

The trailing partial byte is padded with zero bits.

Gamma Code
----------
The header widths are written with the Elias gamma code, so a loader can
read them without knowing anything in advance. For v > 0 with bit length L:

    L-1 zero bits, a one bit, then the low L-1 bits of v

    v = 1  ->  1                    (1 bit)
    v = 4  ->  0 0 1 0 0            (5 bits)
    v = 8  ->  0 0 0 1 0 0 0        (7 bits)

The code is 2L-1 bits long; gamma_code_length() gives the same figure to the
pass-1 address calculation.

Field Widths
------------
check_width() validates a value before it is narrowed:

- unsigned fields: 0 <= value < 2**width
- signed fields:   -2**(width-1) < value < 2**width

Negative values are stored as the low bits of their two's complement.
"""

from subleqx.errors import AssemblySyntaxError, FieldOverflowError


# =============================================================================
# Width Helpers
# =============================================================================

def check_width(value: int, width: int, signed: bool = True) -> None:
    """
    Check that a value can be stored in a field.

    Args:
        value: The value to store
        width: Field width in bits
        signed: Whether negative values are allowed

    Raises:
        FieldOverflowError: If the value does not fit
    """
    if value < 0:
        if not signed or -value >= (1 << (width - 1)):
            raise FieldOverflowError(value, width, signed=signed)
    elif value >= (1 << width):
        raise FieldOverflowError(value, width, signed=signed)


def gamma_code_length(value: int) -> int:
    """
    Number of bits in the gamma code of a positive integer.

    Raises:
        AssemblySyntaxError: If the value is not positive
    """
    if value <= 0:
        raise AssemblySyntaxError(
            f"cannot gamma-code {value}: value must be positive"
        )
    return 2 * value.bit_length() - 1


# =============================================================================
# Bit Writer
# =============================================================================

class BitWriter:
    """
    Append-only bit buffer.

    Usage:
        writer = BitWriter()
        writer.write_gamma(8)
        writer.write_field(7, 4, signed=False)
        image = writer.finish()

    finish() is called once; the writer is closed afterwards.
    """

    def __init__(self):
        self._data = bytearray()
        self._current = 0      # Byte being filled
        self._bit_index = 0    # Bits used in _current (0-7)
        self._bit_count = 0
        self._finished = False

    @property
    def bit_length(self) -> int:
        """Total number of bits written so far, excluding final padding."""
        return self._bit_count

    @property
    def finished(self) -> bool:
        return self._finished

    def write_value(self, value: int, size: int) -> None:
        """
        Write the low `size` bits of a value, least significant first.

        No range check is made; see write_field().
        """
        if self._finished:
            raise RuntimeError("cannot write to a finished BitWriter")

        for i in range(size):
            if (value >> i) & 1:
                self._current |= 1 << self._bit_index
            self._bit_index += 1
            self._bit_count += 1
            if self._bit_index == 8:
                self._data.append(self._current)
                self._current = 0
                self._bit_index = 0

    def write_field(self, value: int, width: int, signed: bool = True) -> None:
        """
        Write a value into a field of fixed width.

        Raises:
            FieldOverflowError: If the value does not fit
        """
        check_width(value, width, signed)
        self.write_value(value, width)

    def write_gamma(self, value: int) -> None:
        """
        Write the gamma code of a positive integer.

        Raises:
            AssemblySyntaxError: If the value is not positive
        """
        gamma_code_length(value)
        prefix = value.bit_length() - 1
        self.write_value(0, prefix)
        self.write_value(1, 1)
        self.write_value(value - (1 << prefix), prefix)

    def write_padding(self, count: int) -> None:
        """Write `count` zero bits."""
        self.write_value(0, count)

    def finish(self) -> bytes:
        """
        Seal the stream and return it as bytes.

        A partial last byte is kept with its unused high bits zero.
        """
        if self._finished:
            raise RuntimeError("BitWriter.finish() called twice")

        if self._bit_index != 0:
            self._data.append(self._current)
            self._current = 0
            self._bit_index = 0
        self._finished = True
        return bytes(self._data)
