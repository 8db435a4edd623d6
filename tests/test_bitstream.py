# =============================================================================
# test_bitstream.py - Bit Encoder Unit Tests
# =============================================================================
# Tests for the bit-level output encoder.
#
# Test coverage includes:
#   - LSB-first bit order within fields and bytes
#   - Elias gamma code layout and length
#   - Signed and unsigned width checks
#   - Padding, finishing and bit counting
# =============================================================================

import pytest
from subleqx.assembler.bitstream import BitWriter, check_width, gamma_code_length
from subleqx.errors import AssemblySyntaxError, FieldOverflowError


# =============================================================================
# Bit Order Tests
# =============================================================================

class TestBitOrder:
    """Bits fill each byte from the least significant end."""

    def test_single_bit(self):
        writer = BitWriter()
        writer.write_value(1, 1)
        assert writer.finish() == b"\x01"

    def test_fields_pack_lsb_first(self):
        writer = BitWriter()
        writer.write_value(0b101, 3)
        writer.write_value(0b11, 2)
        assert writer.finish() == bytes([0b00011101])

    def test_field_crosses_byte_boundary(self):
        writer = BitWriter()
        writer.write_value(0, 4)
        writer.write_value(0xFF, 8)
        assert writer.finish() == bytes([0xF0, 0x0F])

    def test_only_low_bits_written(self):
        writer = BitWriter()
        writer.write_value(0x1FF, 4)
        assert writer.finish() == b"\x0f"

    def test_partial_byte_padded_with_zeros(self):
        writer = BitWriter()
        writer.write_value(0b111, 3)
        assert writer.finish() == b"\x07"

    def test_empty_stream(self):
        assert BitWriter().finish() == b""


# =============================================================================
# Gamma Code Tests
# =============================================================================

class TestGamma:
    """Test the Elias gamma code."""

    @pytest.mark.parametrize("value,length", [
        (1, 1), (2, 3), (3, 3), (4, 5), (7, 5), (8, 7), (255, 15), (256, 17),
    ])
    def test_length(self, value, length):
        assert gamma_code_length(value) == length

    def test_written_length_matches(self):
        for value in (1, 2, 5, 8, 100, 1 << 40):
            writer = BitWriter()
            writer.write_gamma(value)
            assert writer.bit_length == gamma_code_length(value)

    def test_one(self):
        writer = BitWriter()
        writer.write_gamma(1)
        assert writer.finish() == b"\x01"

    def test_four(self):
        """4 is 0 0 1 0 0: the marker bit is bit 2."""
        writer = BitWriter()
        writer.write_gamma(4)
        assert writer.finish() == b"\x04"

    def test_five(self):
        """5 is 0 0 1 then the low bits 01, least significant first."""
        writer = BitWriter()
        writer.write_gamma(5)
        assert writer.finish() == bytes([0b01100])

    def test_decodes(self, bit_reader):
        values = [1, 2, 3, 8, 13, 64, 1000]
        writer = BitWriter()
        for value in values:
            writer.write_gamma(value)
        reader = bit_reader(writer.finish())
        assert [reader.read_gamma() for _ in values] == values

    @pytest.mark.parametrize("value", [0, -1])
    def test_not_positive(self, value):
        with pytest.raises(AssemblySyntaxError, match="must be positive"):
            gamma_code_length(value)
        with pytest.raises(AssemblySyntaxError):
            BitWriter().write_gamma(value)


# =============================================================================
# Width Check Tests
# =============================================================================

class TestCheckWidth:
    """Test field range validation."""

    def test_unsigned_bounds(self):
        check_width(0, 8, signed=False)
        check_width(255, 8, signed=False)
        with pytest.raises(FieldOverflowError):
            check_width(256, 8, signed=False)

    def test_unsigned_rejects_negative(self):
        with pytest.raises(FieldOverflowError, match="must not be negative"):
            check_width(-1, 8, signed=False)

    def test_signed_accepts_full_unsigned_range(self):
        check_width(255, 8)
        with pytest.raises(FieldOverflowError):
            check_width(256, 8)

    def test_signed_negative_bounds(self):
        check_width(-127, 8)
        with pytest.raises(FieldOverflowError, match="does not fit in 8 bits"):
            check_width(-128, 8)

    def test_error_attributes(self):
        with pytest.raises(FieldOverflowError) as exc_info:
            check_width(300, 8)
        assert exc_info.value.value == 300
        assert exc_info.value.width == 8


# =============================================================================
# Field Writer Tests
# =============================================================================

class TestWriteField:
    """Test write_field() and the two's-complement encoding."""

    def test_negative_is_twos_complement(self, bit_reader):
        writer = BitWriter()
        writer.write_field(-1, 8)
        writer.write_field(-5, 4)
        data = writer.finish()
        assert data[0] == 0xFF
        reader = bit_reader(data)
        reader.read_value(8)
        assert reader.read_signed(4) == -5

    def test_overflow_writes_nothing(self):
        writer = BitWriter()
        with pytest.raises(FieldOverflowError):
            writer.write_field(16, 4)
        assert writer.bit_length == 0


# =============================================================================
# Writer State Tests
# =============================================================================

class TestWriterState:
    """Test padding, counting and finishing."""

    def test_bit_length_excludes_final_padding(self):
        writer = BitWriter()
        writer.write_value(0, 11)
        assert writer.bit_length == 11
        assert len(writer.finish()) == 2
        assert writer.bit_length == 11

    def test_padding(self):
        writer = BitWriter()
        writer.write_value(1, 1)
        writer.write_padding(7)
        writer.write_value(1, 1)
        assert writer.bit_length == 9
        assert writer.finish() == b"\x01\x01"

    def test_zero_padding(self):
        writer = BitWriter()
        writer.write_padding(0)
        assert writer.bit_length == 0

    def test_finish_twice(self):
        writer = BitWriter()
        writer.finish()
        assert writer.finished
        with pytest.raises(RuntimeError):
            writer.finish()

    def test_write_after_finish(self):
        writer = BitWriter()
        writer.finish()
        with pytest.raises(RuntimeError):
            writer.write_value(1, 1)
