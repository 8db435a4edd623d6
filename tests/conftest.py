"""
Subleqx Test Configuration
==========================

Shared fixtures for the assembler tests.

It provides:
- bit_reader: a factory for an LSB-first bit reader used to decode images
  and check their exact layout
"""

import pytest


class BitReader:
    """
    Reads an LSB-first bit stream, the inverse of BitWriter.

    Only the tests need to decode images, so the reader lives here.
    """

    def __init__(self, data: bytes):
        self._data = data
        self.position = 0

    def read_bit(self) -> int:
        byte = self._data[self.position // 8]
        bit = (byte >> (self.position % 8)) & 1
        self.position += 1
        return bit

    def read_value(self, size: int) -> int:
        value = 0
        for i in range(size):
            value |= self.read_bit() << i
        return value

    def read_signed(self, size: int) -> int:
        value = self.read_value(size)
        if value >= 1 << (size - 1):
            value -= 1 << size
        return value

    def read_gamma(self) -> int:
        zeros = 0
        while self.read_bit() == 0:
            zeros += 1
        return (1 << zeros) | self.read_value(zeros)


@pytest.fixture
def bit_reader():
    """Factory fixture: bit_reader(data) returns a BitReader."""
    return BitReader
