"""Tests for most/least significant bit scans."""

import pytest

from v3sim.constants import UINT256_MAX
from v3sim.errors import NegativeInput, Overflow, ZeroInput
from v3sim.math.bit_math import least_significant_bit, most_significant_bit


class TestMostSignificantBit:
    """Tests for most_significant_bit."""

    def test_one(self):
        assert most_significant_bit(1) == 0

    def test_two(self):
        assert most_significant_bit(2) == 1

    def test_powers_of_two(self):
        """2**i has msb i."""
        for i in range(256):
            assert most_significant_bit(2**i) == i

    def test_uint256_max(self):
        assert most_significant_bit(UINT256_MAX) == 255

    def test_bounds_property(self):
        """2**msb <= x < 2**(msb+1)."""
        for x in (3, 1000, 12345678901234567890, 2**200 + 2**13):
            msb = most_significant_bit(x)
            assert 2**msb <= x < 2 ** (msb + 1)

    def test_zero_raises(self):
        with pytest.raises(ZeroInput):
            most_significant_bit(0)

    def test_negative_raises(self):
        with pytest.raises(NegativeInput):
            most_significant_bit(-4)

    def test_too_wide_raises(self):
        with pytest.raises(Overflow):
            most_significant_bit(2**256)


class TestLeastSignificantBit:
    """Tests for least_significant_bit."""

    def test_one(self):
        assert least_significant_bit(1) == 0

    def test_two(self):
        assert least_significant_bit(2) == 1

    def test_powers_of_two(self):
        """2**i has lsb i."""
        for i in range(256):
            assert least_significant_bit(2**i) == i

    def test_uint256_max(self):
        assert least_significant_bit(UINT256_MAX) == 0

    def test_mixed_bits(self):
        """Only the lowest set bit matters."""
        assert least_significant_bit(12) == 2
        assert least_significant_bit(2**255 + 2**100) == 100

    def test_zero_raises(self):
        with pytest.raises(ZeroInput):
            least_significant_bit(0)
