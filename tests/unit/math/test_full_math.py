"""Tests for full-precision mul_div, rounding helpers and integer sqrt."""

import math
import random

import pytest

from v3sim.constants import Q128, UINT256_MAX
from v3sim.errors import DivisionByZero, NegativeInput, NotConverged, Overflow
from v3sim.math.full_math import div_rounding_up, mul_div, mul_div_rounding_up, sqrt


def _random_operands(seed: int, count: int):
    rng = random.Random(seed)
    for _ in range(count):
        a = rng.getrandbits(rng.randint(1, 256))
        b = rng.getrandbits(rng.randint(1, 256))
        denominator = rng.getrandbits(rng.randint(1, 256)) or 1
        yield a, b, denominator


class TestMulDiv:
    """Tests for mul_div."""

    def test_matches_big_integer_reference(self):
        """mul_div equals floor(a*b/d) whenever the result fits in 256 bits."""
        checked = 0
        for a, b, denominator in _random_operands(seed=7, count=2000):
            expected = a * b // denominator
            if expected > UINT256_MAX:
                with pytest.raises(Overflow):
                    mul_div(a, b, denominator)
            else:
                assert mul_div(a, b, denominator) == expected
                checked += 1
        assert checked > 100

    def test_full_512_bit_intermediate(self):
        """Products wider than 256 bits are handled exactly."""
        assert mul_div(UINT256_MAX, UINT256_MAX, UINT256_MAX) == UINT256_MAX
        assert mul_div(Q128, 50 * Q128 // 100, 150 * Q128 // 100) == Q128 // 3
        assert mul_div(Q128, 35 * Q128, 8 * Q128) == 4375 * Q128 // 1000

    def test_odd_and_even_denominators(self):
        """Powers of two are factored out of the denominator correctly."""
        a = 2**200 + 12345
        b = 2**180 + 67890
        for denominator in (2**130, 2**130 + 1, 3 * 2**129, 2**255 - 19):
            assert mul_div(a, b, denominator) == a * b // denominator

    def test_zero_denominator_raises(self):
        """Division by zero is detected."""
        with pytest.raises(DivisionByZero):
            mul_div(Q128, 5, 0)

    def test_zero_denominator_with_overflowing_product_raises(self):
        """Division by zero is detected even when the product needs 512 bits."""
        with pytest.raises(DivisionByZero):
            mul_div(Q128, Q128, 0)

    def test_result_overflow_raises(self):
        """Results wider than 256 bits raise Overflow."""
        with pytest.raises(Overflow):
            mul_div(Q128, Q128, 1)
        with pytest.raises(Overflow):
            mul_div(UINT256_MAX, UINT256_MAX, UINT256_MAX - 1)

    def test_operands_wider_than_256_bits_raise(self):
        """Inputs outside uint256 are rejected."""
        with pytest.raises(Overflow):
            mul_div(UINT256_MAX + 1, 1, 1)

    def test_negative_operand_raises(self):
        """Negative inputs are rejected."""
        with pytest.raises(NegativeInput):
            mul_div(-1, 1, 1)


class TestMulDivRoundingUp:
    """Tests for mul_div_rounding_up."""

    def test_matches_ceiling_reference(self):
        """mul_div_rounding_up equals ceil(a*b/d) when it fits."""
        for a, b, denominator in _random_operands(seed=11, count=1000):
            expected = -(-(a * b) // denominator)
            if expected > UINT256_MAX:
                with pytest.raises(Overflow):
                    mul_div_rounding_up(a, b, denominator)
            else:
                assert mul_div_rounding_up(a, b, denominator) == expected

    def test_exact_division_not_rounded(self):
        """No rounding when the division is exact."""
        assert mul_div_rounding_up(Q128, 1000 * Q128, 3000 * Q128) == -(-Q128 // 3)
        assert mul_div_rounding_up(10, 10, 5) == 20

    def test_overflow_after_rounding_raises(self):
        """A floor result of exactly uint256 max cannot be rounded up."""
        # (2**129 - 1) * (2**129 + 1) / 4 = 2**256 - 1/4
        a = 2**129 - 1
        b = 2**129 + 1
        assert mul_div(a, b, 4) == UINT256_MAX
        with pytest.raises(Overflow):
            mul_div_rounding_up(a, b, 4)


class TestDivRoundingUp:
    """Tests for div_rounding_up."""

    def test_rounds_up_with_remainder(self):
        assert div_rounding_up(10, 3) == 4
        assert div_rounding_up(9, 3) == 3
        assert div_rounding_up(0, 7) == 0

    def test_zero_divisor_raises(self):
        with pytest.raises(DivisionByZero):
            div_rounding_up(1, 0)


class TestSqrt:
    """Tests for Newton-Raphson integer sqrt."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (1, 1), (2, 1), (3, 1), (4, 2), (529, 23), (530, 23), (528, 22)],
    )
    def test_small_values(self, value, expected):
        """Known small roots."""
        assert sqrt(value) == expected

    def test_uint256_max(self):
        """Largest 256-bit input."""
        assert sqrt(UINT256_MAX) == 2**128 - 1

    def test_matches_isqrt(self):
        """Floor square root agrees with math.isqrt."""
        rng = random.Random(3)
        for _ in range(500):
            value = rng.getrandbits(rng.randint(1, 256))
            assert sqrt(value) == math.isqrt(value)

    def test_perfect_squares_and_neighbours(self):
        """Roots snap to the floor around perfect squares."""
        for root in (10**9, 2**64 + 3, 2**127 + 1):
            assert sqrt(root * root) == root
            assert sqrt(root * root - 1) == root - 1
            assert sqrt(root * root + 1) == root

    def test_negative_input_raises(self):
        """Negative arguments are rejected."""
        with pytest.raises(NegativeInput):
            sqrt(-1)

    def test_iteration_bound(self):
        """Too few iterations raise NotConverged."""
        with pytest.raises(NotConverged):
            sqrt(10**30, max_iterations=1)
