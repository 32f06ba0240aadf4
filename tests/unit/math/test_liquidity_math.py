"""Tests for liquidity delta arithmetic."""

import pytest

from v3sim.constants import UINT128_MAX
from v3sim.errors import LiquidityAdditionOverflow, LiquiditySubtractionUnderflow
from v3sim.math.liquidity_math import add_delta


class TestAddDelta:
    """Tests for add_delta."""

    def test_add(self):
        assert add_delta(1, 0) == 1
        assert add_delta(1, 1) == 2

    def test_subtract(self):
        assert add_delta(100, -50) == 50
        assert add_delta(100, -100) == 0

    def test_up_to_uint128_max(self):
        assert add_delta(UINT128_MAX - 15, 15) == UINT128_MAX

    def test_underflow_raises(self):
        """Removing more liquidity than present fails."""
        with pytest.raises(LiquiditySubtractionUnderflow):
            add_delta(100, -150)
        with pytest.raises(LiquiditySubtractionUnderflow):
            add_delta(0, -1)

    def test_overflow_raises(self):
        """Adding past uint128 fails."""
        with pytest.raises(LiquidityAdditionOverflow):
            add_delta(UINT128_MAX - 10, 20)
