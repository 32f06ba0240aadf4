"""Tests for tick <-> sqrt price conversion."""

from decimal import Decimal, localcontext

import pytest

from v3sim.constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, Q96
from v3sim.errors import PriceOutOfBounds, TickOutOfBounds
from v3sim.math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio


def reference_sqrt_ratio(tick: int) -> Decimal:
    """sqrt(1.0001**tick) * 2**96 computed with 80 significant digits."""
    with localcontext() as ctx:
        ctx.prec = 80
        return (Decimal("1.0001") ** tick).sqrt() * Decimal(Q96)


class TestGetSqrtRatioAtTick:
    """Tests for get_sqrt_ratio_at_tick."""

    def test_tick_zero_is_one(self):
        """Tick 0 is a price of exactly 1."""
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_bounds(self):
        """The tick bounds map onto the price bounds."""
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1])
    def test_out_of_range_raises(self, tick):
        with pytest.raises(TickOutOfBounds):
            get_sqrt_ratio_at_tick(tick)

    @pytest.mark.parametrize(
        "tick", [-887200, -500000, -50000, -600, -60, -1, 1, 60, 600, 50000, 150000, 500000, 887200]
    )
    def test_close_to_exact_value(self, tick):
        """Result is within one part in 1e18 of the exact value."""
        actual = Decimal(get_sqrt_ratio_at_tick(tick))
        expected = reference_sqrt_ratio(tick)
        assert abs(actual - expected) <= expected * Decimal("1e-18") + 2

    def test_strictly_increasing(self):
        """Prices increase with the tick."""
        previous = get_sqrt_ratio_at_tick(-1000)
        for tick in range(-999, 1000):
            current = get_sqrt_ratio_at_tick(tick)
            assert current > previous
            previous = current


class TestGetTickAtSqrtRatio:
    """Tests for get_tick_at_sqrt_ratio."""

    def test_min_price(self):
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK

    def test_max_price_minus_one(self):
        """The largest accepted price maps to MAX_TICK - 1."""
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_one(self):
        assert get_tick_at_sqrt_ratio(Q96) == 0

    @pytest.mark.parametrize("price", [MIN_SQRT_RATIO - 1, MAX_SQRT_RATIO, 0])
    def test_out_of_range_raises(self, price):
        with pytest.raises(PriceOutOfBounds):
            get_tick_at_sqrt_ratio(price)

    def test_round_trip(self):
        """get_tick_at_sqrt_ratio inverts get_sqrt_ratio_at_tick."""
        ticks = list(range(MIN_TICK, MAX_TICK, 997)) + [MAX_TICK - 1]
        for tick in ticks:
            assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    def test_greatest_tick_below_price(self):
        """One wei below a tick's price belongs to the tick below."""
        for tick in (-887271, -200000, -1, 1, 200000, 887271):
            assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick) - 1) == tick - 1

    def test_prices_between_ticks(self):
        """Any price between two tick prices maps to the lower tick."""
        for tick in (-46055, 0, 46054):
            low = get_sqrt_ratio_at_tick(tick)
            high = get_sqrt_ratio_at_tick(tick + 1)
            assert get_tick_at_sqrt_ratio((low + high) // 2) == tick
            assert get_tick_at_sqrt_ratio(high - 1) == tick
