"""Tests for the public simulate_* entry points."""

import pytest

from tests.helpers import E18, make_provider
from v3sim import (
    SlippageResult,
    simulate_exact_input,
    simulate_exact_output,
    simulate_execution_slippage,
    simulate_price_impact,
)
from v3sim.errors import ValidationError
from v3sim.math.tick_math import get_sqrt_ratio_at_tick
from v3sim.simulator import make_engine
from v3sim.pool import StaticPoolDataProvider

SMALL_WINDOWS = {"tick_window_radius": 1, "tick_window_span": 2, "word_window_radius": 0}


class TestMakeEngine:
    """Tests for make_engine."""

    def test_snapshot_is_wrapped(self, pool):
        engine = make_engine(pool)
        assert isinstance(engine.provider, StaticPoolDataProvider)
        assert engine.snapshot is pool

    def test_provider_is_used_directly(self, pool):
        provider = make_provider(pool)
        engine = make_engine(provider)
        assert engine.provider is provider
        assert provider.calls[0][0] == "current_state"


class TestSimulateExactInput:
    """Tests for simulate_exact_input."""

    def test_basic(self, pool):
        result = simulate_exact_input(pool, zero_for_one=True, amount_in=10**16)
        assert result.amount_in == 10**16
        assert result.amount_out < 0

    def test_with_limit(self, pool):
        limit = get_sqrt_ratio_at_tick(-60)
        result = simulate_exact_input(pool, True, 10**30, sqrt_price_limit_x96=limit)
        assert result.sqrt_price_x96 == limit

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_raises(self, pool, amount):
        with pytest.raises(ValidationError):
            simulate_exact_input(pool, True, amount)


class TestSimulateExactOutput:
    """Tests for simulate_exact_output."""

    def test_basic(self, pool):
        result = simulate_exact_output(pool, zero_for_one=False, amount_out=10**16)
        assert result.amount0 == -(10**16)
        assert result.amount1 > 0

    def test_non_positive_amount_raises(self, pool):
        with pytest.raises(ValidationError):
            simulate_exact_output(pool, False, 0)


class TestProvidersAndSnapshotsAgree:
    """Snapshot and provider paths give identical results."""

    def test_exact_input(self, multi_range_pool):
        provider = make_provider(multi_range_pool, **SMALL_WINDOWS)
        from_provider = simulate_exact_input(provider, True, 50 * E18, config=provider.config)
        from_snapshot = simulate_exact_input(multi_range_pool, True, 50 * E18)

        assert from_provider.amount0 == from_snapshot.amount0
        assert from_provider.amount1 == from_snapshot.amount1
        assert from_provider.sqrt_price_x96 == from_snapshot.sqrt_price_x96
        assert from_provider.widen_requests > 0

    def test_price_impact(self, multi_range_pool):
        provider = make_provider(multi_range_pool, **SMALL_WINDOWS)
        from_provider = simulate_price_impact(provider, False, 10, config=provider.config)
        from_snapshot = simulate_price_impact(multi_range_pool, False, 10)

        assert from_provider.amount0 == from_snapshot.amount0
        assert from_provider.amount1 == from_snapshot.amount1

    def test_execution_slippage(self, multi_range_pool):
        provider = make_provider(multi_range_pool, **SMALL_WINDOWS)
        from_provider = simulate_execution_slippage(provider, True, 3, config=provider.config)
        from_snapshot = simulate_execution_slippage(multi_range_pool, True, 3)

        assert isinstance(from_provider, SlippageResult)
        assert from_provider.amount0 == from_snapshot.amount0
        assert from_provider.amount1 == from_snapshot.amount1
        assert from_provider.execution_sqrt_price_x96 == from_snapshot.execution_sqrt_price_x96


class TestFixturePools:
    """Simulations over JSON fixtures."""

    def test_crossing_pool_fixture(self, load_pool):
        """Crossing tick 200 leaves 4e18 liquidity with the input fully spent."""
        result = simulate_exact_input(load_pool("crossing_pool"), False, 10**17)
        assert result.liquidity == 4 * E18
        assert result.amount_in == 10**17

    def test_windowed_fixture_within_window(self, load_pool):
        """A small swap stays inside the loaded windows."""
        result = simulate_exact_input(load_pool("windowed_pool"), True, 10**15)
        assert result.amount_in == 10**15
        assert result.widen_requests == 0
