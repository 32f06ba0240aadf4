"""Public entry points for swap simulation.

Each function accepts either a PoolDataProvider or a PoolSnapshot. A bare
snapshot is wrapped in a provider that cannot widen it, so it must contain
every tick and word the swap touches (PoolBuilder snapshots always do).

Usage:
    from v3sim import PoolBuilder, simulate_exact_input

    pool = PoolBuilder().at_tick(0).add_position(-600, 600, 10**18).build()
    result = simulate_exact_input(pool, zero_for_one=True, amount_in=10**15)
    result.amount_in, result.amount_out
"""

from __future__ import annotations

from decimal import Decimal

from v3sim.config import DEFAULT_CONFIG, SimulatorConfig
from v3sim.engine.slippage import SlippageResult
from v3sim.engine.swap import SwapEngine, SwapResult
from v3sim.errors import ValidationError
from v3sim.pool.provider import PoolDataProvider, StaticPoolDataProvider
from v3sim.pool.state import PoolSnapshot

PoolSource = PoolDataProvider | PoolSnapshot


def make_engine(pool: PoolSource, config: SimulatorConfig = DEFAULT_CONFIG) -> SwapEngine:
    """Create a SwapEngine for a provider or a fully loaded snapshot."""
    if isinstance(pool, PoolSnapshot):
        return SwapEngine(StaticPoolDataProvider(pool), config, snapshot=pool)
    return SwapEngine(pool, config)


def simulate_exact_input(
    pool: PoolSource,
    zero_for_one: bool,
    amount_in: int,
    sqrt_price_limit_x96: int | None = None,
    config: SimulatorConfig = DEFAULT_CONFIG,
) -> SwapResult:
    """Simulate swapping exactly `amount_in` of the input token.

    Args:
        pool: Provider or snapshot
        zero_for_one: True to sell token0 for token1
        amount_in: Input amount (> 0), fee included
        sqrt_price_limit_x96: Optional price limit; the swap stops early if reached
        config: Simulator configuration

    Returns:
        SwapResult; amount_in >= 0 and amount_out <= 0

    Raises:
        ValidationError: If amount_in is not positive
    """
    if amount_in <= 0:
        raise ValidationError(f"amount_in must be positive: {amount_in}")
    return make_engine(pool, config).swap(zero_for_one, amount_in, sqrt_price_limit_x96)


def simulate_exact_output(
    pool: PoolSource,
    zero_for_one: bool,
    amount_out: int,
    sqrt_price_limit_x96: int | None = None,
    config: SimulatorConfig = DEFAULT_CONFIG,
) -> SwapResult:
    """Simulate swapping for exactly `amount_out` of the output token.

    Args:
        pool: Provider or snapshot
        zero_for_one: True to buy token1 with token0
        amount_out: Desired output amount (> 0)
        sqrt_price_limit_x96: Optional price limit; the swap stops early if reached
        config: Simulator configuration

    Returns:
        SwapResult; amount_out is -amount_out unless liquidity runs out first

    Raises:
        ValidationError: If amount_out is not positive
    """
    if amount_out <= 0:
        raise ValidationError(f"amount_out must be positive: {amount_out}")
    return make_engine(pool, config).swap(zero_for_one, -amount_out, sqrt_price_limit_x96)


def simulate_price_impact(
    pool: PoolSource,
    zero_for_one: bool,
    pct_impact: int | str | Decimal,
    config: SimulatorConfig = DEFAULT_CONFIG,
) -> SwapResult:
    """Largest swap that moves the spot price by at most `pct_impact` percent."""
    return make_engine(pool, config).swap_for_price_impact(zero_for_one, pct_impact)


def simulate_execution_slippage(
    pool: PoolSource,
    zero_for_one: bool,
    pct_impact: int | str | Decimal,
    config: SimulatorConfig = DEFAULT_CONFIG,
) -> SlippageResult:
    """Largest swap whose execution price moves by about `pct_impact` percent.

    The result carries execution_sqrt_price_x96 next to the amounts.
    """
    return make_engine(pool, config).swap_for_execution_price_slippage(zero_for_one, pct_impact)


__all__ = [
    "PoolSource",
    "make_engine",
    "simulate_exact_input",
    "simulate_exact_output",
    "simulate_price_impact",
    "simulate_execution_slippage",
]
