"""Per-tick liquidity bookkeeping."""

from __future__ import annotations

from collections.abc import MutableMapping

from v3sim.constants import MAX_TICK, MIN_TICK, UINT128_MAX
from v3sim.errors import ExceedsMaxLiquidityPerTick, Overflow, Underflow
from v3sim.math.liquidity_math import add_delta
from v3sim.safe_int import checked_int128_add, checked_int128_sub

from .state import TickInfo

__all__ = ["tick_spacing_to_max_liquidity_per_tick", "update_tick"]


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """Maximum gross liquidity per tick for a tick spacing.

    Spreads uint128 evenly over every usable tick so that active liquidity
    can never overflow even if every tick were initialized.
    """
    # Truncating division, as the reference's int24 arithmetic
    min_tick = -(-MIN_TICK // tick_spacing) * tick_spacing
    max_tick = (MAX_TICK // tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return UINT128_MAX // num_ticks


def update_tick(
    ticks: MutableMapping[int, TickInfo],
    tick: int,
    liquidity_delta: int,
    upper: bool,
    max_liquidity: int,
) -> bool:
    """Apply a position's liquidity delta to one of its boundary ticks.

    Args:
        ticks: Tick map, updated in place
        tick: The boundary tick
        liquidity_delta: Liquidity added (positive) or removed (negative)
        upper: True for the upper boundary of the position
        max_liquidity: Gross liquidity cap per tick

    Returns:
        True if the tick flipped between initialized and uninitialized

    Raises:
        LiquiditySubtractionUnderflow: If more liquidity is removed than exists
        LiquidityAdditionOverflow: If gross liquidity exceeds uint128
        ExceedsMaxLiquidityPerTick: If gross liquidity exceeds max_liquidity
        Overflow, Underflow: If net liquidity leaves the int128 range
    """
    info = ticks.get(tick, TickInfo())

    liquidity_gross_before = info.liquidity_gross
    liquidity_gross_after = add_delta(liquidity_gross_before, liquidity_delta)
    if liquidity_gross_after > max_liquidity:
        raise ExceedsMaxLiquidityPerTick(
            f"Tick {tick} gross liquidity {liquidity_gross_after} exceeds {max_liquidity}",
            tick=tick,
        )

    flipped = (liquidity_gross_after == 0) != (liquidity_gross_before == 0)

    # Upper boundaries remove liquidity when crossed left to right
    try:
        if upper:
            liquidity_net = checked_int128_sub(info.liquidity_net, liquidity_delta)
        else:
            liquidity_net = checked_int128_add(info.liquidity_net, liquidity_delta)
    except (Overflow, Underflow) as err:
        err.tick = tick
        raise

    if liquidity_gross_after == 0:
        ticks.pop(tick, None)
    else:
        ticks[tick] = TickInfo(
            liquidity_gross=liquidity_gross_after,
            liquidity_net=liquidity_net,
            initialized=True,
        )
    return flipped
