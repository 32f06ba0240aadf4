"""Price-impact targets.

A price impact is a positive percentage of adverse price movement, measured
in sqrt-price terms:

    zero_for_one:  target = sqrt_price * (1 - pct / 100)
    one_for_zero:  target = sqrt_price / (1 - pct / 100)

The percentage is converted to an 18-decimal fixed-point fraction and
applied with mul_div, then clamped into (MIN_SQRT_RATIO, MAX_SQRT_RATIO), so
100% reaches the price bound in either direction.
The same target is used as a spot-price limit by swap_for_price_impact and
as an execution-price target by the slippage search.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import TYPE_CHECKING

import structlog

from v3sim.constants import MAX_SQRT_RATIO, MIN_SQRT_RATIO
from v3sim.errors import InvalidPriceImpact
from v3sim.math.full_math import mul_div

from .swap import MAX_AMOUNT_SPECIFIED

if TYPE_CHECKING:
    from .swap import SwapEngine, SwapResult

logger = structlog.get_logger()

WAD = 10**18
# pct / 100 scaled to WAD
_PCT_TO_WAD = 10**16


def parse_price_impact(pct_impact: int | str | Decimal) -> int:
    """Convert a percentage to a WAD-scaled fraction (1% -> 10**16).

    Digits beyond 1e-16 percent are truncated.

    Raises:
        InvalidPriceImpact: If the value is not a finite number, or not positive
    """
    if isinstance(pct_impact, bool):
        raise InvalidPriceImpact(f"Price impact must be a number, got {pct_impact!r}")
    try:
        pct = Decimal(str(pct_impact).strip())
    except InvalidOperation as err:
        raise InvalidPriceImpact(f"Price impact is not a number: {pct_impact!r}") from err
    if not pct.is_finite():
        raise InvalidPriceImpact(f"Price impact must be finite: {pct_impact!r}")

    impact_wad = int((pct * _PCT_TO_WAD).to_integral_value(rounding=ROUND_DOWN))
    if impact_wad <= 0:
        raise InvalidPriceImpact(f"Price impact must be positive: {pct_impact!r}")
    return impact_wad


def sqrt_price_target_from_impact(
    sqrt_price_x96: int, pct_impact: int | str | Decimal, zero_for_one: bool
) -> int:
    """Sqrt price reached after `pct_impact` percent of adverse movement.

    Args:
        sqrt_price_x96: Starting sqrt price
        pct_impact: Positive percentage, e.g. 1, "0.5" or Decimal("2.5")
        zero_for_one: Swap direction (price falls when True)

    Returns:
        Target sqrt price strictly inside (MIN_SQRT_RATIO, MAX_SQRT_RATIO)
        and strictly beyond sqrt_price_x96 in the swap direction

    Raises:
        InvalidPriceImpact: If the percentage is not positive, exceeds 100%,
            or is too small to move the price
    """
    impact_wad = parse_price_impact(pct_impact)
    if impact_wad > WAD:
        raise InvalidPriceImpact(f"Price impact {pct_impact}% exceeds 100%")

    if zero_for_one:
        target = mul_div(sqrt_price_x96, WAD - impact_wad, WAD)
        target = max(target, MIN_SQRT_RATIO + 1)
        moved = target < sqrt_price_x96
    else:
        # Reciprocal of the zero-for-one factor: 100% reaches the upper bound
        if impact_wad == WAD:
            target = MAX_SQRT_RATIO - 1
        else:
            target = min(mul_div(sqrt_price_x96, WAD, WAD - impact_wad), MAX_SQRT_RATIO - 1)
        moved = target > sqrt_price_x96

    if not moved:
        raise InvalidPriceImpact(
            f"Price impact {pct_impact}% does not move sqrt price {sqrt_price_x96}"
        )
    return target


def swap_for_price_impact(
    engine: SwapEngine, zero_for_one: bool, pct_impact: int | str | Decimal
) -> SwapResult:
    """Swap until the spot price reaches the impact target.

    Runs the swap loop with an unbounded input and the target as price
    limit, so the result is the largest swap that keeps the spot price
    within `pct_impact` percent of its starting value.
    """
    sqrt_price_limit_x96 = sqrt_price_target_from_impact(
        engine.snapshot.sqrt_price_x96, pct_impact, zero_for_one
    )
    logger.debug(
        "price_impact_limit",
        zero_for_one=zero_for_one,
        pct_impact=str(pct_impact),
        sqrt_price_x96=engine.snapshot.sqrt_price_x96,
        sqrt_price_limit_x96=sqrt_price_limit_x96,
    )
    return engine.swap(zero_for_one, MAX_AMOUNT_SPECIFIED, sqrt_price_limit_x96)


__all__ = [
    "WAD",
    "parse_price_impact",
    "sqrt_price_target_from_impact",
    "swap_for_price_impact",
]
