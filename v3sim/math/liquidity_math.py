"""Signed liquidity deltas applied to uint128 liquidity."""

from v3sim.constants import UINT128_MAX
from v3sim.errors import LiquidityAdditionOverflow, LiquiditySubtractionUnderflow

__all__ = ["add_delta"]


def add_delta(x: int, y: int) -> int:
    """Add a signed liquidity delta to a uint128 liquidity value.

    Raises:
        LiquiditySubtractionUnderflow: If the result would be negative
        LiquidityAdditionOverflow: If the result would exceed uint128
    """
    z = x + y
    if y < 0 and z < 0:
        raise LiquiditySubtractionUnderflow(f"Liquidity {x} minus {-y} is negative")
    if y >= 0 and z > UINT128_MAX:
        raise LiquidityAdditionOverflow(f"Liquidity {x} plus {y} exceeds uint128")
    return z
