"""Fixed-point math for concentrated liquidity swaps.

This package reproduces the on-chain integer libraries exactly:
- full_math: 512-bit mul_div, rounding-up variants, integer sqrt
- bit_math: most/least significant bit of a 256-bit word
- tick_math: tick <-> Q64.96 sqrt price conversion
- sqrt_price_math: price movement and token deltas within one range
- swap_math: a single bounded swap step
- liquidity_math: signed liquidity deltas
"""

from .bit_math import least_significant_bit, most_significant_bit
from .full_math import div_rounding_up, mul_div, mul_div_rounding_up, mul_mod, sqrt
from .liquidity_math import add_delta
from .sqrt_price_math import (
    get_amount0_delta,
    get_amount0_delta_signed,
    get_amount1_delta,
    get_amount1_delta_signed,
    get_next_sqrt_price_from_amount0_rounding_up,
    get_next_sqrt_price_from_amount1_rounding_down,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from .swap_math import SwapStepResult, compute_swap_step
from .tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio

__all__ = [
    # Full precision
    "mul_div",
    "mul_div_rounding_up",
    "mul_mod",
    "div_rounding_up",
    "sqrt",
    # Bits
    "most_significant_bit",
    "least_significant_bit",
    # Ticks
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    # Sqrt price
    "get_next_sqrt_price_from_amount0_rounding_up",
    "get_next_sqrt_price_from_amount1_rounding_down",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
    # Swap step
    "SwapStepResult",
    "compute_swap_step",
    # Liquidity
    "add_delta",
]
