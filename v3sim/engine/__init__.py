"""Swap engine package.

- swap: SwapEngine and the tick-crossing step loop
- impact: price-impact percentages to sqrt-price targets
- slippage: execution-price slippage search
"""

from .impact import parse_price_impact, sqrt_price_target_from_impact
from .slippage import SlippageResult, execution_sqrt_price_x96
from .swap import MAX_AMOUNT_SPECIFIED, SwapEngine, SwapResult, default_price_limit

__all__ = [
    "SwapEngine",
    "SwapResult",
    "SlippageResult",
    "MAX_AMOUNT_SPECIFIED",
    "default_price_limit",
    "parse_price_impact",
    "sqrt_price_target_from_impact",
    "execution_sqrt_price_x96",
]
