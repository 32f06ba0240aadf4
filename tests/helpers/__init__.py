"""Test helpers module for shared test utilities.

- constants: Common prices, amounts and tick sets
- factories: Pool and provider factory functions
"""

from tests.helpers.constants import E18, INITIALIZED_TICKS, PRICE_121_100, PRICE_ONE
from tests.helpers.factories import (
    make_crossing_pool,
    make_multi_range_pool,
    make_pool,
    make_provider,
)

__all__ = [
    # Constants
    "E18",
    "PRICE_ONE",
    "PRICE_121_100",
    "INITIALIZED_TICKS",
    # Factories
    "make_pool",
    "make_crossing_pool",
    "make_multi_range_pool",
    "make_provider",
]
