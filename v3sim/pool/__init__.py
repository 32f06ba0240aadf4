"""Pool state: snapshots, tick bitmap, tick ledger and data providers.

- PoolSnapshot / TickInfo: immutable view of pool state with loaded windows
- tick_bitmap: compressed bitmap of initialized ticks
- tick: per-tick liquidity bookkeeping
- provider: PoolDataProvider protocol and in-memory implementation
- builder: PoolBuilder for constructing pools from positions
"""

from .builder import PoolBuilder
from .provider import (
    InMemoryPoolDataProvider,
    LoadingPattern,
    PoolDataProvider,
    StaticPoolDataProvider,
    tick_window,
    word_window,
)
from .state import EMPTY_TICK, PoolSnapshot, TickInfo
from .tick import tick_spacing_to_max_liquidity_per_tick, update_tick
from .tick_bitmap import flip_tick, next_initialized_tick_within_one_word, position

__all__ = [
    # State
    "PoolSnapshot",
    "TickInfo",
    "EMPTY_TICK",
    # Bitmap
    "position",
    "flip_tick",
    "next_initialized_tick_within_one_word",
    # Ledger
    "update_tick",
    "tick_spacing_to_max_liquidity_per_tick",
    # Providers
    "PoolDataProvider",
    "InMemoryPoolDataProvider",
    "StaticPoolDataProvider",
    "LoadingPattern",
    "tick_window",
    "word_window",
    # Builder
    "PoolBuilder",
]
