"""Pool data providers: the engine's only source of pool state.

The engine starts from `current_state()` and, when a swap walks past the
loaded tick or bitmap window, asks the provider to widen it. Providers
return new snapshots and never mutate the one they are given.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

import structlog

from v3sim.config import DEFAULT_CONFIG, SimulatorConfig
from v3sim.constants import MAX_TICK, MAX_WORD_POS, MIN_TICK, MIN_WORD_POS

from .state import PoolSnapshot, Window

logger = structlog.get_logger()


class LoadingPattern(Enum):
    """Shape of a loaded window relative to its anchor."""

    LOW = "low"  # anchor and below
    HIGH = "high"  # anchor and above
    MID = "mid"  # centred on anchor

    @classmethod
    def for_direction(cls, zero_for_one: bool) -> LoadingPattern:
        """Price falls when swapping token0 for token1, so load below."""
        return cls.LOW if zero_for_one else cls.HIGH


def _window(anchor: int, below: int, above: int, lower: int, upper: int) -> Window:
    return max(lower, anchor - below), min(upper, anchor + above)


def tick_window(anchor: int, size: int, tick_spacing: int, pattern: LoadingPattern) -> Window:
    """Inclusive tick range of `size` spacings around `anchor`, clamped to the tick domain."""
    span = size * tick_spacing
    if pattern is LoadingPattern.LOW:
        return _window(anchor, span, 0, MIN_TICK, MAX_TICK)
    if pattern is LoadingPattern.HIGH:
        return _window(anchor, 0, span, MIN_TICK, MAX_TICK)
    return _window(anchor, span, span, MIN_TICK, MAX_TICK)


def word_window(anchor: int, size: int, pattern: LoadingPattern) -> Window:
    """Inclusive word range of `size` words around `anchor`, clamped to the word domain."""
    if pattern is LoadingPattern.LOW:
        return _window(anchor, size, 0, MIN_WORD_POS, MAX_WORD_POS)
    if pattern is LoadingPattern.HIGH:
        return _window(anchor, 0, size, MIN_WORD_POS, MAX_WORD_POS)
    return _window(anchor, size, size, MIN_WORD_POS, MAX_WORD_POS)


class PoolDataProvider(Protocol):
    """Protocol for pool-state sources.

    This allows swapping between an RPC-backed loader and the in-memory
    provider used in tests.
    """

    def current_state(self) -> PoolSnapshot:
        """Load slot0, liquidity and an initial window of ticks and words."""
        ...

    def widen_tick_window(
        self, snapshot: PoolSnapshot, around_tick: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        """Return a copy of `snapshot` with more tick info loaded.

        Args:
            snapshot: Snapshot whose window is exhausted
            around_tick: Tick that must be loaded afterwards
            direction: Which side of around_tick to load

        Returns:
            New snapshot whose tick windows include around_tick
        """
        ...

    def widen_bitmap_window(
        self, snapshot: PoolSnapshot, around_word: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        """Return a copy of `snapshot` with more bitmap words loaded.

        Args:
            snapshot: Snapshot whose window is exhausted
            around_word: Word position that must be loaded afterwards
            direction: Which side of around_word to load

        Returns:
            New snapshot whose word windows include around_word
        """
        ...


class InMemoryPoolDataProvider:
    """Serves windows out of a complete in-memory pool.

    Mimics a paginated loader: the initial state only exposes a window
    around the current tick, and every widen request is recorded in `calls`
    for assertions.
    """

    def __init__(
        self,
        pool: PoolSnapshot,
        config: SimulatorConfig = DEFAULT_CONFIG,
        initial_pattern: LoadingPattern = LoadingPattern.MID,
    ):
        """Initialize the provider.

        Args:
            pool: Fully loaded pool (e.g. from PoolBuilder)
            config: Window sizes
            initial_pattern: Window shape for current_state()
        """
        self.pool = pool
        self.config = config
        self.initial_pattern = initial_pattern
        self.calls: list[tuple[str, int, LoadingPattern]] = []  # (method, anchor, direction)

    def current_state(self) -> PoolSnapshot:
        pool = self.pool
        self.calls.append(("current_state", pool.tick, self.initial_pattern))

        ticks = tick_window(
            pool.tick, self.config.tick_window_radius, pool.tick_spacing, self.initial_pattern
        )
        words = word_window(
            (pool.tick // pool.tick_spacing) >> 8,
            self.config.word_window_radius,
            self.initial_pattern,
        )
        base = PoolSnapshot(
            sqrt_price_x96=pool.sqrt_price_x96,
            tick=pool.tick,
            liquidity=pool.liquidity,
            fee=pool.fee,
            tick_spacing=pool.tick_spacing,
            unlocked=pool.unlocked,
            tick_windows=(),
            word_windows=(),
            max_liquidity_per_tick=pool.max_liquidity_per_tick,
        )
        return base.with_ticks(self._ticks_in(ticks), ticks).with_words(
            self._words_in(words), words
        )

    def widen_tick_window(
        self, snapshot: PoolSnapshot, around_tick: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        self.calls.append(("widen_tick_window", around_tick, direction))
        window = tick_window(
            around_tick, self.config.tick_window_span, snapshot.tick_spacing, direction
        )
        logger.debug(
            "tick_window_widened",
            around_tick=around_tick,
            direction=direction.value,
            window=window,
        )
        return snapshot.with_ticks(self._ticks_in(window), window)

    def widen_bitmap_window(
        self, snapshot: PoolSnapshot, around_word: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        self.calls.append(("widen_bitmap_window", around_word, direction))
        window = word_window(around_word, self.config.word_window_radius, direction)
        logger.debug(
            "bitmap_window_widened",
            around_word=around_word,
            direction=direction.value,
            window=window,
        )
        return snapshot.with_words(self._words_in(window), window)

    def _ticks_in(self, window: Window) -> dict:
        lo, hi = window
        return {t: info for t, info in self.pool.ticks.items() if lo <= t <= hi}

    def _words_in(self, window: Window) -> dict:
        lo, hi = window
        return {w: word for w, word in self.pool.tick_bitmap.items() if lo <= w <= hi}

    @property
    def widen_requests(self) -> int:
        """Number of widen requests served so far."""
        return sum(1 for method, _, _ in self.calls if method != "current_state")


class StaticPoolDataProvider:
    """Provider over a single snapshot that cannot be widened.

    Widen requests return the snapshot unchanged, so a walk past its windows
    fails with the original DataUnavailable error after the retry.
    """

    def __init__(self, snapshot: PoolSnapshot):
        self.snapshot = snapshot

    def current_state(self) -> PoolSnapshot:
        return self.snapshot

    def widen_tick_window(
        self, snapshot: PoolSnapshot, around_tick: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        return snapshot

    def widen_bitmap_window(
        self, snapshot: PoolSnapshot, around_word: int, direction: LoadingPattern
    ) -> PoolSnapshot:
        return snapshot


__all__ = [
    "LoadingPattern",
    "PoolDataProvider",
    "InMemoryPoolDataProvider",
    "StaticPoolDataProvider",
    "tick_window",
    "word_window",
]
