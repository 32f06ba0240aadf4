"""Immutable pool-state snapshots with loaded data windows."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from v3sim.constants import (
    FEE_DENOMINATOR,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MAX_WORD_POS,
    MIN_SQRT_RATIO,
    MIN_TICK,
    MIN_WORD_POS,
)
from v3sim.errors import TickNotLoaded, ValidationError, WordNotLoaded

Window = tuple[int, int]

FULL_TICK_WINDOW: Window = (MIN_TICK, MAX_TICK)
FULL_WORD_WINDOW: Window = (MIN_WORD_POS, MAX_WORD_POS)


@dataclass(frozen=True)
class TickInfo:
    """Liquidity bookkeeping for one tick.

    Attributes:
        liquidity_gross: Total liquidity of positions referencing this tick
        liquidity_net: Liquidity added when the price crosses the tick
            left to right (subtracted right to left)
        initialized: True iff liquidity_gross > 0
    """

    liquidity_gross: int = 0
    liquidity_net: int = 0
    initialized: bool = False


EMPTY_TICK = TickInfo()


def merge_windows(windows: Iterable[Window]) -> tuple[Window, ...]:
    """Sort and coalesce inclusive [lo, hi] windows that overlap or touch."""
    merged: list[Window] = []
    for lo, hi in sorted(windows):
        if lo > hi:
            continue
        if merged and lo <= merged[-1][1] + 1:
            prev_lo, prev_hi = merged[-1]
            merged[-1] = (prev_lo, max(prev_hi, hi))
        else:
            merged.append((lo, hi))
    return tuple(merged)


def _in_windows(value: int, windows: tuple[Window, ...]) -> bool:
    return any(lo <= value <= hi for lo, hi in windows)


@dataclass(frozen=True)
class PoolSnapshot:
    """Read-only view of a pool's state and the tick data loaded so far.

    A snapshot tracks which ticks and bitmap words have been loaded. Inside
    a loaded window, a tick missing from `ticks` is uninitialized and a word
    missing from `tick_bitmap` is zero; outside it, reads raise
    DataUnavailable so the engine can ask its provider for more data.

    Widening never mutates a snapshot: with_ticks/with_words return a new one,
    so concurrent simulations can share a base snapshot safely.

    Attributes:
        sqrt_price_x96: Current Q64.96 sqrt price
        tick: Current tick
        liquidity: Active liquidity
        fee: Swap fee in hundredths of a bip
        tick_spacing: Distance between usable ticks
        unlocked: False if the pool's reentrancy lock is held
        ticks: Initialized tick info within the loaded windows
        tick_bitmap: Non-zero bitmap words within the loaded windows
        tick_windows: Inclusive tick ranges that have been loaded
        word_windows: Inclusive word-position ranges that have been loaded
        max_liquidity_per_tick: Gross liquidity cap per tick (derived from
            tick_spacing when not given)
    """

    sqrt_price_x96: int
    tick: int
    liquidity: int
    fee: int
    tick_spacing: int
    unlocked: bool = True
    ticks: Mapping[int, TickInfo] = field(default_factory=dict)
    tick_bitmap: Mapping[int, int] = field(default_factory=dict)
    tick_windows: tuple[Window, ...] = (FULL_TICK_WINDOW,)
    word_windows: tuple[Window, ...] = (FULL_WORD_WINDOW,)
    max_liquidity_per_tick: int | None = None

    def __post_init__(self) -> None:
        if self.tick_spacing <= 0:
            raise ValidationError(f"Tick spacing must be positive: {self.tick_spacing}")
        if not 0 <= self.fee < FEE_DENOMINATOR:
            raise ValidationError(f"Fee {self.fee} outside [0, {FEE_DENOMINATOR})")
        if not MIN_SQRT_RATIO <= self.sqrt_price_x96 <= MAX_SQRT_RATIO:
            raise ValidationError(f"Sqrt price {self.sqrt_price_x96} outside valid range")
        if self.liquidity < 0:
            raise ValidationError(f"Liquidity cannot be negative: {self.liquidity}")

        # Frozen dataclass: normalise fields through object.__setattr__
        object.__setattr__(self, "ticks", MappingProxyType(dict(self.ticks)))
        object.__setattr__(self, "tick_bitmap", MappingProxyType(dict(self.tick_bitmap)))
        object.__setattr__(self, "tick_windows", merge_windows(self.tick_windows))
        object.__setattr__(self, "word_windows", merge_windows(self.word_windows))
        if self.max_liquidity_per_tick is None:
            from .tick import tick_spacing_to_max_liquidity_per_tick

            object.__setattr__(
                self,
                "max_liquidity_per_tick",
                tick_spacing_to_max_liquidity_per_tick(self.tick_spacing),
            )

    def is_tick_loaded(self, tick: int) -> bool:
        return _in_windows(tick, self.tick_windows)

    def is_word_loaded(self, word_pos: int) -> bool:
        return _in_windows(word_pos, self.word_windows)

    def tick_info(self, tick: int) -> TickInfo:
        """Get tick info, treating loaded-but-absent ticks as uninitialized.

        Raises:
            TickNotLoaded: If the tick is outside every loaded window
        """
        if not self.is_tick_loaded(tick):
            raise TickNotLoaded(tick)
        return self.ticks.get(tick, EMPTY_TICK)

    def bitmap_word(self, word_pos: int) -> int:
        """Get a bitmap word, treating loaded-but-absent words as zero.

        Raises:
            WordNotLoaded: If the word is outside every loaded window
        """
        if not self.is_word_loaded(word_pos):
            raise WordNotLoaded(word_pos)
        return self.tick_bitmap.get(word_pos, 0)

    def with_ticks(self, ticks: Mapping[int, TickInfo], window: Window) -> PoolSnapshot:
        """Return a new snapshot with `ticks` loaded and `window` marked loaded."""
        merged = dict(self.ticks)
        merged.update(ticks)
        return replace(self, ticks=merged, tick_windows=(*self.tick_windows, window))

    def with_words(self, words: Mapping[int, int], window: Window) -> PoolSnapshot:
        """Return a new snapshot with bitmap `words` loaded and `window` marked loaded."""
        merged = dict(self.tick_bitmap)
        merged.update(words)
        return replace(self, tick_bitmap=merged, word_windows=(*self.word_windows, window))


__all__ = [
    "TickInfo",
    "EMPTY_TICK",
    "PoolSnapshot",
    "Window",
    "FULL_TICK_WINDOW",
    "FULL_WORD_WINDOW",
    "merge_windows",
]
