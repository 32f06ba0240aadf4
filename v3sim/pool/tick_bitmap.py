"""Packed bitmap of initialized ticks.

Ticks are compressed by the tick spacing and stored one bit per tick in
256-bit words keyed by word position. The swap loop uses the bitmap to jump
to the next initialized tick instead of visiting every tick.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from v3sim.constants import UINT256_MAX
from v3sim.errors import ValidationError
from v3sim.math.bit_math import least_significant_bit, most_significant_bit

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from .state import PoolSnapshot

__all__ = ["position", "flip_tick", "next_initialized_tick_within_one_word"]


def position(tick: int) -> tuple[int, int]:
    """Word and bit position of a compressed tick.

    Python's >> and % floor toward negative infinity, which matches the
    arithmetic shift and uint8 truncation of the reference.

    Returns:
        (word_pos, bit_pos) with bit_pos in [0, 255]
    """
    return tick >> 8, tick % 256


def flip_tick(bitmap: MutableMapping[int, int], tick: int, tick_spacing: int) -> None:
    """Toggle the initialized bit of a tick in place.

    Raises:
        ValidationError: If tick is not a multiple of tick_spacing
    """
    if tick % tick_spacing != 0:
        raise ValidationError(f"Tick {tick} is not a multiple of tick spacing {tick_spacing}")
    word_pos, bit_pos = position(tick // tick_spacing)
    word = bitmap.get(word_pos, 0) ^ (1 << bit_pos)
    if word:
        bitmap[word_pos] = word
    else:
        bitmap.pop(word_pos, None)


def next_initialized_tick_within_one_word(
    snapshot: PoolSnapshot, tick: int, lte: bool
) -> tuple[int, bool]:
    """Find the next initialized tick in the same word as `tick`.

    Searching left (lte) includes the tick itself; searching right starts at
    the next compressed tick. If no initialized tick exists in the word the
    word boundary is returned, so the result is at most 256 compressed ticks
    away and may lie outside [MIN_TICK, MAX_TICK].

    Args:
        snapshot: Pool snapshot supplying the bitmap and tick spacing
        tick: Starting tick (need not be a multiple of the spacing)
        lte: Search at or below `tick` if True, strictly above otherwise

    Returns:
        (next_tick, initialized)

    Raises:
        WordNotLoaded: If the word to scan is outside the loaded window
    """
    tick_spacing = snapshot.tick_spacing
    # Floor division rounds toward negative infinity
    compressed = tick // tick_spacing

    if lte:
        word_pos, bit_pos = position(compressed)
        # All bits at or to the right of bit_pos
        mask = (1 << bit_pos) - 1 + (1 << bit_pos)
        masked = snapshot.bitmap_word(word_pos) & mask

        initialized = masked != 0
        if initialized:
            return (compressed - (bit_pos - most_significant_bit(masked))) * tick_spacing, True
        return (compressed - bit_pos) * tick_spacing, False

    word_pos, bit_pos = position(compressed + 1)
    # All bits at or to the left of bit_pos
    mask = ~((1 << bit_pos) - 1) & UINT256_MAX
    masked = snapshot.bitmap_word(word_pos) & mask

    initialized = masked != 0
    if initialized:
        return (compressed + 1 + (least_significant_bit(masked) - bit_pos)) * tick_spacing, True
    return (compressed + 1 + (255 - bit_pos)) * tick_spacing, False
