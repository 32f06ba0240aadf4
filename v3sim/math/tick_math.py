"""Conversion between ticks and Q64.96 sqrt prices.

A tick t corresponds to the price 1.0001**t, stored as the Q64.96 fixed-point
number sqrt(1.0001**t) * 2**96. Both directions are computed exactly as the
on-chain TickMath library does:

- get_sqrt_ratio_at_tick multiplies together precomputed Q128 factors
  sqrt(1.0001**-(2**k)) for each set bit k of |tick|, inverts the ratio for
  positive ticks and rounds the Q128 result up into Q96
- get_tick_at_sqrt_ratio takes a binary logarithm (integer part from the
  most significant bit, 14 fractional bits by successive squaring), converts
  it to base sqrt(1.0001) and picks between the two candidate ticks whose
  error bounds straddle the true value
"""

from __future__ import annotations

from v3sim.constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, UINT256_MAX
from v3sim.errors import PriceOutOfBounds, TickOutOfBounds

__all__ = [
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
]

# sqrt(1.0001**-(2**k)) in Q128 for k = 0..19, indexed by bit position of |tick|
_TICK_RATIO_FACTORS: tuple[int, ...] = (
    0xFFFCB933BD6FAD37AA2D162D1A594001,
    0xFFF97272373D413259A46990580E213A,
    0xFFF2E50F5F656932EF12357CF3C7FDCC,
    0xFFE5CACA7E10E4E61C3624EAA0941CD0,
    0xFFCB9843D60F6159C9DB58835C926644,
    0xFF973B41FA98C081472E6896DFB254C0,
    0xFF2EA16466C96A3843EC78B326B52861,
    0xFE5DEE046A99A2A811C461F1969C3053,
    0xFCBE86C7900A88AEDCFFC83B479AA3A4,
    0xF987A7253AC413176F2B074CF7815E54,
    0xF3392B0822B70005940C7A398E4B70F3,
    0xE7159475A2C29B7443B29C7FA6E889D9,
    0xD097F3BDFD2022B8845AD8F792AA5825,
    0xA9F746462D870FDF8A65DC1F90E061E5,
    0x70D869A156D2A1B890BB3DF62BAF32F7,
    0x31BE135F97D08FD981231505542FCFA6,
    0x9AA508B5B7A84E1C677DE54F3E99BC9,
    0x5D6AF8DEDB81196699C329225EE604,
    0x2216E584F5FA1EA926041BEDFE98,
    0x48A170391F7DC42444E8FA2,
)

_Q128_ONE = 0x100000000000000000000000000000000

# log_sqrt(1.0001)(2) as a Q128 multiplier of a Q64 log2
_LOG_SQRT10001_MULTIPLIER = 255738958999603826347141
# Error bounds of the 14-bit log2 approximation, in Q128 ticks
_TICK_LOW_ERROR = 3402992956809132418596140100660247210
_TICK_HIGH_ERROR = 291339464771989622907027621153398088495


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Calculate sqrt(1.0001**tick) * 2**96.

    Args:
        tick: The input tick

    Returns:
        A Q64.96 number representing sqrt(token1/token0) at the given tick

    Raises:
        TickOutOfBounds: If |tick| > MAX_TICK
    """
    abs_tick = -tick if tick < 0 else tick
    if abs_tick > MAX_TICK:
        raise TickOutOfBounds(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    ratio = _TICK_RATIO_FACTORS[0] if abs_tick & 1 else _Q128_ONE
    for bit, factor in enumerate(_TICK_RATIO_FACTORS[1:], start=1):
        if abs_tick & (1 << bit):
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q128.96, rounding up so that get_tick_at_sqrt_ratio of the
    # result is consistent
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Calculate the greatest tick whose sqrt ratio is <= sqrt_price_x96.

    Args:
        sqrt_price_x96: Q64.96 sqrt price in [MIN_SQRT_RATIO, MAX_SQRT_RATIO)

    Returns:
        The greatest tick t such that get_sqrt_ratio_at_tick(t) <= sqrt_price_x96

    Raises:
        PriceOutOfBounds: If sqrt_price_x96 is outside the supported range
    """
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        raise PriceOutOfBounds(
            f"Sqrt price {sqrt_price_x96} outside [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO})"
        )

    ratio = sqrt_price_x96 << 32

    # Most significant bit by successive halving, as in the reference
    r = ratio
    msb = 0
    for shift, threshold in (
        (7, 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF),
        (6, 0xFFFFFFFFFFFFFFFF),
        (5, 0xFFFFFFFF),
        (4, 0xFFFF),
        (3, 0xFF),
        (2, 0xF),
        (1, 0x3),
    ):
        f = (1 << shift) if r > threshold else 0
        msb |= f
        r >>= f
    msb |= 1 if r > 0x1 else 0

    # Normalise ratio to a Q1.127 mantissa in [1, 2)
    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 14 fractional bits by successive squaring: bits 63 down to 50
    for bit in range(63, 49, -1):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << bit
        r >>= f

    log_sqrt10001 = log_2 * _LOG_SQRT10001_MULTIPLIER

    tick_low = (log_sqrt10001 - _TICK_LOW_ERROR) >> 128
    tick_high = (log_sqrt10001 + _TICK_HIGH_ERROR) >> 128

    if tick_low == tick_high:
        return tick_low
    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low
