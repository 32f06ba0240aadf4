"""Price movement and token deltas within a single liquidity range.

Within one range the curve is linear in sqrt price:
    amount1 = L * (sqrtB - sqrtA)
    amount0 = L * (sqrtB - sqrtA) / (sqrtA * sqrtB)

Every function picks its rounding direction so that the pool never gives
away value: prices move less than the lossless result on exact input and
at least as far on exact output, input amounts round up, output amounts
round down.
"""

from __future__ import annotations

from v3sim.constants import Q96, RESOLUTION_96, UINT160_MAX, UINT256_MAX
from v3sim.errors import AmountIsZero, PriceOutOfBounds, PriceUnderflow, ValidationError
from v3sim.safe_int import to_int256, unsigned_add

from .full_math import div_rounding_up, mul_div, mul_div_rounding_up

__all__ = [
    "get_next_sqrt_price_from_amount0_rounding_up",
    "get_next_sqrt_price_from_amount1_rounding_down",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
]


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    """Next sqrt price after adding or removing `amount` of token0.

    Always rounds up: on exact output (price rising) the price must move at
    least far enough for the requested output, on exact input (price falling)
    it must move less so that not too much output is sent.

    The precise formula is L * sqrtP / (L +- amount * sqrtP); when the
    product overflows it falls back to L / (L / sqrtP +- amount).

    Raises:
        AmountIsZero: If amount is zero
        PriceOutOfBounds: If the result does not fit in uint160, or the
            removal would exhaust the virtual token0 reserve
        Overflow: Propagated from the full-precision helpers
    """
    # Short-circuit: the formula is not guaranteed to return the input price
    if amount == 0:
        raise AmountIsZero("Token0 amount is zero, price does not move")

    numerator1 = liquidity << RESOLUTION_96
    product = amount * sqrt_price_x96
    product_fits = product <= UINT256_MAX

    if add:
        # Denominator must not wrap past 2**256
        if product_fits and numerator1 + product <= UINT256_MAX:
            return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 + product)
        return div_rounding_up(numerator1, unsigned_add(numerator1 // sqrt_price_x96, amount))

    if not product_fits or numerator1 <= product:
        raise PriceOutOfBounds(
            f"Removing {amount} token0 exhausts liquidity {liquidity} at price {sqrt_price_x96}"
        )
    result = mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)
    if result > UINT160_MAX:
        raise PriceOutOfBounds(f"Sqrt price {result} exceeds uint160")
    return result


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    """Next sqrt price after adding or removing `amount` of token1.

    Always rounds down, computing sqrtP +- amount * 2**96 / L within one
    wei of the lossless value.

    Raises:
        PriceOutOfBounds: If the result does not fit in uint160
        PriceUnderflow: If removing token1 would take the price to zero
    """
    if add:
        if amount <= UINT160_MAX:
            quotient = (amount << RESOLUTION_96) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        result = unsigned_add(sqrt_price_x96, quotient)
        if result > UINT160_MAX:
            raise PriceOutOfBounds(f"Sqrt price {result} exceeds uint160")
        return result

    if amount <= UINT160_MAX:
        quotient = div_rounding_up(amount << RESOLUTION_96, liquidity)
    else:
        quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise PriceUnderflow(
            f"Removing {amount} token1 takes price {sqrt_price_x96} below zero"
        )
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int, liquidity: int, amount_in: int, zero_for_one: bool
) -> int:
    """Next sqrt price after swapping `amount_in` of token0 or token1 in.

    Args:
        sqrt_price_x96: Starting price
        liquidity: Usable liquidity
        amount_in: Amount of token0 (zero_for_one) or token1 being swapped in
        zero_for_one: Whether the input is token0

    Raises:
        ValidationError: If price or liquidity is zero
    """
    _require_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int, liquidity: int, amount_out: int, zero_for_one: bool
) -> int:
    """Next sqrt price after swapping `amount_out` of token1 or token0 out.

    Args:
        sqrt_price_x96: Starting price
        liquidity: Usable liquidity
        amount_out: Amount of token1 (zero_for_one) or token0 being swapped out
        zero_for_one: Whether the output is token1

    Raises:
        ValidationError: If price or liquidity is zero
    """
    _require_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)


def _require_price_and_liquidity(sqrt_price_x96: int, liquidity: int) -> None:
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValidationError(
            f"Price and liquidity must be positive (price={sqrt_price_x96}, liquidity={liquidity})"
        )


def get_amount0_delta(
    sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """Amount of token0 between two prices: L * (sqrtB - sqrtA) / (sqrtA * sqrtB).

    The prices may be passed in either order.

    Raises:
        PriceOutOfBounds: If the lower price is zero
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_a_x96 == 0:
        raise PriceOutOfBounds("Lower sqrt price must be positive")

    numerator1 = liquidity << RESOLUTION_96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96), sqrt_ratio_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int, round_up: bool
) -> int:
    """Amount of token1 between two prices: L * (sqrtB - sqrtA).

    The prices may be passed in either order.
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amount0_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token0 delta for a liquidity change.

    Positive liquidity (added to the pool) rounds up; negative liquidity
    (removed) rounds down and yields a negative amount.
    """
    if liquidity < 0:
        return -to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False))
    return to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))


def get_amount1_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token1 delta for a liquidity change; see get_amount0_delta_signed."""
    if liquidity < 0:
        return -to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False))
    return to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))
