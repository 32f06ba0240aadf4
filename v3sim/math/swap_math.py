"""Single bounded swap step within one liquidity range."""

from __future__ import annotations

from dataclasses import dataclass

from v3sim.constants import FEE_DENOMINATOR
from v3sim.errors import ValidationError
from v3sim.safe_int import S

from . import sqrt_price_math
from .full_math import mul_div, mul_div_rounding_up

__all__ = ["SwapStepResult", "compute_swap_step"]


@dataclass(frozen=True)
class SwapStepResult:
    """Outcome of one swap step.

    Attributes:
        sqrt_price_next_x96: Price after the step, never beyond the target
        amount_in: Input swapped in (excluding fee)
        amount_out: Output swapped out
        fee_amount: Input taken as fee
    """

    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int

    def __iter__(self):
        return iter((self.sqrt_price_next_x96, self.amount_in, self.amount_out, self.fee_amount))


def compute_swap_step(
    sqrt_ratio_current_x96: int,
    sqrt_ratio_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> SwapStepResult:
    """Compute the result of swapping some amount in, or out, within one range.

    The direction is inferred from the prices (current >= target means
    zero-for-one) and the mode from the sign of amount_remaining (>= 0 means
    exact input). On exact input the fee plus amount_in never exceeds
    amount_remaining.

    Args:
        sqrt_ratio_current_x96: Current pool sqrt price
        sqrt_ratio_target_x96: Price that cannot be exceeded
        liquidity: Usable liquidity
        amount_remaining: Input (>= 0) or output (< 0) still to be swapped
        fee_pips: Fee taken from the input, in hundredths of a bip

    Returns:
        SwapStepResult with the next price and the step's amounts

    Raises:
        ValidationError: If fee_pips is outside [0, 1e6)
        MathError: Propagated from the price/amount helpers
    """
    if not 0 <= fee_pips < FEE_DENOMINATOR:
        raise ValidationError(f"Fee {fee_pips} outside [0, {FEE_DENOMINATOR})")

    zero_for_one = sqrt_ratio_current_x96 >= sqrt_ratio_target_x96
    exact_in = amount_remaining >= 0

    amount_in = 0
    amount_out = 0

    if exact_in:
        amount_remaining_less_fee = mul_div(
            amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR
        )
        if zero_for_one:
            amount_in = sqrt_price_math.get_amount0_delta(
                sqrt_ratio_target_x96, sqrt_ratio_current_x96, liquidity, True
            )
        else:
            amount_in = sqrt_price_math.get_amount1_delta(
                sqrt_ratio_current_x96, sqrt_ratio_target_x96, liquidity, True
            )
        if amount_remaining_less_fee >= amount_in:
            sqrt_ratio_next_x96 = sqrt_ratio_target_x96
        elif amount_remaining_less_fee == 0:
            # Dust input is consumed entirely by the fee; the price does not move
            sqrt_ratio_next_x96 = sqrt_ratio_current_x96
        else:
            sqrt_ratio_next_x96 = sqrt_price_math.get_next_sqrt_price_from_input(
                sqrt_ratio_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = sqrt_price_math.get_amount1_delta(
                sqrt_ratio_target_x96, sqrt_ratio_current_x96, liquidity, False
            )
        else:
            amount_out = sqrt_price_math.get_amount0_delta(
                sqrt_ratio_current_x96, sqrt_ratio_target_x96, liquidity, False
            )
        if -amount_remaining >= amount_out:
            sqrt_ratio_next_x96 = sqrt_ratio_target_x96
        else:
            sqrt_ratio_next_x96 = sqrt_price_math.get_next_sqrt_price_from_output(
                sqrt_ratio_current_x96, liquidity, -amount_remaining, zero_for_one
            )

    reached_target = sqrt_ratio_target_x96 == sqrt_ratio_next_x96

    # Recompute amounts precisely for the actual price range, skipping the
    # leg already computed against the target
    if zero_for_one:
        if not (reached_target and exact_in):
            amount_in = sqrt_price_math.get_amount0_delta(
                sqrt_ratio_next_x96, sqrt_ratio_current_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = sqrt_price_math.get_amount1_delta(
                sqrt_ratio_next_x96, sqrt_ratio_current_x96, liquidity, False
            )
    else:
        if not (reached_target and exact_in):
            amount_in = sqrt_price_math.get_amount1_delta(
                sqrt_ratio_current_x96, sqrt_ratio_next_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = sqrt_price_math.get_amount0_delta(
                sqrt_ratio_current_x96, sqrt_ratio_next_x96, liquidity, False
            )

    # Cap the output amount to not exceed the remaining output amount
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # Didn't reach the target, so the remainder of the input is the fee
        fee_amount = (S(amount_remaining) - amount_in).to_uint256()
    else:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return SwapStepResult(
        sqrt_price_next_x96=sqrt_ratio_next_x96,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
    )
