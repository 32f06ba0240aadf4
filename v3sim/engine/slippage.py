"""Execution-price slippage search.

The execution price of a swap is its average price, amount1 / amount0 over
the cumulative (fee-inclusive) amounts, expressed like the spot price as a
Q64.96 sqrt price:

    execution_sqrt_price = sqrt(amount1) * 2**96 / sqrt(amount0)

Because it averages over the whole path it lags the spot price, so the
spot-limit search of impact.py cannot be reused directly. The search runs
in two nested walks:

1. Outer walk, one bitmap step at a time. It replays the swap loop with an
   unbounded input and, before committing each step, checks whether
   completing the step would carry the execution price past the target.
2. Inner walk, one tick at a time, inside the offending step. Liquidity is
   constant there, so the amounts from the step's start price to each tick
   boundary follow from get_amount0_delta/get_amount1_delta directly. The
   walk stops at the first boundary whose cumulative execution price
   reaches the target. It is bounded by the step's end price, which
   already reaches the target, so it terminates.

The boundary found becomes the price limit of an ordinary swap, so the
reported amounts are exactly those of an on-chain swap to that boundary.
If the target is never reached the swap runs to the price bound.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from v3sim.constants import FEE_DENOMINATOR, MAX_TICK, MIN_TICK, Q96
from v3sim.errors import PoolLocked, SimulationError
from v3sim.math.full_math import mul_div, mul_div_rounding_up, sqrt
from v3sim.math.sqrt_price_math import get_amount0_delta, get_amount1_delta
from v3sim.math.swap_math import compute_swap_step
from v3sim.math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from v3sim.safe_int import unsigned_add

from .impact import sqrt_price_target_from_impact
from .swap import MAX_AMOUNT_SPECIFIED, SwapResult, default_price_limit

if TYPE_CHECKING:
    from .swap import SwapEngine

logger = structlog.get_logger()


@dataclass(frozen=True)
class SlippageResult(SwapResult):
    """SwapResult of a slippage search.

    Attributes:
        execution_sqrt_price_x96: Execution sqrt price of the swap
        target_execution_sqrt_price_x96: Execution sqrt price that was searched for
    """

    execution_sqrt_price_x96: int
    target_execution_sqrt_price_x96: int


def execution_sqrt_price_x96(amount0: int, amount1: int, sqrt_max_iterations: int = 1000) -> int:
    """Execution sqrt price of a trade moving amount0 of token0 against amount1 of token1.

    Signs are ignored. Returns 0 when either amount is zero.
    """
    amount0 = abs(amount0)
    amount1 = abs(amount1)
    if amount0 == 0 or amount1 == 0:
        return 0
    root0 = sqrt(amount0, sqrt_max_iterations)
    root1 = sqrt(amount1, sqrt_max_iterations)
    return mul_div(root1, Q96, root0)


@dataclass
class _Progress:
    """Cumulative amounts of the outer walk."""

    amount_in: int = 0  # including fee
    amount_out: int = 0


def swap_for_execution_price_slippage(
    engine: SwapEngine, zero_for_one: bool, pct_impact: int | str | Decimal
) -> SlippageResult:
    """Largest swap whose execution price stays within `pct_impact` percent.

    The swap ends at the first tick boundary where the execution price
    reaches the target, so its execution price is at, or marginally past,
    the target.

    Raises:
        InvalidPriceImpact: If pct_impact is invalid (see impact.py)
        PoolLocked: If the pool's reentrancy lock is held
        SimulationError: Any failure of the walks or the final swap
    """
    snapshot = engine.snapshot
    target = sqrt_price_target_from_impact(snapshot.sqrt_price_x96, pct_impact, zero_for_one)

    sqrt_price_limit_x96 = _find_limit(engine, zero_for_one, target)

    result = engine.swap(zero_for_one, MAX_AMOUNT_SPECIFIED, sqrt_price_limit_x96)
    execution = execution_sqrt_price_x96(
        result.amount0, result.amount1, engine.config.sqrt_max_iterations
    )
    logger.debug(
        "slippage_swap_completed",
        zero_for_one=zero_for_one,
        pct_impact=str(pct_impact),
        target_execution_sqrt_price_x96=target,
        execution_sqrt_price_x96=execution,
        sqrt_price_limit_x96=sqrt_price_limit_x96,
    )
    return SlippageResult(
        zero_for_one=result.zero_for_one,
        amount0=result.amount0,
        amount1=result.amount1,
        sqrt_price_x96=result.sqrt_price_x96,
        tick=result.tick,
        liquidity=result.liquidity,
        fee_amount=result.fee_amount,
        ticks_crossed=result.ticks_crossed,
        steps=result.steps,
        widen_requests=result.widen_requests,
        execution_sqrt_price_x96=execution,
        target_execution_sqrt_price_x96=target,
    )


def _find_limit(engine: SwapEngine, zero_for_one: bool, target: int) -> int:
    """Outer walk: sqrt price at which the swap should stop."""
    snapshot = engine.snapshot
    if not snapshot.unlocked:
        raise PoolLocked("Pool is locked")

    bound = default_price_limit(zero_for_one)
    fee = snapshot.fee
    sqrt_price_x96 = snapshot.sqrt_price_x96
    tick = snapshot.tick
    liquidity = snapshot.liquidity
    progress = _Progress()
    steps = 0

    while sqrt_price_x96 != bound:
        try:
            tick_next, initialized = engine.next_initialized_tick(tick, zero_for_one)
            sqrt_price_next_x96 = get_sqrt_ratio_at_tick(tick_next)
            if zero_for_one:
                step_target = max(sqrt_price_next_x96, bound)
            else:
                step_target = min(sqrt_price_next_x96, bound)

            step = compute_swap_step(
                sqrt_price_x96, step_target, liquidity, MAX_AMOUNT_SPECIFIED, fee
            )
            amount_in = unsigned_add(
                progress.amount_in, unsigned_add(step.amount_in, step.fee_amount)
            )
            amount_out = unsigned_add(progress.amount_out, step.amount_out)

            if _reached(zero_for_one, amount_in, amount_out, target, engine):
                limit = _walk_ticks(
                    engine, zero_for_one, target, progress, sqrt_price_x96, tick, liquidity,
                    step_target,
                )
                logger.debug(
                    "slippage_target_found",
                    steps=steps,
                    tick=tick,
                    sqrt_price_limit_x96=limit,
                )
                return limit

            progress.amount_in = amount_in
            progress.amount_out = amount_out
            sqrt_price_x96 = step.sqrt_price_next_x96
            if sqrt_price_x96 == sqrt_price_next_x96:
                if initialized:
                    liquidity = engine.cross_tick(tick_next, zero_for_one, liquidity)
                tick = tick_next - 1 if zero_for_one else tick_next
            else:
                tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        except SimulationError as err:
            err.with_context(steps, tick)
            raise
        steps += 1

    return bound


def _walk_ticks(
    engine: SwapEngine,
    zero_for_one: bool,
    target: int,
    progress: _Progress,
    sqrt_price_start_x96: int,
    tick: int,
    liquidity: int,
    step_target: int,
) -> int:
    """Inner walk: first tick boundary within one step reaching the target.

    Liquidity is constant between sqrt_price_start_x96 and step_target, so
    each boundary's amounts are computed in one go from the step's start
    price, with the same rounding as compute_swap_step.
    """
    fee = engine.snapshot.fee

    if zero_for_one:
        # Greatest tick strictly below the start price
        boundary = tick if get_sqrt_ratio_at_tick(tick) < sqrt_price_start_x96 else tick - 1
    else:
        boundary = tick + 1

    while MIN_TICK <= boundary <= MAX_TICK:
        sqrt_price_x96 = get_sqrt_ratio_at_tick(boundary)
        if zero_for_one:
            sqrt_price_x96 = max(sqrt_price_x96, step_target)
            amount_in = get_amount0_delta(sqrt_price_x96, sqrt_price_start_x96, liquidity, True)
            amount_out = get_amount1_delta(sqrt_price_x96, sqrt_price_start_x96, liquidity, False)
        else:
            sqrt_price_x96 = min(sqrt_price_x96, step_target)
            amount_in = get_amount1_delta(sqrt_price_start_x96, sqrt_price_x96, liquidity, True)
            amount_out = get_amount0_delta(sqrt_price_start_x96, sqrt_price_x96, liquidity, False)
        fee_amount = mul_div_rounding_up(amount_in, fee, FEE_DENOMINATOR - fee)

        total_in = progress.amount_in + amount_in + fee_amount
        total_out = progress.amount_out + amount_out
        if sqrt_price_x96 == step_target or _reached(
            zero_for_one, total_in, total_out, target, engine
        ):
            return sqrt_price_x96
        boundary += -1 if zero_for_one else 1

    return step_target


def _reached(
    zero_for_one: bool, amount_in: int, amount_out: int, target: int, engine: SwapEngine
) -> bool:
    """Whether cumulative amounts have an execution price at or past the target."""
    if amount_in == 0 or amount_out == 0:
        return False
    iterations = engine.config.sqrt_max_iterations
    if zero_for_one:
        return execution_sqrt_price_x96(amount_in, amount_out, iterations) <= target
    return execution_sqrt_price_x96(amount_out, amount_in, iterations) >= target


__all__ = ["SlippageResult", "execution_sqrt_price_x96", "swap_for_execution_price_slippage"]
