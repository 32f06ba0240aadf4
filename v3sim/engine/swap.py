"""Swap engine: the tick-crossing step loop.

The loop mirrors the on-chain swap function. Each iteration finds the next
initialized tick in the swap direction, computes one bounded step towards it
(or towards the price limit, if closer), accumulates the amounts and, when
the step lands on an initialized tick, crosses it by applying its net
liquidity. The loop ends when the specified amount is exhausted or the price
reaches the limit.

Pool data is read through a PoolDataProvider. When a read falls outside the
loaded window the engine asks the provider to widen it and retries the read
once (see SimulatorConfig.max_widen_attempts); a second miss is fatal.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from v3sim.config import DEFAULT_CONFIG, SimulatorConfig
from v3sim.constants import INT256_MAX, MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK
from v3sim.errors import (
    AmountIsZero,
    DataUnavailable,
    InvalidPriceLimit,
    PoolLocked,
    SimulationError,
    TickNotLoaded,
    WordNotLoaded,
)
from v3sim.math.liquidity_math import add_delta
from v3sim.math.swap_math import compute_swap_step
from v3sim.math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from v3sim.pool.provider import LoadingPattern, PoolDataProvider
from v3sim.pool.state import PoolSnapshot
from v3sim.pool.tick_bitmap import next_initialized_tick_within_one_word
from v3sim.safe_int import signed_add, signed_sub, to_int256, unsigned_add

if TYPE_CHECKING:
    from decimal import Decimal

    from .slippage import SlippageResult

logger = structlog.get_logger()

T = TypeVar("T")

# "Swap until the limit is hit"
MAX_AMOUNT_SPECIFIED = INT256_MAX


@dataclass
class SwapState:
    """Mutable state of one swap call."""

    amount_specified_remaining: int
    amount_calculated: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    fee_amount: int = 0


@dataclass
class StepComputation:
    """Per-iteration values of the swap loop."""

    sqrt_price_start_x96: int
    tick_next: int = 0
    initialized: bool = False
    sqrt_price_next_x96: int = 0
    amount_in: int = 0
    amount_out: int = 0
    fee_amount: int = 0


@dataclass(frozen=True)
class SwapResult:
    """Result of a simulated swap.

    Amounts are pool deltas: positive amounts are paid into the pool,
    negative amounts are paid out.

    Attributes:
        zero_for_one: Swap direction (token0 in, token1 out)
        amount0: Token0 delta of the pool
        amount1: Token1 delta of the pool
        sqrt_price_x96: Pool price after the swap
        tick: Pool tick after the swap
        liquidity: Active liquidity after the swap
        fee_amount: Total fee paid, in the input token
        ticks_crossed: Number of initialized ticks crossed
        steps: Number of loop iterations
        widen_requests: Window widenings needed by this swap
    """

    zero_for_one: bool
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    fee_amount: int
    ticks_crossed: int
    steps: int
    widen_requests: int

    @property
    def amount_in(self) -> int:
        """Input amount including fee (>= 0)."""
        return self.amount0 if self.zero_for_one else self.amount1

    @property
    def amount_out(self) -> int:
        """Output amount (<= 0)."""
        return self.amount1 if self.zero_for_one else self.amount0


def default_price_limit(zero_for_one: bool) -> int:
    """Furthest valid price limit in the swap direction."""
    return MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1


class SwapEngine:
    """Simulates swaps against a pool served by a PoolDataProvider.

    The engine owns its current snapshot. Widening replaces it with a
    larger copy, so snapshots shared with other engines are never mutated.
    Swaps are simulations: the pool price is never updated between calls.
    """

    def __init__(
        self,
        provider: PoolDataProvider,
        config: SimulatorConfig = DEFAULT_CONFIG,
        snapshot: PoolSnapshot | None = None,
    ):
        """Initialize the engine.

        Args:
            provider: Source of pool state and window widening
            config: Simulator configuration
            snapshot: Starting snapshot (default: provider.current_state())
        """
        self.provider = provider
        self.config = config
        self.snapshot = snapshot if snapshot is not None else provider.current_state()
        self.widen_requests = 0

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def swap(
        self,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int | None = None,
    ) -> SwapResult:
        """Simulate a swap.

        Args:
            zero_for_one: True to swap token0 for token1 (price falls)
            amount_specified: Exact input if positive, exact output if negative
            sqrt_price_limit_x96: Price the swap may not pass (default: the
                furthest valid price in the swap direction)

        Returns:
            SwapResult with pool deltas and the final pool state

        Raises:
            AmountIsZero: If amount_specified is zero
            PoolLocked: If the pool's reentrancy lock is held
            InvalidPriceLimit: If the limit is on the wrong side of the price
            SimulationError: Any failure inside the loop, with step/tick context
        """
        snapshot = self.snapshot
        if amount_specified == 0:
            raise AmountIsZero("Amount specified is zero")
        if not snapshot.unlocked:
            raise PoolLocked("Pool is locked")
        if sqrt_price_limit_x96 is None:
            sqrt_price_limit_x96 = default_price_limit(zero_for_one)
        self._check_price_limit(zero_for_one, sqrt_price_limit_x96)

        exact_input = amount_specified > 0
        state = SwapState(
            amount_specified_remaining=amount_specified,
            amount_calculated=0,
            sqrt_price_x96=snapshot.sqrt_price_x96,
            tick=snapshot.tick,
            liquidity=snapshot.liquidity,
        )
        widen_before = self.widen_requests
        steps = 0
        ticks_crossed = 0

        while (
            state.amount_specified_remaining != 0
            and state.sqrt_price_x96 != sqrt_price_limit_x96
        ):
            try:
                crossed = self._step(state, zero_for_one, exact_input, sqrt_price_limit_x96)
            except SimulationError as err:
                err.with_context(steps, state.tick)
                raise
            steps += 1
            ticks_crossed += crossed

        if zero_for_one == exact_input:
            amount0 = signed_sub(amount_specified, state.amount_specified_remaining)
            amount1 = state.amount_calculated
        else:
            amount0 = state.amount_calculated
            amount1 = signed_sub(amount_specified, state.amount_specified_remaining)

        result = SwapResult(
            zero_for_one=zero_for_one,
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
            fee_amount=state.fee_amount,
            ticks_crossed=ticks_crossed,
            steps=steps,
            widen_requests=self.widen_requests - widen_before,
        )
        logger.debug(
            "swap_completed",
            zero_for_one=zero_for_one,
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            steps=steps,
            ticks_crossed=ticks_crossed,
            widen_requests=result.widen_requests,
        )
        return result

    def swap_exact_input(self, zero_for_one: bool, amount_in: int) -> SwapResult:
        """Swap exactly `amount_in` of the input token, without price limit."""
        return self.swap(zero_for_one, amount_in)

    def swap_exact_output(self, zero_for_one: bool, amount_out: int) -> SwapResult:
        """Swap for exactly `amount_out` of the output token, without price limit."""
        return self.swap(zero_for_one, -amount_out)

    def swap_for_price_impact(
        self, zero_for_one: bool, pct_impact: int | str | Decimal
    ) -> SwapResult:
        """Swap until the spot price has moved by `pct_impact` percent.

        See v3sim.engine.impact for how the percentage maps to a price.
        """
        from .impact import swap_for_price_impact

        return swap_for_price_impact(self, zero_for_one, pct_impact)

    def swap_for_execution_price_slippage(
        self, zero_for_one: bool, pct_impact: int | str | Decimal
    ) -> SlippageResult:
        """Swap until the execution price has moved by `pct_impact` percent.

        See v3sim.engine.slippage for the search.
        """
        from .slippage import swap_for_execution_price_slippage

        return swap_for_execution_price_slippage(self, zero_for_one, pct_impact)

    # -------------------------------------------------------------------------
    # Loop building blocks (shared with the slippage search)
    # -------------------------------------------------------------------------

    def next_initialized_tick(self, tick: int, zero_for_one: bool) -> tuple[int, bool]:
        """Next initialized tick from `tick` in the swap direction, clamped to the tick domain."""
        tick_next, initialized = self.load(
            lambda s: next_initialized_tick_within_one_word(s, tick, zero_for_one),
            zero_for_one,
        )
        # The bitmap is unaware of the tick bounds
        if tick_next < MIN_TICK:
            tick_next = MIN_TICK
        elif tick_next > MAX_TICK:
            tick_next = MAX_TICK
        return tick_next, initialized

    def cross_tick(self, tick: int, zero_for_one: bool, liquidity: int) -> int:
        """Active liquidity after crossing an initialized tick."""
        liquidity_net = self.load(lambda s: s.tick_info(tick).liquidity_net, zero_for_one)
        # Moving leftward, the net liquidity is applied in reverse
        if zero_for_one:
            liquidity_net = -liquidity_net
        liquidity_after = add_delta(liquidity, liquidity_net)
        logger.debug(
            "tick_crossed",
            tick=tick,
            liquidity_net=liquidity_net,
            liquidity_before=liquidity,
            liquidity_after=liquidity_after,
        )
        return liquidity_after

    def load(self, read: Callable[[PoolSnapshot], T], zero_for_one: bool) -> T:
        """Read from the snapshot, widening the window on DataUnavailable.

        Raises:
            DataUnavailable: If the data is still missing after
                config.max_widen_attempts widenings
        """
        attempts = 0
        while True:
            try:
                return read(self.snapshot)
            except DataUnavailable as err:
                if attempts >= self.config.max_widen_attempts:
                    raise
                attempts += 1
                self._widen(err, LoadingPattern.for_direction(zero_for_one))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _step(
        self, state: SwapState, zero_for_one: bool, exact_input: bool, sqrt_price_limit_x96: int
    ) -> bool:
        """Run one loop iteration; returns True if an initialized tick was crossed."""
        step = StepComputation(sqrt_price_start_x96=state.sqrt_price_x96)

        step.tick_next, step.initialized = self.next_initialized_tick(state.tick, zero_for_one)
        step.sqrt_price_next_x96 = get_sqrt_ratio_at_tick(step.tick_next)

        if zero_for_one:
            past_limit = step.sqrt_price_next_x96 < sqrt_price_limit_x96
        else:
            past_limit = step.sqrt_price_next_x96 > sqrt_price_limit_x96
        sqrt_price_target_x96 = sqrt_price_limit_x96 if past_limit else step.sqrt_price_next_x96

        state.sqrt_price_x96, step.amount_in, step.amount_out, step.fee_amount = compute_swap_step(
            state.sqrt_price_x96,
            sqrt_price_target_x96,
            state.liquidity,
            state.amount_specified_remaining,
            self.snapshot.fee,
        )

        paid_in = to_int256(unsigned_add(step.amount_in, step.fee_amount))
        if exact_input:
            state.amount_specified_remaining = signed_sub(
                state.amount_specified_remaining, paid_in
            )
            state.amount_calculated = signed_sub(
                state.amount_calculated, to_int256(step.amount_out)
            )
        else:
            state.amount_specified_remaining = signed_add(
                state.amount_specified_remaining, to_int256(step.amount_out)
            )
            state.amount_calculated = signed_add(state.amount_calculated, paid_in)
        state.fee_amount = unsigned_add(state.fee_amount, step.fee_amount)

        if self.config.log_steps:
            logger.debug(
                "swap_step",
                tick=state.tick,
                tick_next=step.tick_next,
                initialized=step.initialized,
                sqrt_price_x96=state.sqrt_price_x96,
                amount_in=step.amount_in,
                amount_out=step.amount_out,
                fee_amount=step.fee_amount,
            )

        crossed = False
        if state.sqrt_price_x96 == step.sqrt_price_next_x96:
            if step.initialized:
                state.liquidity = self.cross_tick(step.tick_next, zero_for_one, state.liquidity)
                crossed = True
            state.tick = step.tick_next - 1 if zero_for_one else step.tick_next
        elif state.sqrt_price_x96 != step.sqrt_price_start_x96:
            # Price moved within the range: recompute the tick
            state.tick = get_tick_at_sqrt_ratio(state.sqrt_price_x96)
        return crossed

    def _check_price_limit(self, zero_for_one: bool, sqrt_price_limit_x96: int) -> None:
        current = self.snapshot.sqrt_price_x96
        if zero_for_one:
            valid = MIN_SQRT_RATIO < sqrt_price_limit_x96 < current
        else:
            valid = current < sqrt_price_limit_x96 < MAX_SQRT_RATIO
        if not valid:
            raise InvalidPriceLimit(
                f"Price limit {sqrt_price_limit_x96} invalid for "
                f"{'zero_for_one' if zero_for_one else 'one_for_zero'} swap at {current}"
            )

    def _widen(self, err: DataUnavailable, direction: LoadingPattern) -> None:
        self.widen_requests += 1
        if isinstance(err, WordNotLoaded):
            self.snapshot = self.provider.widen_bitmap_window(
                self.snapshot, err.word_pos, direction
            )
        elif isinstance(err, TickNotLoaded):
            self.snapshot = self.provider.widen_tick_window(
                self.snapshot, err.tick_index, direction
            )
        else:
            raise err


__all__ = [
    "SwapEngine",
    "SwapResult",
    "SwapState",
    "StepComputation",
    "MAX_AMOUNT_SPECIFIED",
    "default_price_limit",
]
