"""Error classes for swap simulation.

Every fallible operation raises a specific subclass of SimulationError so
callers can tell arithmetic failures, domain violations, missing pool data
and bad input apart:

- MathError: overflow, underflow, division by zero, non-convergence
- BoundsError: tick or price outside the valid domain
- DataUnavailable: tick or bitmap word outside the loaded window
- InvariantViolation: pool data that breaks a protocol invariant
- ValidationError: swap parameters that make no sense

Only DataUnavailable is recoverable (the engine widens the window and
retries); everything else aborts the simulation call.
"""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for all simulation errors.

    Attributes:
        step: Index of the swap step that failed (set by the engine)
        tick: Current tick when the failure happened (set by the engine)
    """

    def __init__(self, message: str = "", *, step: int | None = None, tick: int | None = None):
        super().__init__(message)
        self.step = step
        self.tick = tick

    def with_context(self, step: int, tick: int) -> SimulationError:
        """Attach loop context unless an inner frame already did."""
        if self.step is None:
            self.step = step
        if self.tick is None:
            self.tick = tick
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.step is None:
            return message
        return f"{message} (step={self.step}, tick={self.tick})"


# =============================================================================
# Arithmetic
# =============================================================================


class MathError(SimulationError, ArithmeticError):
    """Base class for fixed-point arithmetic errors."""

    pass


class Overflow(MathError):
    """Result does not fit in the target integer width."""

    pass


class Underflow(MathError):
    """Result would drop below the minimum of the target integer width."""

    pass


class DivisionByZero(MathError):
    """Division or modulo by zero."""

    pass


class NotConverged(MathError):
    """Iterative method did not reach a fixed point."""

    pass


class NegativeInput(MathError):
    """Operation is undefined for negative arguments."""

    pass


class ZeroInput(MathError):
    """Operation is undefined for zero (bit scans)."""

    pass


class LiquidityAdditionOverflow(Overflow):
    """Adding a liquidity delta exceeds the uint128 range (LA)."""

    pass


class LiquiditySubtractionUnderflow(Underflow):
    """Removing a liquidity delta would make liquidity negative (LS)."""

    pass


# =============================================================================
# Domain bounds
# =============================================================================


class BoundsError(SimulationError, ValueError):
    """Base class for values outside the valid tick/price domain."""

    pass


class TickOutOfBounds(BoundsError):
    """Tick magnitude exceeds MAX_TICK."""

    pass


class PriceOutOfBounds(BoundsError):
    """Sqrt price outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO) or wider than uint160."""

    pass


class PriceUnderflow(BoundsError):
    """Removing token1 would push the sqrt price to zero or below."""

    pass


# =============================================================================
# Pool data availability
# =============================================================================


class DataUnavailable(SimulationError, LookupError):
    """Requested pool data is outside the loaded window."""

    pass


class WordNotLoaded(DataUnavailable):
    """Bitmap word is outside the loaded window."""

    def __init__(self, word_pos: int):
        super().__init__(f"Bitmap word {word_pos} not loaded")
        self.word_pos = word_pos


class TickNotLoaded(DataUnavailable):
    """Tick info is outside the loaded window."""

    def __init__(self, tick_index: int):
        super().__init__(f"Tick {tick_index} not loaded")
        self.tick_index = tick_index


# =============================================================================
# Invariants and validation
# =============================================================================


class InvariantViolation(SimulationError):
    """Pool data violates a protocol invariant."""

    pass


class PoolLocked(InvariantViolation):
    """Pool slot0 reports the reentrancy lock as held."""

    pass


class ExceedsMaxLiquidityPerTick(InvariantViolation):
    """Gross liquidity at a tick exceeds the per-tick cap (on-chain revert "LO")."""

    pass


class ValidationError(SimulationError, ValueError):
    """Swap parameters are invalid."""

    pass


class AmountIsZero(ValidationError):
    """Amount is zero, so there is nothing to swap."""

    pass


class InvalidPriceLimit(ValidationError):
    """Sqrt price limit is on the wrong side of the current price (on-chain revert "SPL")."""

    pass


class InvalidPriceImpact(ValidationError):
    """Price impact percentage is outside the supported range."""

    pass


__all__ = [
    "SimulationError",
    # Arithmetic
    "MathError",
    "Overflow",
    "Underflow",
    "DivisionByZero",
    "NotConverged",
    "NegativeInput",
    "ZeroInput",
    "LiquidityAdditionOverflow",
    "LiquiditySubtractionUnderflow",
    # Bounds
    "BoundsError",
    "TickOutOfBounds",
    "PriceOutOfBounds",
    "PriceUnderflow",
    # Data
    "DataUnavailable",
    "WordNotLoaded",
    "TickNotLoaded",
    # Invariants / validation
    "InvariantViolation",
    "PoolLocked",
    "ExceedsMaxLiquidityPerTick",
    "ValidationError",
    "AmountIsZero",
    "InvalidPriceLimit",
    "InvalidPriceImpact",
]
