"""Tests for the error hierarchy."""

import pytest

from v3sim.errors import (
    AmountIsZero,
    BoundsError,
    DataUnavailable,
    ExceedsMaxLiquidityPerTick,
    InvalidPriceImpact,
    InvalidPriceLimit,
    InvariantViolation,
    LiquidityAdditionOverflow,
    LiquiditySubtractionUnderflow,
    MathError,
    NotConverged,
    Overflow,
    PoolLocked,
    PriceOutOfBounds,
    SimulationError,
    TickNotLoaded,
    TickOutOfBounds,
    Underflow,
    ValidationError,
    WordNotLoaded,
)


class TestHierarchy:
    """Error classes map onto builtin categories."""

    @pytest.mark.parametrize(
        "error,parents",
        [
            (Overflow, (MathError, ArithmeticError)),
            (NotConverged, (MathError,)),
            (LiquidityAdditionOverflow, (Overflow,)),
            (LiquiditySubtractionUnderflow, (Underflow,)),
            (TickOutOfBounds, (BoundsError, ValueError)),
            (PriceOutOfBounds, (BoundsError,)),
            (WordNotLoaded, (DataUnavailable, LookupError)),
            (TickNotLoaded, (DataUnavailable,)),
            (PoolLocked, (InvariantViolation,)),
            (ExceedsMaxLiquidityPerTick, (InvariantViolation,)),
            (AmountIsZero, (ValidationError, ValueError)),
            (InvalidPriceLimit, (ValidationError,)),
            (InvalidPriceImpact, (ValidationError,)),
        ],
    )
    def test_parents(self, error, parents):
        for parent in parents:
            assert issubclass(error, parent)
        assert issubclass(error, SimulationError)


class TestContext:
    """Tests for step/tick context."""

    def test_no_context(self):
        err = Overflow("too big")
        assert (err.step, err.tick) == (None, None)
        assert str(err) == "too big"

    def test_with_context(self):
        err = Overflow("too big").with_context(3, -120)
        assert (err.step, err.tick) == (3, -120)
        assert str(err) == "too big (step=3, tick=-120)"

    def test_inner_context_wins(self):
        """Context set closer to the failure is kept."""
        err = Overflow("too big", tick=60).with_context(3, -120)
        assert (err.step, err.tick) == (3, 60)

    def test_data_errors_carry_location(self):
        assert WordNotLoaded(-2).word_pos == -2
        assert TickNotLoaded(600).tick_index == 600
        assert "600" in str(TickNotLoaded(600))
