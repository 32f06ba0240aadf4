"""Construct complete pools by minting liquidity positions."""

from __future__ import annotations

from v3sim.constants import FEE_MEDIUM, MAX_TICK, MIN_TICK, TICK_SPACING
from v3sim.errors import TickOutOfBounds, ValidationError
from v3sim.math.liquidity_math import add_delta
from v3sim.math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio

from .state import PoolSnapshot, TickInfo
from .tick import tick_spacing_to_max_liquidity_per_tick, update_tick
from .tick_bitmap import flip_tick


class PoolBuilder:
    """Fluent builder for fully loaded pool snapshots.

    Positions are minted through update_tick and flip_tick so the bitmap
    always matches the initialized ticks, and active liquidity includes
    every position whose range contains the current tick.

    Example:
        pool = (
            PoolBuilder(fee=FEE_MEDIUM)
            .at_tick(0)
            .add_position(-600, 600, 10**18)
            .build()
        )
    """

    def __init__(self, fee: int = FEE_MEDIUM, tick_spacing: int | None = None):
        """Initialize builder.

        Args:
            fee: Fee in hundredths of a bip (default: 0.3%)
            tick_spacing: Tick spacing (default: the fee tier's standard spacing)
        """
        if tick_spacing is None:
            if fee not in TICK_SPACING:
                raise ValidationError(f"No standard tick spacing for fee {fee}")
            tick_spacing = TICK_SPACING[fee]
        self.fee = fee
        self.tick_spacing = tick_spacing
        self.max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(tick_spacing)
        self.tick = 0
        self.sqrt_price_x96 = get_sqrt_ratio_at_tick(0)
        self.liquidity = 0
        self.unlocked = True
        self.ticks: dict[int, TickInfo] = {}
        self.tick_bitmap: dict[int, int] = {}

    def at_tick(self, tick: int) -> PoolBuilder:
        """Place the price exactly at a tick."""
        self.sqrt_price_x96 = get_sqrt_ratio_at_tick(tick)
        self.tick = tick
        return self

    def at_sqrt_price(self, sqrt_price_x96: int) -> PoolBuilder:
        """Place the price at an arbitrary sqrt price."""
        self.tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        self.sqrt_price_x96 = sqrt_price_x96
        return self

    def locked(self) -> PoolBuilder:
        """Mark the pool's reentrancy lock as held."""
        self.unlocked = False
        return self

    def with_liquidity(self, liquidity: int) -> PoolBuilder:
        """Override active liquidity, e.g. for pools described tick by tick."""
        self.liquidity = liquidity
        return self

    def set_tick(
        self, tick: int, liquidity_net: int, liquidity_gross: int | None = None
    ) -> PoolBuilder:
        """Initialize a tick with raw values, bypassing position accounting.

        Useful to reproduce a pool observed on-chain. Active liquidity is
        not adjusted; set it with with_liquidity().
        """
        self._check_tick(tick)
        if liquidity_gross is None:
            liquidity_gross = abs(liquidity_net)
        if liquidity_gross <= 0:
            raise ValidationError(f"Tick {tick} needs positive gross liquidity")
        if tick not in self.ticks:
            flip_tick(self.tick_bitmap, tick, self.tick_spacing)
        self.ticks[tick] = TickInfo(
            liquidity_gross=liquidity_gross, liquidity_net=liquidity_net, initialized=True
        )
        return self

    def add_position(self, tick_lower: int, tick_upper: int, liquidity: int) -> PoolBuilder:
        """Mint `liquidity` over [tick_lower, tick_upper).

        Raises:
            ValidationError: If the range is empty or misaligned
            TickOutOfBounds: If a boundary is outside the tick domain
            ExceedsMaxLiquidityPerTick: If a boundary exceeds the per-tick cap
        """
        return self._modify_position(tick_lower, tick_upper, liquidity)

    def remove_position(self, tick_lower: int, tick_upper: int, liquidity: int) -> PoolBuilder:
        """Burn `liquidity` from [tick_lower, tick_upper)."""
        return self._modify_position(tick_lower, tick_upper, -liquidity)

    def build(self) -> PoolSnapshot:
        """Snapshot with every tick and word loaded."""
        return PoolSnapshot(
            sqrt_price_x96=self.sqrt_price_x96,
            tick=self.tick,
            liquidity=self.liquidity,
            fee=self.fee,
            tick_spacing=self.tick_spacing,
            unlocked=self.unlocked,
            ticks=self.ticks,
            tick_bitmap=self.tick_bitmap,
            max_liquidity_per_tick=self.max_liquidity_per_tick,
        )

    def _modify_position(self, tick_lower: int, tick_upper: int, delta: int) -> PoolBuilder:
        if tick_lower >= tick_upper:
            raise ValidationError(f"Empty range [{tick_lower}, {tick_upper})")
        self._check_tick(tick_lower)
        self._check_tick(tick_upper)
        if delta == 0:
            return self

        # Both boundaries and active liquidity update together or not at all
        ticks = dict(self.ticks)
        tick_bitmap = dict(self.tick_bitmap)
        if update_tick(ticks, tick_lower, delta, False, self.max_liquidity_per_tick):
            flip_tick(tick_bitmap, tick_lower, self.tick_spacing)
        if update_tick(ticks, tick_upper, delta, True, self.max_liquidity_per_tick):
            flip_tick(tick_bitmap, tick_upper, self.tick_spacing)
        liquidity = self.liquidity
        if tick_lower <= self.tick < tick_upper:
            liquidity = add_delta(liquidity, delta)

        self.ticks = ticks
        self.tick_bitmap = tick_bitmap
        self.liquidity = liquidity
        return self

    def _check_tick(self, tick: int) -> None:
        if not MIN_TICK <= tick <= MAX_TICK:
            raise TickOutOfBounds(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
        if tick % self.tick_spacing != 0:
            raise ValidationError(
                f"Tick {tick} is not a multiple of tick spacing {self.tick_spacing}"
            )


__all__ = ["PoolBuilder"]
