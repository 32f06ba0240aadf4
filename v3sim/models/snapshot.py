"""Pydantic models for pool snapshots read from JSON.

Field names follow the on-chain camelCase (sqrtPriceX96, tickSpacing, ...);
snake_case names are accepted too.

Example:
    {
        "sqrtPriceX96": "79228162514264337593543950336",
        "tick": 0,
        "liquidity": "5000000000000000000",
        "fee": 3000,
        "tickSpacing": 60,
        "ticks": {"-600": {"liquidityGross": "1000", "liquidityNet": "1000"}}
    }

tickBitmap is derived from the initialized ticks when omitted. Without
tickWindows/wordWindows the snapshot is treated as fully loaded.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from v3sim.constants import FEE_DENOMINATOR
from v3sim.pool.state import FULL_TICK_WINDOW, FULL_WORD_WINDOW, PoolSnapshot, TickInfo
from v3sim.pool.tick_bitmap import flip_tick

from .types import Int128, Tick, Uint128, Uint160, Uint256


class TickInfoModel(BaseModel):
    """Liquidity at one initialized tick."""

    liquidity_gross: Uint128 = Field(alias="liquidityGross")
    liquidity_net: Int128 = Field(alias="liquidityNet")
    initialized: bool | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_initialized(self) -> TickInfoModel:
        expected = self.liquidity_gross > 0
        if self.initialized is not None and self.initialized != expected:
            raise ValueError(
                f"initialized={self.initialized} contradicts liquidityGross={self.liquidity_gross}"
            )
        if abs(self.liquidity_net) > self.liquidity_gross:
            raise ValueError(
                f"|liquidityNet| {abs(self.liquidity_net)} exceeds liquidityGross "
                f"{self.liquidity_gross}"
            )
        return self

    def to_tick_info(self) -> TickInfo:
        return TickInfo(
            liquidity_gross=self.liquidity_gross,
            liquidity_net=self.liquidity_net,
            initialized=self.liquidity_gross > 0,
        )


class PoolSnapshotModel(BaseModel):
    """Pool state as delivered by a loader."""

    sqrt_price_x96: Uint160 = Field(alias="sqrtPriceX96")
    tick: Tick
    liquidity: Uint128
    fee: int = Field(ge=0, lt=FEE_DENOMINATOR, description="Fee in hundredths of a bip")
    tick_spacing: int = Field(alias="tickSpacing", gt=0, le=16384)
    unlocked: bool = True
    ticks: dict[int, TickInfoModel] = Field(default_factory=dict)
    tick_bitmap: dict[int, Uint256] | None = Field(default=None, alias="tickBitmap")
    tick_windows: list[tuple[int, int]] | None = Field(default=None, alias="tickWindows")
    word_windows: list[tuple[int, int]] | None = Field(default=None, alias="wordWindows")
    max_liquidity_per_tick: Uint128 | None = Field(default=None, alias="maxLiquidityPerTick")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_ticks(self) -> PoolSnapshotModel:
        for tick, info in self.ticks.items():
            if tick % self.tick_spacing != 0:
                raise ValueError(f"Tick {tick} is not a multiple of tickSpacing {self.tick_spacing}")
            if info.liquidity_gross == 0:
                raise ValueError(f"Tick {tick} is listed but not initialized")
        return self

    def derived_bitmap(self) -> dict[int, int]:
        """Bitmap words implied by the initialized ticks."""
        bitmap: dict[int, int] = {}
        for tick in self.ticks:
            flip_tick(bitmap, tick, self.tick_spacing)
        return bitmap

    def to_snapshot(self) -> PoolSnapshot:
        """Convert to the engine's immutable snapshot."""
        tick_bitmap = self.tick_bitmap if self.tick_bitmap is not None else self.derived_bitmap()
        tick_windows = [FULL_TICK_WINDOW] if self.tick_windows is None else self.tick_windows
        word_windows = [FULL_WORD_WINDOW] if self.word_windows is None else self.word_windows
        return PoolSnapshot(
            sqrt_price_x96=self.sqrt_price_x96,
            tick=self.tick,
            liquidity=self.liquidity,
            fee=self.fee,
            tick_spacing=self.tick_spacing,
            unlocked=self.unlocked,
            ticks={tick: info.to_tick_info() for tick, info in self.ticks.items()},
            tick_bitmap={word: bits for word, bits in tick_bitmap.items() if bits},
            tick_windows=tuple(tick_windows),
            word_windows=tuple(word_windows),
            max_liquidity_per_tick=self.max_liquidity_per_tick,
        )


def parse_pool_snapshot(data: dict[str, Any] | str | bytes) -> PoolSnapshot:
    """Parse a snapshot from a dict or a JSON document.

    Raises:
        pydantic.ValidationError: If the data is malformed
        v3sim.errors.ValidationError: If the values describe an invalid pool
    """
    if isinstance(data, (str, bytes)):
        model = PoolSnapshotModel.model_validate_json(data)
    else:
        model = PoolSnapshotModel.model_validate(data)
    return model.to_snapshot()


__all__ = ["TickInfoModel", "PoolSnapshotModel", "parse_pool_snapshot"]
