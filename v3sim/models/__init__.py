"""Pydantic models for pool snapshot input."""

from v3sim.models.snapshot import PoolSnapshotModel, TickInfoModel, parse_pool_snapshot
from v3sim.models.types import Int128, Tick, Uint128, Uint160, Uint256, parse_int

__all__ = [
    "PoolSnapshotModel",
    "TickInfoModel",
    "parse_pool_snapshot",
    "parse_int",
    "Uint256",
    "Uint160",
    "Uint128",
    "Int128",
    "Tick",
]
