"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest
import structlog

from v3sim.models import parse_pool_snapshot
from v3sim.pool import PoolSnapshot
from tests.helpers import make_crossing_pool, make_multi_range_pool, make_pool

FIXTURES_DIR = Path(__file__).parent / "fixtures"
POOLS_DIR = FIXTURES_DIR / "pools"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


def load_pool_fixture(name: str) -> PoolSnapshot:
    """Load a pool snapshot fixture by name.

    Args:
        name: Fixture name (e.g., "crossing_pool")

    Returns:
        Parsed PoolSnapshot
    """
    path = POOLS_DIR / f"{name}.json"
    with open(path) as f:
        data = json.load(f)
    return parse_pool_snapshot(data)


@pytest.fixture
def pool() -> PoolSnapshot:
    """Default pool: 1e18 liquidity over [-6000, 6000] at tick 0, fee 0.3%."""
    return make_pool()


@pytest.fixture
def crossing_pool() -> PoolSnapshot:
    """Tick spacing 200 pool whose tick +200 removes 1e18 of 5e18 liquidity."""
    return make_crossing_pool()


@pytest.fixture
def multi_range_pool() -> PoolSnapshot:
    """Pool with several ranges spread over multiple bitmap words."""
    return make_multi_range_pool()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after tests that configure it."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def load_pool():
    """Return the pool fixture loader."""
    return load_pool_fixture
