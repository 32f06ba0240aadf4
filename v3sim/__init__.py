"""Concentrated-liquidity swap simulator - exact offline Uniswap V3 math."""

from v3sim.config import DEFAULT_CONFIG, SimulatorConfig
from v3sim.engine import SlippageResult, SwapEngine, SwapResult
from v3sim.errors import DataUnavailable, SimulationError
from v3sim.models import parse_pool_snapshot
from v3sim.pool import InMemoryPoolDataProvider, PoolBuilder, PoolDataProvider, PoolSnapshot
from v3sim.simulator import (
    simulate_exact_input,
    simulate_exact_output,
    simulate_execution_slippage,
    simulate_price_impact,
)

__version__ = "0.1.0"
__all__ = [
    "SimulatorConfig",
    "DEFAULT_CONFIG",
    "SwapEngine",
    "SwapResult",
    "SlippageResult",
    "SimulationError",
    "DataUnavailable",
    "PoolSnapshot",
    "PoolBuilder",
    "PoolDataProvider",
    "InMemoryPoolDataProvider",
    "parse_pool_snapshot",
    "simulate_exact_input",
    "simulate_exact_output",
    "simulate_price_impact",
    "simulate_execution_slippage",
    "__version__",
]
