"""Configuration for the swap simulator."""

from __future__ import annotations

import os
from dataclasses import dataclass

_ENV_PREFIX = "V3SIM_"


@dataclass(frozen=True)
class SimulatorConfig:
    """Centralized configuration for pool loading and the swap loop.

    Window sizes describe how much pool data the collaborator loads at a
    time. Tick windows are measured in multiples of the pool's tick spacing,
    bitmap windows in words.

    Attributes:
        tick_window_radius: Ticks loaded on each side of the current tick
            on the initial load (default: 100)
        tick_window_span: Ticks loaded in the swap direction when the walk
            leaves the loaded window (default: 200)
        word_window_radius: Bitmap words loaded on each side of the current
            word, or in the swap direction when widening (default: 20)
        max_widen_attempts: Widen requests issued for one missing tick or
            word before the miss becomes fatal (default: 1)
        sqrt_max_iterations: Newton-Raphson bound for the integer square
            root (default: 1000)
        log_steps: If True, log every swap step at debug level
    """

    tick_window_radius: int = 100
    tick_window_span: int = 200
    word_window_radius: int = 20

    max_widen_attempts: int = 1
    sqrt_max_iterations: int = 1000

    log_steps: bool = False

    @classmethod
    def from_env(cls) -> SimulatorConfig:
        """Build a config from V3SIM_* environment variables.

        Unset variables keep their defaults, e.g. V3SIM_TICK_WINDOW_RADIUS=50.
        """
        defaults = cls()
        return cls(
            tick_window_radius=_env_int("TICK_WINDOW_RADIUS", defaults.tick_window_radius),
            tick_window_span=_env_int("TICK_WINDOW_SPAN", defaults.tick_window_span),
            word_window_radius=_env_int("WORD_WINDOW_RADIUS", defaults.word_window_radius),
            max_widen_attempts=_env_int("MAX_WIDEN_ATTEMPTS", defaults.max_widen_attempts),
            sqrt_max_iterations=_env_int("SQRT_MAX_ITERATIONS", defaults.sqrt_max_iterations),
            log_steps=os.environ.get(f"{_ENV_PREFIX}LOG_STEPS", "false").lower()
            in ("true", "1", "yes"),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(f"{_ENV_PREFIX}{name}")
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got '{raw}'") from err


# Default configuration instance
DEFAULT_CONFIG = SimulatorConfig()

__all__ = ["SimulatorConfig", "DEFAULT_CONFIG"]
