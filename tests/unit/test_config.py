"""Tests for SimulatorConfig."""

import dataclasses

import pytest

from v3sim.config import DEFAULT_CONFIG, SimulatorConfig


class TestSimulatorConfig:
    """Tests for SimulatorConfig."""

    def test_defaults(self):
        config = SimulatorConfig()
        assert config.tick_window_radius == 100
        assert config.tick_window_span == 200
        assert config.word_window_radius == 20
        assert config.max_widen_attempts == 1
        assert config.sqrt_max_iterations == 1000
        assert config.log_steps is False
        assert config == DEFAULT_CONFIG

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.max_widen_attempts = 5  # type: ignore[misc]

    def test_from_env(self, monkeypatch):
        """V3SIM_* variables override the defaults."""
        monkeypatch.setenv("V3SIM_TICK_WINDOW_RADIUS", "50")
        monkeypatch.setenv("V3SIM_MAX_WIDEN_ATTEMPTS", "3")
        monkeypatch.setenv("V3SIM_LOG_STEPS", "yes")

        config = SimulatorConfig.from_env()

        assert config.tick_window_radius == 50
        assert config.max_widen_attempts == 3
        assert config.log_steps is True
        assert config.word_window_radius == 20

    def test_from_env_without_variables(self, monkeypatch):
        for name in ("TICK_WINDOW_RADIUS", "TICK_WINDOW_SPAN", "WORD_WINDOW_RADIUS", "LOG_STEPS"):
            monkeypatch.delenv(f"V3SIM_{name}", raising=False)
        monkeypatch.delenv("V3SIM_MAX_WIDEN_ATTEMPTS", raising=False)
        monkeypatch.delenv("V3SIM_SQRT_MAX_ITERATIONS", raising=False)
        assert SimulatorConfig.from_env() == DEFAULT_CONFIG

    def test_from_env_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("V3SIM_TICK_WINDOW_SPAN", "wide")
        with pytest.raises(ValueError, match="V3SIM_TICK_WINDOW_SPAN"):
            SimulatorConfig.from_env()
