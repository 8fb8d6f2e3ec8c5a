"""Pytest configuration and shared fixtures."""

import pytest

from requisite_run.config import GameConfig, LevelConfig, PlayerConfig
from requisite_run.calibration import clear_cache


@pytest.fixture
def game_config():
    """Default game configuration."""
    return GameConfig()


@pytest.fixture
def empty_config():
    """No obstacles and nothing to collect; only the gate is in play."""
    return GameConfig(level=LevelConfig(obstacle_count=0), catalog=())


@pytest.fixture
def make_config():
    """Build a GameConfig from player/level overrides."""
    def _make(catalog=None, player=None, **level):
        kwargs = {
            "player": PlayerConfig(**(player or {})),
            "level": LevelConfig(**level),
        }
        if catalog is not None:
            kwargs["catalog"] = catalog
        return GameConfig(**kwargs)
    return _make


@pytest.fixture(autouse=True)
def fresh_calibration():
    clear_cache()
    yield
    clear_cache()
