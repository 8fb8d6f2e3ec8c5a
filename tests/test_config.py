"""Tests for run configuration."""

import pytest

from requisite_run.config import (
    PlayerConfig,
    LevelConfig,
    GameConfig,
    CatalogItem,
    DEFAULT_CATALOG,
    CONFIGS,
)
from requisite_run.constraints import check_config


class TestPlayerConfig:
    def test_defaults(self):
        player = PlayerConfig()
        assert player.width == 100
        assert player.height == 100
        assert player.start_x == 400
        assert player.jump_velocity == -13
        assert player.double_jump_velocity == -16
        assert player.gravity == 1
        assert player.double_jump_boost == 30
        assert player.double_jump_window_ms == 300

    def test_sample_within_ranges(self):
        for _ in range(20):
            player = PlayerConfig.sample()
            assert PlayerConfig.JUMP_VELOCITY_RANGE[0] <= player.jump_velocity <= PlayerConfig.JUMP_VELOCITY_RANGE[1]
            lo, hi = PlayerConfig.DOUBLE_JUMP_WINDOW_RANGE
            assert lo <= player.double_jump_window_ms <= hi
            assert player.width == 100

    def test_from_dict_fills_defaults(self):
        player = PlayerConfig.from_dict({"jump_velocity": -11.0})
        assert player.jump_velocity == -11.0
        assert player.double_jump_velocity == -16.0


class TestLevelConfig:
    def test_defaults(self):
        level = LevelConfig()
        assert level.speed == 4
        assert level.obstacle_count == 8
        assert level.map_length == 6600
        assert level.lane_heights == (350, 250, 200)
        assert level.max_placement_attempts == 10
        assert level.frame_ms == pytest.approx(1000 / 60)

    def test_from_dict_restores_lane_tuple(self):
        level = LevelConfig.from_dict({"lane_heights": [300, 150]})
        assert level.lane_heights == (300, 150)

    def test_sample_within_ranges(self):
        for _ in range(20):
            level = LevelConfig.sample()
            assert LevelConfig.SPEED_RANGE[0] <= level.speed <= LevelConfig.SPEED_RANGE[1]
            lo, hi = LevelConfig.OBSTACLE_COUNT_RANGE
            assert lo <= level.obstacle_count <= hi


class TestGameConfig:
    def test_floor_and_ground(self, game_config):
        assert game_config.floor_y == 470
        assert game_config.ground_y == 370

    def test_ground_follows_player_height(self):
        config = GameConfig(player=PlayerConfig(height=60))
        assert config.ground_y == 410

    def test_default_catalog(self, game_config):
        assert len(game_config.catalog) == 11
        keys = [item.key for item in game_config.catalog]
        assert len(set(keys)) == 11
        assert keys[0] == "dpi"

    def test_dict_roundtrip(self):
        config = GameConfig(
            player=PlayerConfig(jump_velocity=-12.0),
            level=LevelConfig(speed=5.0, lane_heights=(300.0,)),
            catalog=(CatalogItem("a", "Form A"), CatalogItem("b", "Form B")),
        )
        restored = GameConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_without_catalog_uses_default(self):
        config = GameConfig.from_dict({"level": {"speed": 6.0}})
        assert config.catalog == DEFAULT_CATALOG
        assert config.level.speed == 6.0


class TestPresets:
    @pytest.mark.parametrize("name", sorted(CONFIGS))
    def test_presets_are_runnable(self, name):
        assert check_config(CONFIGS[name]).valid

    def test_open_road_is_empty(self):
        config = CONFIGS["open_road"]
        assert config.level.obstacle_count == 0
        assert config.catalog == ()
