"""Tests for configuration constraints."""

import pytest

from requisite_run.config import GameConfig, PlayerConfig, LevelConfig, CatalogItem
from requisite_run.constraints import (
    RunConstraints,
    ConfigError,
    ConstraintResult,
    ConstraintViolation,
    check_config,
)


class TestConstraintResult:
    def test_valid_result_is_truthy(self):
        result = ConstraintResult(valid=True, violations=[])
        assert result
        assert bool(result) is True

    def test_invalid_result_is_falsy(self):
        violation = ConstraintViolation("param", "error message", "error")
        result = ConstraintResult(valid=False, violations=[violation])
        assert not result
        assert result.errors == [violation]
        assert result.warnings == []


class TestValidatePlayer:
    def test_default_is_valid(self):
        assert RunConstraints.validate_player(PlayerConfig()).valid

    def test_non_positive_size(self):
        result = RunConstraints.validate_player(PlayerConfig(width=0))
        assert not result.valid
        assert any(v.param == "width" for v in result.violations)

    def test_downward_jump(self):
        result = RunConstraints.validate_player(PlayerConfig(jump_velocity=3.0))
        assert not result.valid
        assert any(v.param == "jump_velocity" for v in result.violations)

    def test_zero_gravity(self):
        result = RunConstraints.validate_player(PlayerConfig(gravity=0.0))
        assert any(v.param == "gravity" for v in result.errors)

    def test_negative_window(self):
        result = RunConstraints.validate_player(PlayerConfig(double_jump_window_ms=-1.0))
        assert any(v.param == "double_jump_window_ms" for v in result.errors)


class TestValidateLevel:
    def test_default_is_valid(self):
        assert RunConstraints.validate_level(LevelConfig(), PlayerConfig()).valid

    def test_zero_speed(self):
        result = RunConstraints.validate_level(LevelConfig(speed=0.0), PlayerConfig())
        assert any(v.param == "speed" for v in result.errors)

    def test_overlapping_bands(self):
        level = LevelConfig(obstacle_spacing=300.0)
        result = RunConstraints.validate_level(level, PlayerConfig())
        assert any(v.param == "obstacle_spacing" for v in result.errors)

    def test_single_obstacle_ignores_spacing(self):
        level = LevelConfig(obstacle_count=1, obstacle_spacing=0.0)
        assert RunConstraints.validate_level(level, PlayerConfig()).valid

    def test_no_lanes(self):
        result = RunConstraints.validate_level(LevelConfig(lane_heights=()), PlayerConfig())
        assert any(v.param == "lane_heights" for v in result.errors)

    def test_zero_attempts(self):
        result = RunConstraints.validate_level(LevelConfig(max_placement_attempts=0), PlayerConfig())
        assert any(v.param == "max_placement_attempts" for v in result.errors)

    def test_gate_behind_runner(self):
        result = RunConstraints.validate_level(LevelConfig(map_length=500.0), PlayerConfig())
        assert any(v.param == "map_length" for v in result.errors)

    def test_gate_just_ahead_of_runner(self):
        assert RunConstraints.validate_level(LevelConfig(map_length=501.0), PlayerConfig()).valid

    def test_start_inside_pursuer_line(self):
        result = RunConstraints.validate_level(LevelConfig(), PlayerConfig(start_x=10.0))
        assert any(v.param == "start_x" for v in result.errors)


class TestValidateCatalog:
    def test_empty_catalog_is_warning(self):
        result = RunConstraints.validate_catalog(GameConfig(catalog=()))
        assert result.valid
        assert len(result.warnings) == 1

    def test_duplicate_keys(self):
        catalog = (CatalogItem("nit", "Tax ID"), CatalogItem("nit", "Tax ID again"))
        result = RunConstraints.validate_catalog(GameConfig(catalog=catalog))
        assert not result.valid
        assert "nit" in result.errors[0].message


class TestReachability:
    def test_default_single_jump_clears_obstacles(self):
        result = RunConstraints.validate_reachability(GameConfig())
        assert result.violations == []

    def test_weak_single_jump_needs_double(self):
        config = GameConfig(player=PlayerConfig(jump_velocity=-12.0))
        result = RunConstraints.validate_reachability(config)
        assert result.valid
        assert len(result.warnings) == 1
        assert "double jump" in result.warnings[0].message

    def test_unreachable_obstacles(self):
        config = GameConfig(player=PlayerConfig(jump_velocity=-5.0, double_jump_velocity=-6.0))
        result = RunConstraints.validate_reachability(config)
        assert result.valid
        assert "cannot reach" in result.warnings[0].message

    def test_skipped_without_obstacles(self):
        config = GameConfig(
            player=PlayerConfig(jump_velocity=-2.0, double_jump_velocity=-2.0),
            level=LevelConfig(obstacle_count=0),
        )
        assert RunConstraints.validate_reachability(config).violations == []


class TestCheckConfig:
    def test_default_passes(self, game_config):
        assert check_config(game_config).valid

    def test_raises_with_violations(self):
        config = GameConfig(level=LevelConfig(speed=-1.0, lane_heights=()))
        with pytest.raises(ConfigError) as excinfo:
            check_config(config)
        params = {v.param for v in excinfo.value.violations}
        assert params == {"speed", "lane_heights"}

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            check_config(GameConfig(player=PlayerConfig(height=-5.0)))

    def test_warnings_do_not_raise(self):
        result = check_config(GameConfig(catalog=()))
        assert result.valid
        assert result.warnings
