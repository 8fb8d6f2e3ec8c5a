"""Configuration constraints for a run.

A "valid" config is one the simulator can run without degenerate geometry:
positive speed and sizes, a gate ahead of the runner, banded obstacles that
do not overlap, a usable lane set and unique catalog keys. Warnings flag
configs that run fine but may be unwinnable or odd (an empty catalog,
obstacles too tall to clear).
"""

from dataclasses import dataclass
from typing import List

from .config import GameConfig, PlayerConfig, LevelConfig
from .physics import LANDING_SLACK
from .calibration import calibrate


class ConfigError(ValueError):
    """Raised when a run is created from a config with error-level violations."""

    def __init__(self, violations: List["ConstraintViolation"]):
        self.violations = violations
        details = "; ".join(f"{v.param}: {v.message}" for v in violations)
        super().__init__(f"Invalid run configuration: {details}")


@dataclass
class ConstraintViolation:
    """Describes a constraint violation."""
    param: str
    message: str
    severity: str  # "error" = cannot run, "warning" = runs but suspicious


@dataclass
class ConstraintResult:
    """Result of constraint validation."""
    valid: bool
    violations: List[ConstraintViolation]

    def __bool__(self) -> bool:
        return self.valid

    @property
    def errors(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "warning"]


def _result(violations: List[ConstraintViolation]) -> ConstraintResult:
    errors = [v for v in violations if v.severity == "error"]
    return ConstraintResult(valid=len(errors) == 0, violations=violations)


class RunConstraints:
    """Checks a GameConfig before a run is built from it."""

    @classmethod
    def validate_player(cls, player: PlayerConfig) -> ConstraintResult:
        """Validate runner body and jump attributes."""
        violations = []

        for name in ("width", "height"):
            value = getattr(player, name)
            if value <= 0:
                violations.append(ConstraintViolation(
                    name, f"Runner {name} {value} must be positive", "error"
                ))

        if player.gravity <= 0:
            violations.append(ConstraintViolation(
                "gravity", f"Gravity {player.gravity} must be positive (y grows downward)", "error"
            ))

        if player.jump_velocity >= 0:
            violations.append(ConstraintViolation(
                "jump_velocity", f"Jump velocity {player.jump_velocity} must be negative (upward)", "error"
            ))

        if player.double_jump_velocity >= 0:
            violations.append(ConstraintViolation(
                "double_jump_velocity",
                f"Double jump velocity {player.double_jump_velocity} must be negative (upward)",
                "error"
            ))

        if player.double_jump_window_ms < 0:
            violations.append(ConstraintViolation(
                "double_jump_window_ms",
                f"Double jump window {player.double_jump_window_ms} must not be negative",
                "error"
            ))

        return _result(violations)

    @classmethod
    def validate_level(cls, level: LevelConfig, player: PlayerConfig) -> ConstraintResult:
        """Validate level pacing and placement rules against the runner."""
        violations = []

        if level.speed <= 0:
            violations.append(ConstraintViolation(
                "speed", f"Scroll speed {level.speed} must be positive", "error"
            ))

        if level.frame_ms <= 0:
            violations.append(ConstraintViolation(
                "frame_ms", f"Frame duration {level.frame_ms} must be positive", "error"
            ))

        for name in ("viewport_width", "viewport_height", "obstacle_size", "collectible_size", "gate_size"):
            value = getattr(level, name)
            if value <= 0:
                violations.append(ConstraintViolation(
                    name, f"{name} {value} must be positive", "error"
                ))

        if level.obstacle_count < 0:
            violations.append(ConstraintViolation(
                "obstacle_count", f"Obstacle count {level.obstacle_count} must not be negative", "error"
            ))

        if level.obstacle_count > 1 and level.obstacle_spacing < level.obstacle_size + level.obstacle_jitter:
            violations.append(ConstraintViolation(
                "obstacle_spacing",
                f"Spacing {level.obstacle_spacing} < size + jitter "
                f"{level.obstacle_size + level.obstacle_jitter}; obstacles may overlap",
                "error"
            ))

        if level.max_placement_attempts < 1:
            violations.append(ConstraintViolation(
                "max_placement_attempts",
                f"Placement attempts {level.max_placement_attempts} must be at least 1",
                "error"
            ))

        if not level.lane_heights:
            violations.append(ConstraintViolation(
                "lane_heights", "At least one lane height is required", "error"
            ))

        runner_front = player.start_x + player.width
        if level.map_length <= runner_front:
            violations.append(ConstraintViolation(
                "map_length",
                f"Gate start {level.map_length} is not ahead of the runner's front edge {runner_front}",
                "error"
            ))

        if player.start_x <= level.pursuer_x:
            violations.append(ConstraintViolation(
                "start_x",
                f"Runner starts at {player.start_x}, already within the pursuer line {level.pursuer_x}",
                "error"
            ))

        return _result(violations)

    @classmethod
    def validate_catalog(cls, config: GameConfig) -> ConstraintResult:
        violations = []

        if not config.catalog:
            violations.append(ConstraintViolation(
                "catalog", "Empty catalog; the gate is a win as soon as it is reached", "warning"
            ))

        keys = [item.key for item in config.catalog]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            violations.append(ConstraintViolation(
                "catalog", f"Duplicate catalog keys: {', '.join(duplicates)}", "error"
            ))

        return _result(violations)

    @classmethod
    def validate_reachability(cls, config: GameConfig) -> ConstraintResult:
        """Warn when obstacle tops are out of reach even with a double jump.

        Only meaningful once the player and level pass their own checks.
        """
        violations = []
        if config.level.obstacle_count == 0:
            return _result(violations)

        profile = calibrate(config.player, frame_ms=config.level.frame_ms, speed=config.level.speed)
        # Feet must rise to within the landing band of an obstacle top
        needed = config.floor_y - (config.ground_y + LANDING_SLACK)
        if profile.double_apex < needed:
            violations.append(ConstraintViolation(
                "obstacle_size",
                f"Best jump apex {profile.double_apex:.0f} cannot reach obstacle tops ({needed:.0f})",
                "warning"
            ))
        elif profile.single_apex < needed:
            violations.append(ConstraintViolation(
                "obstacle_size",
                f"Obstacle tops ({needed:.0f}) need a double jump (single apex {profile.single_apex:.0f})",
                "warning"
            ))

        return _result(violations)

    @classmethod
    def validate_config(cls, config: GameConfig) -> ConstraintResult:
        """Validate full run config."""
        all_violations = []

        player_result = cls.validate_player(config.player)
        all_violations.extend(player_result.violations)

        level_result = cls.validate_level(config.level, config.player)
        all_violations.extend(level_result.violations)

        catalog_result = cls.validate_catalog(config)
        all_violations.extend(catalog_result.violations)

        if player_result.valid and level_result.valid:
            all_violations.extend(cls.validate_reachability(config).violations)

        return _result(all_violations)


def check_config(config: GameConfig) -> ConstraintResult:
    """Validate ``config`` and raise ConfigError if it has errors.

    Returns:
        The full result, so callers can inspect warnings.
    """
    result = RunConstraints.validate_config(config)
    if not result.valid:
        raise ConfigError(result.errors)
    return result
