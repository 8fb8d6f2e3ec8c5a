"""Configuration system for the requisites run.

PlayerConfig holds the runner's body size and jump attributes. LevelConfig
holds the scrolling level: viewport, speed, obstacle bands, collectible bands
and lanes, the finish gate and the pursuer line. The collectible catalog is a
plain ordered list of CatalogItem entries.

All distances are canvas units with y growing downward; time is in
milliseconds and velocities are per tick.
"""

from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, ClassVar
import random


@dataclass(frozen=True)
class CatalogItem:
    """One required item the runner has to pick up."""
    key: str
    label: str


# Documents requested for a job application in the sample domain.
DEFAULT_CATALOG: Tuple[CatalogItem, ...] = (
    CatalogItem("dpi", "ID card (original and copy)"),
    CatalogItem("dpi_beneficiario", "Photocopy of the beneficiary's ID card."),
    CatalogItem("ornato", "Municipal ornato ticket."),
    CatalogItem("penales", "Criminal record certificate (current)"),
    CatalogItem("policiacos", "Police record certificate (current)."),
    CatalogItem("pulmones", "Lung health card."),
    CatalogItem("hematologia", "Complete blood count exam."),
    CatalogItem("examen_orina", "Stool and urine exam."),
    CatalogItem("toxicologico", "Toxicology exam."),
    CatalogItem("nit", "Tax ID number (NIT)."),
    CatalogItem("embarazo", "Pregnancy test for female staff."),
)


@dataclass
class PlayerConfig:
    """Runner attributes that parameterize the jump state machine."""

    # Body (collision box)
    width: float = 100.0
    height: float = 100.0
    start_x: float = 400.0

    # Vertical motion, in units per tick
    jump_velocity: float = -13.0  # Initial upward velocity of a ground jump
    double_jump_velocity: float = -16.0  # Velocity set by the mid-air jump
    gravity: float = 1.0  # Added to vertical velocity every airborne tick

    # Double jump
    double_jump_boost: float = 30.0  # Forward nudge applied with the mid-air jump
    double_jump_window_ms: float = 300.0  # Mid-air jump must follow the ground jump within this

    # Distance between the floor line and the bottom of the viewport
    floor_margin: float = 30.0

    JUMP_VELOCITY_RANGE: ClassVar[Tuple[float, float]] = (-16.0, -10.0)
    DOUBLE_JUMP_VELOCITY_RANGE: ClassVar[Tuple[float, float]] = (-19.0, -13.0)
    DOUBLE_JUMP_WINDOW_RANGE: ClassVar[Tuple[float, float]] = (200.0, 450.0)

    @classmethod
    def sample(cls) -> "PlayerConfig":
        """Sample jump attributes, keeping the body at its default size."""
        return cls(
            jump_velocity=random.uniform(*cls.JUMP_VELOCITY_RANGE),
            double_jump_velocity=random.uniform(*cls.DOUBLE_JUMP_VELOCITY_RANGE),
            double_jump_window_ms=random.uniform(*cls.DOUBLE_JUMP_WINDOW_RANGE),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "width": self.width,
            "height": self.height,
            "start_x": self.start_x,
            "jump_velocity": self.jump_velocity,
            "double_jump_velocity": self.double_jump_velocity,
            "gravity": self.gravity,
            "double_jump_boost": self.double_jump_boost,
            "double_jump_window_ms": self.double_jump_window_ms,
            "floor_margin": self.floor_margin,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> "PlayerConfig":
        """Create from dictionary, falling back to defaults for missing keys."""
        defaults = cls()
        return cls(**{k: d.get(k, v) for k, v in defaults.to_dict().items()})


@dataclass
class LevelConfig:
    """Scrolling level layout and pacing.

    Obstacles and collectibles are placed in bands: item ``i`` lands at
    ``first_x + i * spacing + U[0, jitter)``. Collectibles are re-rolled while
    closer than ``collectible_clearance`` to an obstacle, up to
    ``max_placement_attempts`` tries.
    """
    viewport_width: float = 1000.0
    viewport_height: float = 500.0
    speed: float = 4.0  # Scenery scroll per tick
    frame_ms: float = 1000.0 / 60.0  # Default tick duration for the simulation clock

    map_length: float = 6600.0  # Starting x of the finish gate

    # Obstacles
    obstacle_count: int = 8
    obstacle_first_x: float = 800.0
    obstacle_spacing: float = 600.0
    obstacle_jitter: float = 400.0
    obstacle_size: float = 140.0

    # Collectibles
    collectible_first_x: float = 700.0
    collectible_spacing: float = 500.0
    collectible_jitter: float = 300.0
    collectible_size: float = 90.0
    collectible_clearance: float = 100.0
    max_placement_attempts: int = 10
    lane_heights: Tuple[float, ...] = (350.0, 250.0, 200.0)

    # Finish gate
    gate_size: float = 130.0
    gate_offset: float = 150.0  # Gate top sits this far above the viewport bottom

    # The pursuer catches the runner at or left of this x
    pursuer_x: float = 10.0

    SPEED_RANGE: ClassVar[Tuple[float, float]] = (3.0, 7.0)
    OBSTACLE_COUNT_RANGE: ClassVar[Tuple[int, int]] = (4, 10)
    MAP_LENGTH_RANGE: ClassVar[Tuple[float, float]] = (4000.0, 8000.0)

    @classmethod
    def sample(cls) -> "LevelConfig":
        """Sample pacing and obstacle density."""
        return cls(
            speed=random.uniform(*cls.SPEED_RANGE),
            obstacle_count=random.randint(*cls.OBSTACLE_COUNT_RANGE),
            map_length=random.uniform(*cls.MAP_LENGTH_RANGE),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "viewport_width": self.viewport_width,
            "viewport_height": self.viewport_height,
            "speed": self.speed,
            "frame_ms": self.frame_ms,
            "map_length": self.map_length,
            "obstacle_count": self.obstacle_count,
            "obstacle_first_x": self.obstacle_first_x,
            "obstacle_spacing": self.obstacle_spacing,
            "obstacle_jitter": self.obstacle_jitter,
            "obstacle_size": self.obstacle_size,
            "collectible_first_x": self.collectible_first_x,
            "collectible_spacing": self.collectible_spacing,
            "collectible_jitter": self.collectible_jitter,
            "collectible_size": self.collectible_size,
            "collectible_clearance": self.collectible_clearance,
            "max_placement_attempts": self.max_placement_attempts,
            "lane_heights": list(self.lane_heights),
            "gate_size": self.gate_size,
            "gate_offset": self.gate_offset,
            "pursuer_x": self.pursuer_x,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LevelConfig":
        defaults = cls().to_dict()
        values = {k: d.get(k, v) for k, v in defaults.items()}
        values["lane_heights"] = tuple(values["lane_heights"])
        return cls(**values)


@dataclass
class GameConfig:
    """Complete run configuration combining all parameter groups."""
    player: PlayerConfig = field(default_factory=PlayerConfig)
    level: LevelConfig = field(default_factory=LevelConfig)
    catalog: Tuple[CatalogItem, ...] = DEFAULT_CATALOG

    @property
    def floor_y(self) -> float:
        """Line the runner's feet rest on when not standing on an obstacle."""
        return self.level.viewport_height - self.player.floor_margin

    @property
    def ground_y(self) -> float:
        """Runner's y when standing on the floor line (the ground baseline)."""
        return self.floor_y - self.player.height

    @classmethod
    def sample_full(cls) -> "GameConfig":
        """Sample player and level parameters, keeping the default catalog."""
        return cls(player=PlayerConfig.sample(), level=LevelConfig.sample())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        return {
            "player": self.player.to_dict(),
            "level": self.level.to_dict(),
            "catalog": [[item.key, item.label] for item in self.catalog],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameConfig":
        catalog = DEFAULT_CATALOG
        if "catalog" in d:
            catalog = tuple(CatalogItem(key, label) for key, label in d["catalog"])
        return cls(
            player=PlayerConfig.from_dict(d.get("player", {})),
            level=LevelConfig.from_dict(d.get("level", {})),
            catalog=catalog,
        )


# Predefined configurations for testing/demo
CONFIGS = {
    # Browser game defaults
    "default": GameConfig(),

    # Short level with only a few requisites, for quick checks
    "sprint": GameConfig(
        level=LevelConfig(map_length=2600.0, obstacle_count=3),
        catalog=DEFAULT_CATALOG[:4],
    ),

    # Faster scroll, tighter double-jump window
    "rush": GameConfig(
        player=PlayerConfig(double_jump_window_ms=220.0),
        level=LevelConfig(speed=6.0),
    ),

    # Empty track: no obstacles, nothing to collect
    "open_road": GameConfig(
        level=LevelConfig(obstacle_count=0, map_length=1500.0),
        catalog=(),
    ),
}
