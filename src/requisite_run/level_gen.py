"""Seedable layout generation for a run.

Obstacles are dropped into evenly spaced bands with a random offset inside
each band, so with ``spacing >= size + jitter`` they never overlap.
Collectibles follow the same banded rule, one band per catalog item, with
rejection sampling: a candidate x closer than ``collectible_clearance`` to any
obstacle is re-rolled, up to ``max_placement_attempts`` draws in total. If
every draw is rejected the last one is kept. Each collectible then picks a
lane height.

All randomness comes from a ``random.Random`` owned by the generator call,
so the same seed always yields the same layout and runs never share state.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Tuple, Optional

import pymunk

from .config import GameConfig
from .entities import Obstacle, Collectible, FinishGate
from .physics import box

logger = logging.getLogger(__name__)


@dataclass
class LevelLayout:
    """Starting positions for everything that scrolls."""
    obstacles: List[Tuple[float, float]]  # (x, y) top-left
    collectibles: List[Tuple[str, float, float]]  # (catalog key, x, y) top-left
    gate: Tuple[float, float]  # (x, y) top-left
    seed: Optional[int] = None

    # Metadata for analysis
    placement_attempts: List[int] = field(default_factory=list)  # draws used per collectible
    crowded_collectibles: int = 0  # placements that exhausted every attempt

    def extent(self, config: GameConfig) -> pymunk.BB:
        """Bounding box of every placed entity at run start."""
        level = config.level
        bb = box(self.gate[0], self.gate[1], level.gate_size, level.gate_size)
        for x, y in self.obstacles:
            bb = bb.merge(box(x, y, level.obstacle_size, level.obstacle_size))
        for _, x, y in self.collectibles:
            bb = bb.merge(box(x, y, level.collectible_size, level.collectible_size))
        return bb

    def to_dict(self):
        return {
            "obstacles": [list(o) for o in self.obstacles],
            "collectibles": [list(c) for c in self.collectibles],
            "gate": list(self.gate),
            "seed": self.seed,
            "placement_attempts": list(self.placement_attempts),
            "crowded_collectibles": self.crowded_collectibles,
        }


class LayoutGenerator:
    """Generates obstacle and collectible layouts for a GameConfig."""

    def __init__(self, config: GameConfig):
        self.config = config

    @classmethod
    def from_config(cls, config: GameConfig) -> "LayoutGenerator":
        return cls(config)

    def generate(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> LevelLayout:
        """Generate a layout.

        Args:
            seed: Seed for a fresh random source. Ignored if ``rng`` is given.
            rng: Random source to draw from, for callers that manage their own.

        Returns:
            LevelLayout with obstacle, collectible and gate positions.
        """
        if rng is None:
            rng = random.Random(seed)

        # Obstacles are drawn before collectibles; the order is part of what
        # makes a seed reproducible.
        obstacles = self._place_obstacles(rng)
        collectibles, attempts = self._place_collectibles(rng, [x for x, _ in obstacles])

        level = self.config.level
        gate = (level.map_length, level.viewport_height - level.gate_offset)

        crowded = sum(1 for a in attempts if a >= level.max_placement_attempts)
        if crowded:
            logger.debug("%d collectible(s) kept a placement near an obstacle", crowded)

        return LevelLayout(
            obstacles=obstacles,
            collectibles=collectibles,
            gate=gate,
            seed=seed,
            placement_attempts=attempts,
            crowded_collectibles=crowded,
        )

    def _place_obstacles(self, rng: random.Random) -> List[Tuple[float, float]]:
        level = self.config.level
        # Obstacle tops line up with the top of a runner standing on the floor
        y = self.config.ground_y
        return [
            (level.obstacle_first_x + i * level.obstacle_spacing + rng.random() * level.obstacle_jitter, y)
            for i in range(level.obstacle_count)
        ]

    def _place_collectibles(
        self,
        rng: random.Random,
        obstacle_xs: List[float],
    ) -> Tuple[List[Tuple[str, float, float]], List[int]]:
        level = self.config.level
        placed = []
        attempts_used = []

        for i, item in enumerate(self.config.catalog):
            attempts = 0
            while True:
                x = level.collectible_first_x + i * level.collectible_spacing + rng.random() * level.collectible_jitter
                attempts += 1
                too_close = any(abs(ox - x) < level.collectible_clearance for ox in obstacle_xs)
                if not too_close or attempts >= level.max_placement_attempts:
                    break

            y = rng.choice(level.lane_heights)
            placed.append((item.key, x, y))
            attempts_used.append(attempts)

        return placed, attempts_used


def build_entities(
    config: GameConfig,
    layout: LevelLayout,
) -> Tuple[List[Obstacle], List[Collectible], FinishGate]:
    """Instantiate entities from a layout.

    Collectible labels come from the catalog, matched by key.

    Returns:
        (obstacles, collectibles, gate)
    """
    level = config.level
    labels = {item.key: item.label for item in config.catalog}

    obstacles = [Obstacle(x, y, level.obstacle_size) for x, y in layout.obstacles]
    collectibles = []
    for key, x, y in layout.collectibles:
        if key not in labels:
            raise ValueError(f"Layout collectible {key!r} is not in the catalog")
        collectibles.append(Collectible(key, labels[key], x, y, level.collectible_size))
    gate = FinishGate(layout.gate[0], layout.gate[1], level.gate_size)

    return obstacles, collectibles, gate
