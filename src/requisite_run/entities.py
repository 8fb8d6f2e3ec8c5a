"""Game entities: runner, obstacles, collectibles, finish gate, notices.

Entities are plain state holders with box accessors. They know how to move
themselves; the order in which they are moved and tested lives in
simulator.py.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pymunk

from .config import PlayerConfig
from .physics import box


class MotionState(Enum):
    """Vertical motion state of the runner."""
    GROUNDED = "grounded"
    RISING = "rising"  # Airborne after a jump, until landing
    FALLING = "falling"  # Airborne without a jump, e.g. walked off a ledge


class JumpKind(Enum):
    SINGLE = "single"
    DOUBLE = "double"


class Player:
    """The runner.

    Horizontal position only changes through the double-jump boost and
    through obstacles pushing the runner back; forward progress is expressed
    by the scenery scrolling left.
    """

    def __init__(self, config: PlayerConfig, ground_y: float, speed: float):
        """Create runner standing on the ground at its start x.

        Args:
            config: Body and jump attributes.
            ground_y: Runner's y when standing on the floor line.
            speed: Horizontal running speed (the level's scroll speed).
        """
        self.config = config
        self.ground_y = ground_y
        self.speed = speed

        self.x = config.start_x
        self.y = ground_y
        self.vy = 0.0
        self.state = MotionState.GROUNDED
        self.double_jump_available = True
        self.last_jump_ms: Optional[float] = None

    @property
    def width(self) -> float:
        return self.config.width

    @property
    def height(self) -> float:
        return self.config.height

    @property
    def bb(self) -> pymunk.BB:
        return box(self.x, self.y, self.config.width, self.config.height)

    @property
    def feet(self) -> float:
        return self.y + self.config.height

    @property
    def is_grounded(self) -> bool:
        return self.state == MotionState.GROUNDED

    @property
    def is_airborne(self) -> bool:
        return self.state != MotionState.GROUNDED

    def jump(self, now_ms: float) -> Optional[JumpKind]:
        """Apply a jump request made at ``now_ms``.

        A grounded runner starts a jump. An airborne runner gets one extra
        impulse (plus a forward boost) if the request comes within the
        double-jump window of the ground jump. Anything else is ignored.

        Returns:
            The kind of jump performed, or None if the request was ignored.
        """
        if self.state == MotionState.GROUNDED:
            self.vy = self.config.jump_velocity
            self.state = MotionState.RISING
            self.double_jump_available = True
            self.last_jump_ms = now_ms
            return JumpKind.SINGLE

        if (
            self.double_jump_available
            and self.last_jump_ms is not None
            and now_ms - self.last_jump_ms < self.config.double_jump_window_ms
        ):
            self.vy = self.config.double_jump_velocity
            self.x += self.config.double_jump_boost
            self.double_jump_available = False
            return JumpKind.DOUBLE

        return None

    def integrate(self) -> bool:
        """Advance one airborne tick under gravity.

        Returns:
            True if the runner reached the ground baseline on this tick.
        """
        if self.state == MotionState.GROUNDED:
            return False

        self.y += self.vy
        self.vy += self.config.gravity

        if self.y >= self.ground_y:
            self.land_on(self.ground_y + self.config.height)
            return True
        return False

    def land_on(self, surface_top: float) -> None:
        """Stand on a surface whose top edge is at ``surface_top``."""
        self.y = surface_top - self.config.height
        self.vy = 0.0
        self.state = MotionState.GROUNDED
        self.double_jump_available = True

    def start_falling(self) -> None:
        """Lose support; gravity applies from the next tick."""
        if self.state == MotionState.GROUNDED:
            self.state = MotionState.FALLING

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "vy": self.vy,
            "speed": self.speed,
            "state": self.state.value,
            "double_jump_available": self.double_jump_available,
            "last_jump_ms": self.last_jump_ms,
        }


@dataclass
class Obstacle:
    """Square block the runner must jump onto or over."""
    x: float
    y: float
    size: float

    @property
    def bb(self) -> pymunk.BB:
        return box(self.x, self.y, self.size, self.size)

    def shift(self, dx: float) -> None:
        self.x += dx


@dataclass
class Collectible:
    """A requisite waiting to be picked up.

    Collected items keep scrolling with the scenery but are no longer tested.
    """
    key: str
    label: str
    x: float
    y: float
    size: float
    collected: bool = False

    @property
    def bb(self) -> pymunk.BB:
        return box(self.x, self.y, self.size, self.size)

    def shift(self, dx: float) -> None:
        self.x += dx


@dataclass
class FinishGate:
    """End-of-level trigger scrolling toward the runner."""
    x: float
    y: float
    size: float

    @property
    def bb(self) -> pymunk.BB:
        return box(self.x, self.y, self.size, self.size)

    def shift(self, dx: float) -> None:
        self.x += dx


@dataclass
class Notice:
    """Transient on-screen message with a tick countdown."""
    text: str
    ticks_left: int

    @property
    def active(self) -> bool:
        return self.ticks_left > 0

    def advance(self) -> None:
        if self.ticks_left > 0:
            self.ticks_left -= 1
