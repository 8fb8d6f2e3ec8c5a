"""Scripted policies for automated runs.

Each policy takes a RunnerEnv observation and returns an action
(0 = keep running, 1 = jump).
"""

import numpy as np
from typing import Optional

from .gym_env import IDX_GROUNDED, IDX_DOUBLE_JUMP, IDX_OBSTACLE_DIST


class BasePolicy:
    """Base class for scripted policies."""

    name: str = "base"

    def __call__(self, obs: np.ndarray) -> int:
        return self.act(obs)

    def act(self, obs: np.ndarray) -> int:
        raise NotImplementedError

    def reset(self):
        """Called at the start of each episode."""
        pass


class NeverJumpPolicy(BasePolicy):
    """Never jumps. Gets pushed back by the first obstacle."""

    name = "never_jump"

    def act(self, obs):
        return 0


class RandomPolicy(BasePolicy):
    """Jumps with a fixed probability each step.

    Broad state coverage, frequent captures.
    """

    name = "random"

    def __init__(self, rng: Optional[np.random.Generator] = None, jump_prob: float = 0.05):
        self.rng = rng or np.random.default_rng()
        self.jump_prob = jump_prob

    def act(self, obs):
        return int(self.rng.random() < self.jump_prob)


class HurdlePolicy(BasePolicy):
    """Jumps when an obstacle gets close, then double-jumps for extra height.

    Clears obstacles reliably; only picks up items that happen to lie on
    its path.
    """

    name = "hurdle"

    def __init__(self, trigger_distance: float = 80.0, double_jump_delay: int = 8):
        self.trigger_distance = trigger_distance
        self.double_jump_delay = double_jump_delay
        self._airborne_steps = 0

    def reset(self):
        self._airborne_steps = 0

    def act(self, obs):
        grounded = obs[IDX_GROUNDED] > 0.5
        double_available = obs[IDX_DOUBLE_JUMP] > 0.5
        distance = obs[IDX_OBSTACLE_DIST]

        if grounded:
            self._airborne_steps = 0
            return int(0.0 <= distance <= self.trigger_distance)

        self._airborne_steps += 1
        return int(double_available and self._airborne_steps == self.double_jump_delay)


POLICIES = {
    "never_jump": NeverJumpPolicy,
    "random": RandomPolicy,
    "hurdle": HurdlePolicy,
}
