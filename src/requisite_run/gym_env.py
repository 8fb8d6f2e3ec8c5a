"""Gymnasium environment wrapper for the requisites run.

Provides the standard Gym API so the simulator can be driven by scripted
policies, RL agents and the trajectory collector. There is no pixel
observation; the environment exposes a structured state vector only.
"""

from typing import Optional, Dict, Any, List

import numpy as np
import gymnasium
from gymnasium import spaces

from .config import GameConfig
from .simulator import RunState, Outcome, EventType, create_run, request_jump, tick


# State vector layout
STATE_SIZE = 12
IDX_X, IDX_Y, IDX_VY = 0, 1, 2
IDX_GROUNDED = 3
IDX_DOUBLE_JUMP = 4
IDX_OBSTACLE_DIST = 5
IDX_ITEM_DIST = 6
IDX_ITEM_LANE = 7
IDX_GATE_DIST = 8
IDX_COLLECTED = 9
IDX_PROGRESS = 10
IDX_OUTCOME = 11


class RunnerEnv(gymnasium.Env):
    """Gymnasium wrapper for the run simulator.

    Observation space: float32 Box of shape (12,):
        [0-2] runner x, y, vertical velocity
        [3]   grounded (0/1)
        [4]   double jump available (0/1)
        [5]   distance from runner's front edge to the next obstacle ahead
              (viewport width if none)
        [6]   distance to the next uncollected item ahead (viewport width if none)
        [7]   that item's lane y (0 if none)
        [8]   distance from runner's front edge to the finish gate
        [9]   fraction of requisites collected
        [10]  episode progress (steps / max_steps)
        [11]  outcome (0 in progress, 1 victory, -1 defeat)

    Action space: Discrete(2), 1 requests a jump before the tick.

    Reward = weighted sum of raw signals (stored in info['reward_signals']):
        pickup:  number of items picked up this step
        victory: 1.0 on victory
        defeat:  1.0 on defeat
        step:    1.0 every step
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        max_episode_steps: int = 2000,
        reward_weights: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        self.config = config or GameConfig()
        self.max_episode_steps = max_episode_steps
        self.reward_weights = reward_weights or {
            "pickup": 1.0,
            "victory": 10.0,
            "defeat": -10.0,
            "step": 0.0,
        }

        self.action_space = spaces.Discrete(2)
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(STATE_SIZE,), dtype=np.float32,
        )

        self._run: Optional[RunState] = None
        self._episode_steps = 0
        self._level_seed: int = 0

    @property
    def run(self) -> Optional[RunState]:
        return self._run

    def reset(self, *, seed=None, options=None):
        super().reset(seed=seed)

        self._level_seed = int(self.np_random.integers(0, 2**31))
        self._run = create_run(self.config, seed=self._level_seed)
        self._episode_steps = 0

        return self._get_obs(), self._get_info([])

    def step(self, action):
        assert self._run is not None, "Must call reset() before step()"

        if isinstance(action, np.ndarray):
            action = action.item()
        if int(action) == 1:
            request_jump(self._run)

        seen = len(self._run.events)
        tick(self._run)
        self._episode_steps += 1
        new_events = self._run.events[seen:]

        reward_signals = self._compute_rewards(new_events)
        reward = sum(
            self.reward_weights.get(k, 0.0) * v
            for k, v in reward_signals.items()
        )

        terminated = self._run.ended
        truncated = self._episode_steps >= self.max_episode_steps

        info = self._get_info(new_events)
        info["reward_signals"] = reward_signals
        return self._get_obs(), float(reward), terminated, truncated, info

    def _compute_rewards(self, events) -> Dict[str, float]:
        return {
            "pickup": float(sum(1 for e in events if e.type == EventType.PICKUP)),
            "victory": float(any(e.type == EventType.VICTORY for e in events)),
            "defeat": float(any(e.type == EventType.DEFEAT for e in events)),
            "step": 1.0,
        }

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    def _get_obs(self) -> np.ndarray:
        state = np.zeros(STATE_SIZE, dtype=np.float32)
        run = self._run
        if run is None:
            return state

        player = run.player
        front = player.x + player.width
        horizon = run.config.level.viewport_width

        state[IDX_X] = player.x
        state[IDX_Y] = player.y
        state[IDX_VY] = player.vy
        state[IDX_GROUNDED] = float(player.is_grounded)
        state[IDX_DOUBLE_JUMP] = float(player.double_jump_available)

        ahead = [o for o in run.obstacles if o.x + o.size > player.x]
        state[IDX_OBSTACLE_DIST] = min((o.x - front for o in ahead), default=horizon)

        items = [c for c in run.remaining if c.x + c.size > player.x]
        if items:
            nearest = min(items, key=lambda c: c.x)
            state[IDX_ITEM_DIST] = nearest.x - front
            state[IDX_ITEM_LANE] = nearest.y
        else:
            state[IDX_ITEM_DIST] = horizon

        state[IDX_GATE_DIST] = run.gate.x - front
        total = len(run.collectibles)
        state[IDX_COLLECTED] = run.total_collected / total if total else 1.0
        state[IDX_PROGRESS] = self._episode_steps / max(self.max_episode_steps, 1)

        if run.outcome == Outcome.VICTORY:
            state[IDX_OUTCOME] = 1.0
        elif run.outcome == Outcome.DEFEAT:
            state[IDX_OUTCOME] = -1.0

        return state

    def _get_info(self, events: List) -> Dict[str, Any]:
        run = self._run
        info = {
            "episode_steps": self._episode_steps,
            "level_seed": self._level_seed,
            "events": [e.to_dict() for e in events],
        }
        if run is not None:
            info["outcome"] = run.outcome.value
            info["defeat_reason"] = run.defeat_reason.value if run.defeat_reason else None
            info["total_collected"] = run.total_collected
            info["total_required"] = len(run.collectibles)
            info["player_position"] = (run.player.x, run.player.y)
        return info

    def close(self):
        self._run = None
