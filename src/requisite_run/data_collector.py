"""Episode recording for RunnerEnv.

Each episode is buffered step by step and written to one .npz file:

    states          (T+1, 12) float32   observation before the first step and after every step
    actions         (T,)      int8      0 = keep running, 1 = jump
    rewards         (T,)      float32
    terminated      (T,)      bool
    truncated       (T,)      bool
    reward_<signal> (T,)      float32   one array per entry of info["reward_signals"]
    events_json     str                 every outcome event, tagged with its step index
    metadata_json   str                 caller metadata plus the reset() info
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

import numpy as np

logger = logging.getLogger(__name__)


def _json_default(obj: Any) -> Any:
    """Fallback encoder for numpy values that end up in info dicts."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Cannot encode {type(obj).__name__} as JSON")


@dataclass
class EpisodeBuffer:
    """Columns of one episode in progress."""
    states: List[np.ndarray] = field(default_factory=list)
    actions: List[int] = field(default_factory=list)
    rewards: List[float] = field(default_factory=list)
    terminated: List[bool] = field(default_factory=list)
    truncated: List[bool] = field(default_factory=list)
    signals: Dict[str, List[float]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def steps(self) -> int:
        return len(self.actions)

    def to_arrays(self) -> Dict[str, np.ndarray]:
        arrays = {
            "states": np.stack(self.states).astype(np.float32),
            "actions": np.asarray(self.actions, dtype=np.int8),
            "rewards": np.asarray(self.rewards, dtype=np.float32),
            "terminated": np.asarray(self.terminated, dtype=np.bool_),
            "truncated": np.asarray(self.truncated, dtype=np.bool_),
            "events_json": np.array(json.dumps(self.events, default=_json_default)),
        }
        for name, values in self.signals.items():
            arrays[f"reward_{name}"] = np.asarray(values, dtype=np.float32)
        if self.metadata:
            arrays["metadata_json"] = np.array(json.dumps(self.metadata, default=_json_default))
        return arrays


class TrajectoryCollector:
    """Buffers RunnerEnv episodes and saves each one as an .npz file.

    Usage:
        collector = TrajectoryCollector("data/collections/hurdle/trajectories")
        obs, info = env.reset(seed=0)
        collector.begin_episode(obs, info, metadata={"policy": policy.name})
        done = False
        while not done:
            action = policy(obs)
            obs, reward, terminated, truncated, info = env.step(action)
            collector.record_step(action, obs, reward, terminated, truncated, info)
            done = terminated or truncated
        path = collector.end_episode()

    Files are numbered ``episode_0000.npz`` onward; numbering picks up after
    the highest number already present in the directory.
    """

    def __init__(self, output_dir: str = "data/trajectories", compress: bool = True):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.compress = compress

        self._buffer: Optional[EpisodeBuffer] = None
        self._episode_count = self._next_episode_number()

    def _next_episode_number(self) -> int:
        highest = -1
        for path in self.output_dir.glob("episode_*.npz"):
            suffix = path.stem[len("episode_"):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return highest + 1

    def begin_episode(self, obs: np.ndarray, info: Dict[str, Any],
                      metadata: Optional[Dict[str, Any]] = None):
        """Start a new episode, discarding any unfinished one.

        Args:
            obs: Observation returned by env.reset().
            info: Info returned by env.reset(); stored as ``initial_info``.
            metadata: Extra fields for metadata_json (policy name, config name...).
        """
        if self._buffer is not None:
            logger.warning("Discarding unfinished episode with %d steps", self._buffer.steps)
        self._buffer = EpisodeBuffer(metadata={**(metadata or {}), "initial_info": info})
        self._buffer.states.append(np.asarray(obs, dtype=np.float32))

    def record_step(
        self,
        action,
        obs: np.ndarray,
        reward: float,
        terminated: bool,
        truncated: bool,
        info: Dict[str, Any],
    ):
        """Append one env.step() result. Ignored outside an episode."""
        buf = self._buffer
        if buf is None:
            return

        step = buf.steps
        buf.actions.append(int(np.asarray(action).item()))
        buf.states.append(np.asarray(obs, dtype=np.float32))
        buf.rewards.append(float(reward))
        buf.terminated.append(bool(terminated))
        buf.truncated.append(bool(truncated))
        for name, value in info.get("reward_signals", {}).items():
            buf.signals.setdefault(name, []).append(float(value))
        buf.events.extend({"step": step, **event} for event in info.get("events", []))

    def end_episode(self, filename: Optional[str] = None) -> Optional[Path]:
        """Write the current episode to disk.

        Args:
            filename: File name inside output_dir. Defaults to the next
                ``episode_NNNN.npz``.

        Returns:
            Path of the written file, or None if no episode was in progress.
        """
        buf = self._buffer
        if buf is None:
            return None
        self._buffer = None

        path = self.output_dir / (filename or f"episode_{self._episode_count:04d}.npz")
        save = np.savez_compressed if self.compress else np.savez
        save(path, **buf.to_arrays())

        self._episode_count += 1
        logger.debug("Wrote %s (%d steps, %d events)", path.name, buf.steps, len(buf.events))
        return path

    @property
    def episode_count(self) -> int:
        return self._episode_count

    @property
    def recording(self) -> bool:
        return self._buffer is not None
