"""Input traces: record a run's inputs and replay them deterministically.

A run is fully determined by its config, its layout seed, the tick
durations and the jump requests (with the tick they were queued before and
their timestamps). InputTrace stores exactly that, as JSON.

Usage:
    recorder = TraceRecorder(create_run(config, seed=7))
    recorder.request_jump()
    recorder.tick()
    ...
    recorder.trace.save("runs/trace.json")

    final = replay(InputTrace.load("runs/trace.json"))
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Optional, Dict, Any

from .config import GameConfig
from .simulator import RunState, OutcomeEvent, create_run, request_jump, tick


@dataclass
class InputTrace:
    """Everything needed to reproduce a run."""
    config: GameConfig
    seed: int
    jumps: List[Tuple[int, float]] = field(default_factory=list)  # (tick index, at_ms)
    tick_durations: List[float] = field(default_factory=list)

    @property
    def tick_count(self) -> int:
        return len(self.tick_durations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "seed": self.seed,
            "jumps": [list(j) for j in self.jumps],
            "tick_durations": list(self.tick_durations),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InputTrace":
        return cls(
            config=GameConfig.from_dict(d["config"]),
            seed=int(d["seed"]),
            jumps=[(int(t), float(ms)) for t, ms in d.get("jumps", [])],
            tick_durations=[float(dt) for dt in d.get("tick_durations", [])],
        )

    def save(self, path: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path

    @classmethod
    def load(cls, path: str) -> "InputTrace":
        with open(path) as f:
            return cls.from_dict(json.load(f))


class TraceRecorder:
    """Drives a run and records its inputs as it goes."""

    def __init__(self, run: RunState):
        if run.seed is None:
            raise ValueError("Only runs created from a seed can be recorded")
        self.run = run
        self.trace = InputTrace(config=run.config, seed=run.seed)

    def request_jump(self, at_ms: Optional[float] = None) -> None:
        if self.run.ended:
            return
        at_ms = self.run.clock_ms if at_ms is None else at_ms
        self.trace.jumps.append((self.run.tick_count, at_ms))
        request_jump(self.run, at_ms)

    def tick(self, dt_ms: Optional[float] = None) -> Optional[OutcomeEvent]:
        if self.run.ended:
            return None
        dt_ms = self.run.config.level.frame_ms if dt_ms is None else dt_ms
        self.trace.tick_durations.append(dt_ms)
        _, event = tick(self.run, dt_ms)
        return event


def replay(trace: InputTrace) -> RunState:
    """Rebuild a run from its trace and play every recorded tick."""
    run = create_run(trace.config, seed=trace.seed)

    pending = sorted(trace.jumps, key=lambda j: j[0])
    cursor = 0
    for index, dt_ms in enumerate(trace.tick_durations):
        while cursor < len(pending) and pending[cursor][0] == index:
            request_jump(run, pending[cursor][1])
            cursor += 1
        tick(run, dt_ms)

    return run
