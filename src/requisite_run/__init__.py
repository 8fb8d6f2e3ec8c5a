"""requisite-run: headless simulation of the requisites side-scroller.

A runner is chased from the left by a thief while scenery scrolls past:
obstacles must be cleared with a single or timed double jump, every required
document must be picked up, and the finish gate ends the run. The simulation
is deterministic per seed and draws nothing; drivers feed jump requests and
ticks and read back state and outcome events. A Gymnasium environment,
scripted policies and a trajectory collector are included for automated play.
"""

from .config import PlayerConfig, LevelConfig, GameConfig, CatalogItem, DEFAULT_CATALOG, CONFIGS
from .entities import Player, Obstacle, Collectible, FinishGate, Notice, MotionState, JumpKind
from .level_gen import LayoutGenerator, LevelLayout, build_entities
from .constraints import RunConstraints, ConfigError, ConstraintResult, ConstraintViolation, check_config
from .calibration import JumpProfile, calibrate
from .simulator import (
    RunState,
    Outcome,
    DefeatReason,
    EventType,
    OutcomeEvent,
    create_run,
    request_jump,
    tick,
    reset_run,
)
from .replay import InputTrace, TraceRecorder, replay

__all__ = [
    "PlayerConfig",
    "LevelConfig",
    "GameConfig",
    "CatalogItem",
    "DEFAULT_CATALOG",
    "CONFIGS",
    "Player",
    "Obstacle",
    "Collectible",
    "FinishGate",
    "Notice",
    "MotionState",
    "JumpKind",
    "LayoutGenerator",
    "LevelLayout",
    "build_entities",
    "RunConstraints",
    "ConfigError",
    "ConstraintResult",
    "ConstraintViolation",
    "check_config",
    "JumpProfile",
    "calibrate",
    "RunState",
    "Outcome",
    "DefeatReason",
    "EventType",
    "OutcomeEvent",
    "create_run",
    "request_jump",
    "tick",
    "reset_run",
    "InputTrace",
    "TraceRecorder",
    "replay",
]
