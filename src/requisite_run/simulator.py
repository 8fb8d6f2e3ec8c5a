"""Run simulator: the per-tick update for one playthrough.

A RunState owns everything that changes during a run. It is created by
create_run(), fed input through request_jump(), advanced by tick() and
replaced by reset_run(). Nothing here draws, plays sound or reads a clock;
time only moves when the driver passes ``dt_ms`` into tick(), and jump
requests carry their own timestamps.

Tick order matters, later steps can override earlier position changes:

0. advance the clock and count down the current notice
1. apply queued jump requests
2. scroll the background
3. gravity for an airborne runner, landing on the floor line
4. move the finish gate; touching it ends the run
5. pick up touched collectibles, then scroll them
6. scroll obstacles; land on top of them or get pushed back by them
7. re-scan for support under the feet; start falling if there is none
8. the pursuer catches a runner pushed back to the left edge
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Dict, Any

from .config import GameConfig
from .constraints import check_config
from .entities import Player, Obstacle, Collectible, FinishGate, Notice, JumpKind
from .level_gen import LayoutGenerator, LevelLayout, build_entities
from .physics import overlaps, is_landing, is_blocking, is_supported_by, top_edge

logger = logging.getLogger(__name__)


# Ticks a pickup notice stays up
PICKUP_NOTICE_TICKS = 100

# Background moves at this fraction of the scenery speed
PARALLAX = 0.5

MESSAGE_VICTORY = "All requisites collected!"
MESSAGE_INCOMPLETE = "You are missing requisites. Try again."
MESSAGE_CAUGHT = "You were caught by the thief!"


class Outcome(Enum):
    IN_PROGRESS = "in-progress"
    VICTORY = "victory"
    DEFEAT = "defeat"


class DefeatReason(Enum):
    CAUGHT_BY_PURSUER = "caught-by-pursuer"
    INCOMPLETE_AT_GATE = "incomplete-at-gate"


class EventType(Enum):
    PICKUP = "pickup"
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass
class OutcomeEvent:
    """Something the surrounding application should know about."""
    type: EventType
    tick: int
    item_key: Optional[str] = None
    item_label: Optional[str] = None
    defeat_reason: Optional[DefeatReason] = None
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.type != EventType.PICKUP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "tick": self.tick,
            "item_key": self.item_key,
            "item_label": self.item_label,
            "defeat_reason": self.defeat_reason.value if self.defeat_reason else None,
            "message": self.message,
        }


@dataclass
class RunState:
    """All mutable state of one playthrough."""
    config: GameConfig
    player: Player
    obstacles: List[Obstacle]
    collectibles: List[Collectible]
    gate: FinishGate
    seed: Optional[int] = None

    scroll_offset: float = 0.0
    outcome: Outcome = Outcome.IN_PROGRESS
    defeat_reason: Optional[DefeatReason] = None
    total_collected: int = 0

    tick_count: int = 0
    clock_ms: float = 0.0
    pending_jumps: List[float] = field(default_factory=list)  # request timestamps (ms)
    notice: Optional[Notice] = None
    events: List[OutcomeEvent] = field(default_factory=list)

    # Input statistics
    jumps: int = 0
    double_jumps: int = 0
    ignored_jumps: int = 0

    @property
    def ended(self) -> bool:
        return self.outcome != Outcome.IN_PROGRESS

    @property
    def remaining(self) -> List[Collectible]:
        """Collectibles not picked up yet, in catalog order."""
        return [c for c in self.collectibles if not c.collected]

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the run for drivers and logging."""
        return {
            "tick": self.tick_count,
            "clock_ms": self.clock_ms,
            "seed": self.seed,
            "outcome": self.outcome.value,
            "defeat_reason": self.defeat_reason.value if self.defeat_reason else None,
            "total_collected": self.total_collected,
            "total_required": len(self.collectibles),
            "scroll_offset": self.scroll_offset,
            "player": self.player.to_dict(),
            "obstacles": [(o.x, o.y) for o in self.obstacles],
            "collectibles": [(c.key, c.x, c.y, c.collected) for c in self.collectibles],
            "gate": (self.gate.x, self.gate.y),
            "notice": self.notice.text if self.notice else None,
        }


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------

def create_run(
    config: Optional[GameConfig] = None,
    seed: Optional[int] = None,
    layout: Optional[LevelLayout] = None,
) -> RunState:
    """Create a fresh run.

    Args:
        config: Run configuration. Uses defaults if None.
        seed: Seed for obstacle and collectible placement. A random seed is
            drawn if None. Ignored when ``layout`` is given.
        layout: Pre-built layout to start from instead of generating one.

    Raises:
        ConfigError: If the configuration has error-level violations.
    """
    config = config or GameConfig()
    result = check_config(config)
    for warning in result.warnings:
        logger.warning("%s: %s", warning.param, warning.message)

    if layout is None:
        if seed is None:
            seed = random.randrange(2**31)
        layout = LayoutGenerator(config).generate(seed=seed)

    obstacles, collectibles, gate = build_entities(config, layout)
    player = Player(config.player, ground_y=config.ground_y, speed=config.level.speed)

    logger.debug(
        "Created run seed=%s obstacles=%d collectibles=%d gate_x=%.0f",
        layout.seed, len(obstacles), len(collectibles), gate.x,
    )
    return RunState(
        config=config,
        player=player,
        obstacles=obstacles,
        collectibles=collectibles,
        gate=gate,
        seed=layout.seed,
    )


def reset_run(run: RunState, seed: Optional[int] = None) -> RunState:
    """Start over with the same configuration and a freshly seeded layout."""
    return create_run(run.config, seed=seed)


def request_jump(run: RunState, at_ms: Optional[float] = None) -> None:
    """Queue a jump request for the next tick.

    Args:
        run: The run to control.
        at_ms: When the request was made. Defaults to the run's clock.
    """
    if run.ended:
        return
    run.pending_jumps.append(run.clock_ms if at_ms is None else at_ms)


# ----------------------------------------------------------------------
# Tick
# ----------------------------------------------------------------------

def tick(run: RunState, dt_ms: Optional[float] = None) -> Tuple[RunState, Optional[OutcomeEvent]]:
    """Advance the run by one frame.

    Args:
        run: The run to advance. Mutated in place.
        dt_ms: Frame duration for the run clock. Defaults to the level's frame_ms.

    Returns:
        (run, event). The event is the terminal one if the run ended on this
        tick, otherwise the last pickup of the tick, otherwise None. Every
        event is also appended to ``run.events``.
    """
    if run.ended:
        return run, None

    level = run.config.level
    player = run.player
    speed = level.speed
    events: List[OutcomeEvent] = []

    run.tick_count += 1
    run.clock_ms += level.frame_ms if dt_ms is None else dt_ms
    if run.notice is not None:
        run.notice.advance()
        if not run.notice.active:
            run.notice = None

    _apply_jumps(run)

    run.scroll_offset -= speed * PARALLAX
    if run.scroll_offset <= -level.viewport_width:
        run.scroll_offset = 0.0

    player.integrate()

    run.gate.shift(-speed)
    if overlaps(player.bb, run.gate.bb):
        if run.total_collected == len(run.collectibles):
            events.append(_finish(run, Outcome.VICTORY))
        else:
            events.append(_finish(run, Outcome.DEFEAT, DefeatReason.INCOMPLETE_AT_GATE))
        return _close_tick(run, events)

    for item in run.collectibles:
        if not item.collected and overlaps(player.bb, item.bb):
            events.append(_pick_up(run, item))
        item.shift(-speed)

    for obstacle in run.obstacles:
        obstacle.shift(-speed)
        player_bb = player.bb
        if is_landing(player_bb, player.vy, obstacle.bb):
            player.land_on(top_edge(obstacle.bb))
        elif is_blocking(player_bb, player.vy, obstacle.bb):
            player.x = obstacle.bb.left - player.width

    supported = any(is_supported_by(player.bb, o.bb) for o in run.obstacles)
    if not supported and player.feet < run.config.floor_y:
        player.start_falling()

    if player.x <= level.pursuer_x:
        events.append(_finish(run, Outcome.DEFEAT, DefeatReason.CAUGHT_BY_PURSUER))

    return _close_tick(run, events)


def _apply_jumps(run: RunState) -> None:
    for at_ms in run.pending_jumps:
        kind = run.player.jump(at_ms)
        if kind == JumpKind.SINGLE:
            run.jumps += 1
        elif kind == JumpKind.DOUBLE:
            run.double_jumps += 1
        else:
            run.ignored_jumps += 1
    run.pending_jumps.clear()


def _pick_up(run: RunState, item: Collectible) -> OutcomeEvent:
    item.collected = True
    run.total_collected += 1
    event = OutcomeEvent(
        type=EventType.PICKUP,
        tick=run.tick_count,
        item_key=item.key,
        item_label=item.label,
        message=f"✅ {item.label}",
    )
    run.notice = Notice(event.message, PICKUP_NOTICE_TICKS)
    logger.debug("Tick %d: picked up %s (%d/%d)",
                 run.tick_count, item.key, run.total_collected, len(run.collectibles))
    return event


def _finish(
    run: RunState,
    outcome: Outcome,
    reason: Optional[DefeatReason] = None,
) -> OutcomeEvent:
    run.outcome = outcome
    run.defeat_reason = reason
    run.pending_jumps.clear()

    if outcome == Outcome.VICTORY:
        event = OutcomeEvent(EventType.VICTORY, run.tick_count, message=MESSAGE_VICTORY)
    elif reason == DefeatReason.INCOMPLETE_AT_GATE:
        event = OutcomeEvent(EventType.DEFEAT, run.tick_count, defeat_reason=reason,
                             message=MESSAGE_INCOMPLETE)
    else:
        event = OutcomeEvent(EventType.DEFEAT, run.tick_count, defeat_reason=reason,
                             message=MESSAGE_CAUGHT)

    logger.info(
        "Run seed=%s ended at tick %d: %s%s (%d/%d collected)",
        run.seed, run.tick_count, outcome.value,
        f" ({reason.value})" if reason else "",
        run.total_collected, len(run.collectibles),
    )
    return event


def _close_tick(
    run: RunState,
    events: List[OutcomeEvent],
) -> Tuple[RunState, Optional[OutcomeEvent]]:
    run.events.extend(events)
    if not events:
        return run, None
    terminal = [e for e in events if e.is_terminal]
    return run, terminal[-1] if terminal else events[-1]
