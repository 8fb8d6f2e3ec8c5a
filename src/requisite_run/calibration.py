"""Jump calibration: what the runner can actually clear.

PlayerConfig gives impulses and gravity per tick. How high and how far that
carries the runner depends on discrete integration and on when the mid-air
jump lands inside its window, so this module measures it by driving a lone
Player on flat ground, tick by tick, the same way the simulator does
(requests first, then gravity).

Usage:
    profile = calibrate(config.player, frame_ms=config.level.frame_ms, speed=config.level.speed)
    profile.single_apex   # 91.0 for the default runner
"""

from dataclasses import dataclass, asdict
from typing import Dict, Tuple

from .config import PlayerConfig
from .entities import Player


@dataclass
class JumpProfile:
    """Measured jump outcomes for one PlayerConfig."""

    # --- Ground jump only ---
    single_apex: float  # units risen above the floor at the highest point
    single_airtime_ticks: int  # ticks from the jump to touching down
    single_reach: float  # scenery scrolled past while airborne

    # --- Ground jump followed by the best-timed mid-air jump ---
    double_apex: float
    double_airtime_ticks: int
    double_reach: float  # includes the forward boost
    best_double_jump_tick: int  # ticks after the ground jump giving the highest apex

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> "JumpProfile":
        return cls(**d)


# Ground line for the test runner; any value works since only offsets are kept
_GROUND_Y = 1000.0
_MAX_JUMP_TICKS = 1000  # safety cutoff for configs with no gravity


def _fly(player: PlayerConfig, frame_ms: float, double_at_tick: int = -1) -> Tuple[float, int]:
    """Jump from the ground and fly until touchdown.

    Args:
        player: Runner attributes.
        frame_ms: Tick duration, used to timestamp the jump requests.
        double_at_tick: Tick at which to request the mid-air jump, or -1 for none.

    Returns:
        (apex above the floor, airtime in ticks)
    """
    runner = Player(player, ground_y=_GROUND_Y, speed=0.0)
    lowest_y = runner.y

    for tick in range(_MAX_JUMP_TICKS):
        now_ms = tick * frame_ms
        if tick == 0:
            runner.jump(now_ms)
        if tick == double_at_tick:
            runner.jump(now_ms)

        landed = runner.integrate()
        lowest_y = min(lowest_y, runner.y)
        if landed:
            return _GROUND_Y - lowest_y, tick + 1

    return _GROUND_Y - lowest_y, _MAX_JUMP_TICKS


def _double_jump_ticks(player: PlayerConfig, frame_ms: float) -> range:
    """Ticks after the ground jump at which a mid-air jump is still accepted."""
    if player.double_jump_window_ms <= 0:
        return range(0)
    last = 0
    while (last + 1) * frame_ms < player.double_jump_window_ms:
        last += 1
    return range(0, last + 1)


_calibration_cache: Dict[Tuple, JumpProfile] = {}


def _config_key(player: PlayerConfig, frame_ms: float, speed: float) -> Tuple:
    return tuple(sorted(player.to_dict().items())) + (("frame_ms", frame_ms), ("speed", speed))


def calibrate(
    player: PlayerConfig,
    frame_ms: float = 1000.0 / 60.0,
    speed: float = 4.0,
    use_cache: bool = True,
) -> JumpProfile:
    """Measure single and double jump outcomes.

    Every tick inside the double-jump window is tried as the moment of the
    mid-air jump; the one with the highest apex is reported.

    Args:
        player: Runner attributes.
        frame_ms: Tick duration in milliseconds.
        speed: Scroll speed, used to turn airtime into reach.
        use_cache: Whether to use cached results. Set False for testing.
    """
    key = _config_key(player, frame_ms, speed)
    if use_cache and key in _calibration_cache:
        return _calibration_cache[key]

    single_apex, single_ticks = _fly(player, frame_ms)

    best_apex, best_ticks, best_tick = single_apex, single_ticks, -1
    for tick in _double_jump_ticks(player, frame_ms):
        apex, ticks = _fly(player, frame_ms, double_at_tick=tick)
        if apex > best_apex:
            best_apex, best_ticks, best_tick = apex, ticks, tick

    boost = player.double_jump_boost if best_tick >= 0 else 0.0
    profile = JumpProfile(
        single_apex=single_apex,
        single_airtime_ticks=single_ticks,
        single_reach=speed * single_ticks,
        double_apex=best_apex,
        double_airtime_ticks=best_ticks,
        double_reach=speed * best_ticks + boost,
        best_double_jump_tick=best_tick,
    )

    if use_cache:
        _calibration_cache[key] = profile

    return profile


def clear_cache() -> None:
    """Clear the calibration cache. Useful for testing."""
    _calibration_cache.clear()

