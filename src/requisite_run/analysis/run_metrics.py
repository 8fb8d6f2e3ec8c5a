"""Per-episode metric computation for recorded run collections.

Loads .npz trajectory files written by TrajectoryCollector and computes a
flat set of metrics per episode for coverage reports and policy comparison.

Usage:
    # Single episode
    metrics = compute_metrics("path/to/episode.npz")

    # Full collection -> DataFrame
    df = compute_collection_metrics("data/collections/hurdle-500/")
"""

import json
import numpy as np
import pandas as pd
from pathlib import Path
from typing import List, Union
from concurrent.futures import ProcessPoolExecutor

from ..gym_env import (
    IDX_X, IDX_Y, IDX_GROUNDED, IDX_DOUBLE_JUMP, IDX_COLLECTED, IDX_OUTCOME,
)


def compute_metrics(npz_path: Union[str, Path]) -> dict:
    """Compute all metrics from a single .npz episode file.

    Args:
        npz_path: Path to a trajectory .npz file.

    Returns:
        Dict of metric name -> value, flat so it fits a DataFrame row.
    """
    npz_path = Path(npz_path)
    data = np.load(npz_path, allow_pickle=False)

    states = data["states"]          # (T+1, 12)
    actions = data["actions"]        # (T,)
    rewards = data["rewards"]        # (T,)
    truncated = data["truncated"]    # (T,)

    T = len(rewards)

    meta = {}
    if "metadata_json" in data:
        meta = json.loads(str(data["metadata_json"]))
    events = []
    if "events_json" in data:
        events = json.loads(str(data["events_json"]))

    metrics = {
        "file": npz_path.name,
        "policy": meta.get("policy", "unknown"),
        "config_name": meta.get("config_name", "unknown"),
        "level_seed": meta.get("initial_info", {}).get("level_seed", -1),
    }

    # Outcome
    final_outcome = float(states[-1, IDX_OUTCOME])
    if final_outcome > 0.5:
        outcome = "victory"
    elif final_outcome < -0.5:
        outcome = "defeat"
    elif T > 0 and bool(truncated[-1]):
        outcome = "timeout"
    else:
        outcome = "in-progress"
    metrics["outcome"] = outcome

    defeat = [e for e in events if e.get("type") == "defeat"]
    metrics["defeat_reason"] = defeat[-1].get("defeat_reason") if defeat else None
    metrics["episode_steps"] = T

    # Collection
    pickups = [e for e in events if e.get("type") == "pickup"]
    metrics["items_collected"] = len(pickups)
    metrics["collected_fraction"] = float(states[-1, IDX_COLLECTED])
    metrics["total_required"] = meta.get("initial_info", {}).get("total_required", np.nan)
    if pickups:
        metrics["first_pickup_step"] = int(pickups[0]["step"])
    else:
        metrics["first_pickup_step"] = np.nan

    # Rewards
    metrics["total_reward"] = float(rewards.sum())
    for signal in ["pickup", "victory", "defeat", "step"]:
        key = f"reward_{signal}"
        if key in data:
            metrics[f"total_reward_{signal}"] = float(data[key].sum())

    # Movement: x only changes when the runner is pushed back or double-jumps
    pos_x = states[:, IDX_X]
    pos_y = states[:, IDX_Y]
    metrics["min_x"] = float(pos_x.min())
    metrics["final_x"] = float(pos_x[-1])
    metrics["net_x_displacement"] = float(pos_x[-1] - pos_x[0])
    metrics["highest_point"] = float(pos_y.min())  # y grows downward

    grounded = states[:, IDX_GROUNDED] > 0.5
    metrics["airborne_fraction"] = float((~grounded).mean())
    metrics["takeoffs"] = int((np.diff(grounded.astype(int)) == -1).sum())

    double_available = states[:, IDX_DOUBLE_JUMP] > 0.5
    metrics["double_jumps"] = int((np.diff(double_available.astype(int)) == -1).sum())

    # Actions
    metrics["jump_requests"] = int(actions.sum()) if T > 0 else 0
    metrics["jump_frequency"] = float(actions.mean()) if T > 0 else 0.0

    return metrics


def _metrics_row(npz_path: str) -> dict:
    """compute_metrics() for a worker process; unreadable files become error rows."""
    try:
        return compute_metrics(npz_path)
    except (OSError, KeyError, ValueError) as e:
        return {"file": Path(npz_path).name, "_error": f"{type(e).__name__}: {e}"}


def _report_failures(failed: List[dict], shown: int = 5) -> None:
    print(f"WARNING: {len(failed)} episode file(s) failed to load:")
    for row in failed[:shown]:
        print(f"  {row['file']}: {row['_error']}")
    if len(failed) > shown:
        print(f"  ... {len(failed) - shown} more not shown")


def compute_collection_metrics(
    collection_dir: Union[str, Path],
    workers: int = 4,
) -> pd.DataFrame:
    """One metrics row per episode under {collection_dir}/trajectories/.

    Args:
        collection_dir: Collection root holding a trajectories/ directory.
        workers: Worker processes; 1 computes inline with progress output.

    Raises:
        FileNotFoundError: If there is no trajectories/ dir or it holds no episodes.
    """
    traj_dir = Path(collection_dir) / "trajectories"
    if not traj_dir.is_dir():
        raise FileNotFoundError(f"{traj_dir} does not exist")

    paths = [str(p) for p in sorted(traj_dir.rglob("*.npz"))]
    if not paths:
        raise FileNotFoundError(f"{traj_dir} contains no .npz episodes")

    print(f"Loading {len(paths)} episodes from {traj_dir} ({workers} workers)")

    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            rows = list(pool.map(_metrics_row, paths, chunksize=50))
    else:
        rows = []
        for done, path in enumerate(paths, start=1):
            rows.append(_metrics_row(path))
            if done % 500 == 0:
                print(f"  {done}/{len(paths)}")

    failed = [r for r in rows if "_error" in r]
    if failed:
        _report_failures(failed)

    df = pd.DataFrame([r for r in rows if "_error" not in r])
    print(f"{len(df)} of {len(paths)} episodes loaded.")
    return df


def summarize_by_policy(df: pd.DataFrame) -> pd.DataFrame:
    """Outcome rates and mean collection per policy."""
    grouped = df.groupby("policy")
    return pd.DataFrame({
        "episodes": grouped.size(),
        "victory_rate": grouped["outcome"].apply(lambda s: float((s == "victory").mean())),
        "caught_rate": grouped["defeat_reason"].apply(
            lambda s: float((s == "caught-by-pursuer").mean())
        ),
        "mean_collected_fraction": grouped["collected_fraction"].mean(),
        "mean_steps": grouped["episode_steps"].mean(),
    })
