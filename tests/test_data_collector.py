"""Tests for trajectory data collector."""

import json
import numpy as np
import pytest

from requisite_run.config import CONFIGS
from requisite_run.data_collector import TrajectoryCollector
from requisite_run.gym_env import RunnerEnv, STATE_SIZE


@pytest.fixture
def tmp_dir(tmp_path):
    return tmp_path / "trajectories"


@pytest.fixture
def env():
    e = RunnerEnv(max_episode_steps=50)
    yield e
    e.close()


def run_steps(env, collector, actions):
    for action in actions:
        obs, reward, terminated, truncated, info = env.step(action)
        collector.record_step(action, obs, reward, terminated, truncated, info)
        if terminated or truncated:
            break


class TestTrajectoryCollector:
    def test_create(self, tmp_dir):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        assert collector.episode_count == 0
        assert not collector.recording
        assert tmp_dir.exists()

    def test_record_episode(self, tmp_dir, env):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        obs, info = env.reset(seed=42)
        collector.begin_episode(obs, info)
        assert collector.recording

        run_steps(env, collector, [0] * 5)

        path = collector.end_episode()
        assert path is not None
        assert path.exists()
        assert path.name == "episode_0000.npz"
        assert collector.episode_count == 1
        assert not collector.recording

    def test_saved_file_contents(self, tmp_dir, env):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        obs, info = env.reset(seed=42)
        collector.begin_episode(obs, info, metadata={"policy": "scripted"})

        run_steps(env, collector, [1, 0, 0, 1, 0, 0, 0, 0, 0, 0])

        path = collector.end_episode()
        data = np.load(path)
        assert data["states"].shape == (11, STATE_SIZE)
        assert data["actions"].dtype == np.int8
        assert data["actions"].tolist() == [1, 0, 0, 1, 0, 0, 0, 0, 0, 0]
        assert data["rewards"].shape == (10,)
        assert data["terminated"].dtype == np.bool_
        assert data["reward_step"].sum() == 10.0
        assert "reward_pickup" in data

        meta = json.loads(str(data["metadata_json"]))
        assert meta["policy"] == "scripted"
        assert meta["initial_info"]["total_required"] == 11

    def test_events_saved(self, tmp_dir):
        env = RunnerEnv(config=CONFIGS["open_road"], max_episode_steps=400)
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        obs, info = env.reset(seed=0)
        collector.begin_episode(obs, info)
        run_steps(env, collector, [0] * 400)
        data = np.load(collector.end_episode())

        events = json.loads(str(data["events_json"]))
        assert len(events) == 1
        assert events[0]["type"] == "victory"
        assert events[0]["step"] == 250
        assert bool(data["terminated"][-1])
        env.close()

    def test_numbering_continues(self, tmp_dir, env):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        for _ in range(2):
            obs, info = env.reset()
            collector.begin_episode(obs, info)
            run_steps(env, collector, [0])
            collector.end_episode()

        resumed = TrajectoryCollector(output_dir=str(tmp_dir))
        assert resumed.episode_count == 2

    def test_custom_filename(self, tmp_dir, env):
        collector = TrajectoryCollector(output_dir=str(tmp_dir), compress=False)
        obs, info = env.reset(seed=0)
        collector.begin_episode(obs, info)
        run_steps(env, collector, [0, 0])
        path = collector.end_episode(filename="hurdle_0007.npz")
        assert path.name == "hurdle_0007.npz"

    def test_end_without_begin(self, tmp_dir):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        assert collector.end_episode() is None

    def test_record_without_begin_is_ignored(self, tmp_dir, env):
        collector = TrajectoryCollector(output_dir=str(tmp_dir))
        obs, info = env.reset(seed=0)
        collector.record_step(0, obs, 0.0, False, False, info)
        assert not collector.recording
        assert collector.end_episode() is None
