"""Tests for scripted policies."""

import numpy as np
import pytest

from requisite_run.gym_env import (
    RunnerEnv,
    STATE_SIZE,
    IDX_GROUNDED,
    IDX_DOUBLE_JUMP,
    IDX_OBSTACLE_DIST,
)
from requisite_run.policies import (
    BasePolicy,
    NeverJumpPolicy,
    RandomPolicy,
    HurdlePolicy,
    POLICIES,
)


def make_obs(grounded=True, double_jump=True, obstacle_dist=1000.0):
    obs = np.zeros(STATE_SIZE, dtype=np.float32)
    obs[IDX_GROUNDED] = float(grounded)
    obs[IDX_DOUBLE_JUMP] = float(double_jump)
    obs[IDX_OBSTACLE_DIST] = obstacle_dist
    return obs


class TestBasePolicy:
    def test_act_not_implemented(self):
        with pytest.raises(NotImplementedError):
            BasePolicy()(make_obs())


class TestNeverJumpPolicy:
    def test_never_jumps(self):
        policy = NeverJumpPolicy()
        assert policy(make_obs(obstacle_dist=10.0)) == 0


class TestRandomPolicy:
    def test_always_and_never(self):
        rng = np.random.default_rng(0)
        assert RandomPolicy(rng=rng, jump_prob=1.0)(make_obs()) == 1
        assert RandomPolicy(rng=rng, jump_prob=0.0)(make_obs()) == 0

    def test_rate(self):
        policy = RandomPolicy(rng=np.random.default_rng(1), jump_prob=0.25)
        actions = [policy(make_obs()) for _ in range(2000)]
        assert 0.2 < np.mean(actions) < 0.3


class TestHurdlePolicy:
    def test_jumps_when_obstacle_close(self):
        policy = HurdlePolicy(trigger_distance=80.0)
        assert policy(make_obs(obstacle_dist=60.0)) == 1

    def test_waits_for_far_obstacle(self):
        policy = HurdlePolicy(trigger_distance=80.0)
        assert policy(make_obs(obstacle_dist=200.0)) == 0

    def test_ignores_obstacle_underfoot(self):
        policy = HurdlePolicy()
        assert policy(make_obs(obstacle_dist=-50.0)) == 0

    def test_double_jump_after_delay(self):
        policy = HurdlePolicy(double_jump_delay=3)
        policy(make_obs(obstacle_dist=10.0))
        airborne = make_obs(grounded=False)
        assert [policy(airborne) for _ in range(4)] == [0, 0, 1, 0]

    def test_no_double_jump_when_spent(self):
        policy = HurdlePolicy(double_jump_delay=1)
        assert policy(make_obs(grounded=False, double_jump=False)) == 0

    def test_reset(self):
        policy = HurdlePolicy(double_jump_delay=2)
        airborne = make_obs(grounded=False)
        policy(airborne)
        policy.reset()
        assert policy(airborne) == 0
        assert policy(airborne) == 1

    def test_hurdle_outlasts_idle_runner(self):
        def survive(policy, seed):
            env = RunnerEnv(max_episode_steps=3000)
            obs, _ = env.reset(seed=seed)
            policy.reset()
            steps = 0
            while True:
                obs, _, terminated, truncated, _ = env.step(policy(obs))
                steps += 1
                if terminated or truncated:
                    break
            env.close()
            return steps

        assert survive(HurdlePolicy(), seed=0) > survive(NeverJumpPolicy(), seed=0)


class TestRegistry:
    def test_policies_registered(self):
        assert set(POLICIES) == {"never_jump", "random", "hurdle"}
        for name, cls in POLICIES.items():
            assert cls.name == name
