# src/tests/test_flappy_env.py
"""
Quick tests for FlappyEnv (Gymnasium environment).

Usage (from repo root):
  python -m pytest src/tests/test_flappy_env.py
  python -m src.tests.test_flappy_env
  python -m src.tests.test_flappy_env --render
  python -m src.tests.test_flappy_env --no-api-check --no-determinism
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from src.env.flappy_env import FlappyEnv, POINT_REWARD
from src.game.config import EngineConfig


def api_check(frame_skip: int = 2) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = FlappyEnv(frame_skip=frame_skip)
    try:
        check_env(env)
    finally:
        env.close()


def smoke_test(steps: int = 300, seed: int = 123, frame_skip: int = 2) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = FlappyEnv(frame_skip=frame_skip)
    env.action_space.seed(seed)
    try:
        obs, info = env.reset(seed=seed)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["seed"] == seed

        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            if term:
                assert r == -1.0
            if term or trunc:
                break
    finally:
        env.close()


def determinism_test(steps: int = 300, seed: int = 123, frame_skip: int = 2) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = FlappyEnv(frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    # Fixed action sequence using a local RNG (not numpy global)
    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 2)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.allclose(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")


def test_api_check():
    api_check()


def test_smoke():
    smoke_test()


def test_determinism():
    determinism_test()


def test_point_reward_and_time_limit():
    # wide gate + hover policy never dies; first point after 317 ticks
    env = FlappyEnv(frame_skip=1, time_limit_seconds=11.0, config=EngineConfig(gate_size=90.0))
    try:
        obs, _ = env.reset(seed=8)
        rewards = []
        trunc = term = False
        while not (term or trunc):
            a = 1 if env.engine.flyer.y < 47.5 else 0
            obs, r, term, trunc, info = env.step(a)
            rewards.append(r)
        assert not term and trunc
        assert len(rewards) == env.time_limit_decisions == 366
        assert rewards[316] == 1.0 + POINT_REWARD
        assert rewards.count(1.0 + POINT_REWARD) == info["score"] == 1
    finally:
        env.close()


def test_reset_restarts_same_engine():
    env = FlappyEnv()
    try:
        env.reset(seed=5)
        engine = env.engine
        for _ in range(50):
            env.step(1)
        obs, info = env.reset(seed=5)
        assert env.engine is engine
        assert info["ticks"] == 0 and engine.score == 0
        assert obs[1] == 0.0      # input released on reset
    finally:
        env.close()


def test_rgb_array_render():
    env = FlappyEnv(render_mode="rgb_array")
    try:
        env.reset(seed=3)
        frame = env.render()
        assert frame.dtype == np.uint8 and frame.ndim == 3 and frame.shape[2] == 3
    finally:
        env.close()


def render_demo(steps: int, seed: int, frame_skip: int) -> None:
    """Open a window and run a short NOOP demo so you can visually verify behavior."""
    env = FlappyEnv(render_mode="human", frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps):
            obs, r, term, trunc, info = env.step(0)
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Render demo finished")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123, help="Episode seed for tests")
    ap.add_argument("--steps", type=int, default=300, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=2, help="Sim ticks per decision step")
    ap.add_argument("--render", action="store_true", help="Run a short visual demo")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    ap.add_argument("--no-smoke", action="store_true", help="Skip smoke test")
    ap.add_argument("--no-determinism", action="store_true", help="Skip determinism test")
    args = ap.parse_args()

    try:
        if not args.no_api_check:
            api_check(frame_skip=args.frame_skip)
            print("✓ API check ok")
        if not args.no_smoke:
            smoke_test(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
            print("✓ Smoke test ok")
        if not args.no_determinism:
            determinism_test(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
            print("✓ Determinism ok")
        if args.render:
            render_demo(steps=min(args.steps, 600), seed=args.seed, frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
