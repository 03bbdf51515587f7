# experiments/sanity_rollout.py
"""
Baseline rollouts of FlappyEnv with a random and a gate-centering policy.

  python -m experiments.sanity_rollout --policies both --save-traces
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222 --save-traces --save-obs

One CSV row per episode goes to <out-dir>/episodes.csv; traces land under
<out-dir>/traces/<policy>/ and can be replayed with experiments.replay.
"""

from __future__ import annotations
import argparse
import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from src.env.flappy_env import FlappyEnv
from src.game.config import FLYER_H, FRAME_INTERVAL_MS

Policy = Callable[[np.ndarray], int]

CSV_HEADER = [
    "policy", "seed", "frame_skip", "decision_hz",
    "decisions", "return", "score", "ticks", "terminated", "truncated",
]


def make_random_policy(action_seed: int, hold_prob: float = 0.4) -> Policy:
    rng = np.random.RandomState(action_seed)
    return lambda _obs: int(rng.random_sample() < hold_prob)


def make_gate_policy() -> Policy:
    """Hold while the flyer's centre is below the middle of the leader's gate."""
    scale = 1.0 - FLYER_H / 100.0      # obs[0] spans [0, 100 - FLYER_H]
    half_h = FLYER_H / 200.0

    def act(obs: np.ndarray) -> int:
        centre = obs[0] * scale + half_h
        return int(centre < 0.5 * (obs[3] + obs[4]))
    return act


def action_seed_for(policy_name: str, seed: int) -> Optional[int]:
    return 10_000 + seed if policy_name == "random" else None


def build_policy(policy_name: str, seed: int) -> Policy:
    if policy_name == "random":
        return make_random_policy(action_seed_for(policy_name, seed))
    if policy_name == "heuristic":
        return make_gate_policy()
    raise ValueError(f"Unknown policy: {policy_name}")


@dataclass
class Episode:
    policy: str
    seed: int
    frame_skip: int
    decisions: int = 0
    ret: float = 0.0
    score: int = 0
    ticks: int = 0
    terminated: bool = False
    truncated: bool = False

    def row(self, decision_hz: float) -> list:
        return [self.policy, self.seed, self.frame_skip, f"{decision_hz:.2f}",
                self.decisions, f"{self.ret:.1f}", self.score, self.ticks,
                int(self.terminated), int(self.truncated)]


def rollout(policy_name: str, seed: int, frame_skip: int, max_decisions: int):
    """Plays one episode; returns the Episode plus the actions and observations seen."""
    policy = build_policy(policy_name, seed)
    ep = Episode(policy_name, seed, frame_skip)
    actions: List[int] = []
    observations: List[np.ndarray] = []

    env = FlappyEnv(frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        observations.append(obs.copy())
        while ep.decisions < max_decisions and not (ep.terminated or ep.truncated):
            a = policy(obs)
            obs, r, ep.terminated, ep.truncated, info = env.step(a)
            actions.append(a)
            observations.append(obs.copy())
            ep.ret += float(r)
            ep.decisions += 1
        ep.score, ep.ticks = int(info["score"]), int(info["ticks"])
    finally:
        env.close()
    return ep, actions, observations


def save_trace(trace_dir: Path, ep: Episode, actions: List[int],
               observations: Optional[List[np.ndarray]], max_decisions: int):
    trace_dir.mkdir(parents=True, exist_ok=True)
    np.save(trace_dir / f"{ep.seed}_actions.npy", np.asarray(actions, dtype=np.int8))
    if observations is not None:
        np.save(trace_dir / f"{ep.seed}_obs.npy", np.asarray(observations, dtype=np.float32))
    meta = {
        "seed": ep.seed,
        "frame_skip": ep.frame_skip,
        "policy": ep.policy,
        "action_rng_seed": action_seed_for(ep.policy, ep.seed),
        "steps_limit": max_decisions,
    }
    (trace_dir / f"{ep.seed}_meta.txt").write_text(
        "\n".join(f"{k}={v}" for k, v in meta.items()), encoding="utf-8")


def main():
    ap = argparse.ArgumentParser(description="Baseline FlappyEnv rollouts.")
    ap.add_argument("--policies", choices=["random", "heuristic", "both"], default="both")
    ap.add_argument("--seeds", type=str, default="", help="Comma-separated seeds (default 101..120)")
    ap.add_argument("--frame-skip", type=int, default=2)
    ap.add_argument("--steps", type=int, default=10_000, help="Cap on decisions per episode")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true")
    ap.add_argument("--save-obs", action="store_true", help="Store observations next to the actions")
    args = ap.parse_args()

    seeds = [int(s) for s in args.seeds.split(",") if s.strip()] or list(range(101, 121))
    policies = ["random", "heuristic"] if args.policies == "both" else [args.policies]
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / "episodes.csv"
    decision_hz = 1000.0 / FRAME_INTERVAL_MS / max(1, args.frame_skip)

    print(f"policies={policies} seeds={len(seeds)} frame_skip={args.frame_skip} "
          f"decision_hz={decision_hz:.1f} -> {csv_path}")

    new_file = not csv_path.exists()
    with csv_path.open("a", newline="") as f:
        writer = csv.writer(f)
        if new_file:
            writer.writerow(CSV_HEADER)
        for name in policies:
            scores = []
            for seed in seeds:
                ep, actions, observations = rollout(name, seed, args.frame_skip, args.steps)
                writer.writerow(ep.row(decision_hz))
                if args.save_traces:
                    save_trace(out_dir / "traces" / name, ep, actions,
                               observations if args.save_obs else None, args.steps)
                scores.append(ep.score)
                print(f"[{name}] seed={seed} decisions={ep.decisions} score={ep.score} "
                      f"return={ep.ret:.1f} terminated={ep.terminated}")
            print(f"[{name}] mean score={np.mean(scores):.2f} max={np.max(scores)}")


if __name__ == "__main__":
    main()
