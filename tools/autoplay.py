"""
Headless Autoplay
=================

Runs full games through CatcherEnv with a scripted lane policy and reports
scores and step throughput.

Usage:
    python -m tools.autoplay [--episodes N] [--policy chase|random] [--seed S]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Dict

import numpy as np

from fruit_catcher.catcher_core.env_gym import CatcherEnv


def chase_policy(obs: Dict[str, np.ndarray], hazard_kinds: np.ndarray, lane_count: int) -> int:
    """
    Follow the lowest good item; step aside from the lowest hazard.

    Args:
        obs: Observation from CatcherEnv.
        hazard_kinds: Boolean array indexed by catalog position.
        lane_count: Number of lanes.

    Returns:
        Lane index to command.
    """
    basket = int(obs["basket_lane"])
    mask = obs["ent_mask"].astype(bool)
    if not mask.any():
        return basket

    # Lowest entity is the one closest to the basket
    idx = np.flatnonzero(mask)
    lowest = idx[np.argmax(obs["ent_y"][idx])]
    lane = int(obs["ent_lane"][lowest])
    if hazard_kinds[obs["ent_kind"][lowest]]:
        if lane != basket:
            return basket
        return (lane + 1) % lane_count
    return lane


def run_episodes(episodes: int, policy: str, seed: int) -> list:
    env = CatcherEnv()
    rng = np.random.default_rng(seed)
    lane_count = env.config.board.lane_count
    hazard_kinds = np.array([kind.is_hazard for kind in env.game.catalog])

    results = []
    for episode in range(episodes):
        obs, _ = env.reset(seed=seed + episode)
        steps = 0
        caught = 0
        missed = 0
        start = time.perf_counter()
        done = False
        while not done:
            if policy == "random":
                action = int(rng.integers(lane_count))
            else:
                action = chase_policy(obs, hazard_kinds, lane_count)
            obs, _, terminated, truncated, info = env.step(action)
            caught += info["caught"]
            missed += info["missed"]
            steps += 1
            done = terminated or truncated
        elapsed = time.perf_counter() - start
        results.append({
            "episode": episode,
            "score": info["score"],
            "level": info["level"],
            "caught": caught,
            "missed": missed,
            "steps": steps,
            "steps_per_second": steps / elapsed if elapsed > 0 else float("inf"),
        })

    env.close()
    return results


def main():
    parser = argparse.ArgumentParser(description="Run Fruit Catcher headless with a scripted policy")
    parser.add_argument("--episodes", type=int, default=5, help="Number of games")
    parser.add_argument("--policy", choices=["chase", "random"], default="chase")
    parser.add_argument("--seed", type=int, default=42, help="Base random seed")

    args = parser.parse_args()

    results = run_episodes(args.episodes, args.policy, args.seed)

    print(f"{'Episode':>8} {'Score':>8} {'Level':>6} {'Caught':>7} {'Missed':>7} {'Steps/s':>10}")
    print("-" * 52)
    for r in results:
        print(
            f"{r['episode']:>8} {r['score']:>8} {r['level']:>6} "
            f"{r['caught']:>7} {r['missed']:>7} {r['steps_per_second']:>10.0f}"
        )
    scores = [r["score"] for r in results]
    print("-" * 52)
    print(f"Mean score: {np.mean(scores):.1f}  (std {np.std(scores):.1f})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
