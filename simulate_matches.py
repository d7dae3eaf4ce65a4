"""
Difficulty simulation for Pattern Mirror

Plays recall players with increasing slip rates through single-player
games and head-to-head matches, and reports how far they get.
"""

import time
import torch
from agents import RecallPlayer, PlayerParams
from envs import PatternMirrorEnv
from experiments import MatchExperiment, SummaryTracker
from utils.device import get_device_name


def solo_stats(slip_rate: float, n_games: int = 200, seed: int = 42) -> dict:
    """Victory rate and mean rounds cleared for one slip rate."""
    exp = MatchExperiment(env_factory=lambda s: PatternMirrorEnv("single", seed=s))
    player = RecallPlayer(1, PlayerParams(slip_rate=slip_rate, mirror_blind_rate=0.1, seed=seed))
    return exp.run_games(
        policy_map={"p1": player.get_answer},
        n_games=n_games,
        tracker=SummaryTracker(),
        seed=seed
    )


def versus_stats(p1_slip: float, p2_slip: float, n_games: int = 200, seed: int = 7) -> dict:
    """Head-to-head win rates between two recall players."""
    exp = MatchExperiment(env_factory=lambda s: PatternMirrorEnv("versus", seed=s))
    p1 = RecallPlayer(1, PlayerParams(slip_rate=p1_slip, seed=seed))
    p2 = RecallPlayer(2, PlayerParams(slip_rate=p2_slip, seed=seed + 1))
    return exp.run_games(
        policy_map={"p1": p1.get_answer, "p2": p2.get_answer},
        n_games=n_games,
        tracker=SummaryTracker(),
        seed=seed
    )


def main():
    print("=" * 60)
    print("DIFFICULTY SIMULATION - Pattern Mirror")
    print("=" * 60)
    print()
    print(f"Device: {get_device_name()}")
    print(f"PyTorch version: {torch.__version__}")
    print()

    slip_rates = [0.0, 0.01, 0.02, 0.05, 0.1]

    print(f"{'Slip':>6} | {'Victory':>8} | {'Game over':>9} | {'Rounds':>7} | {'Steps':>6} | {'Time (s)':>8}")
    print("-" * 60)

    for slip in slip_rates:
        start = time.time()
        results = solo_stats(slip)
        elapsed = time.time() - start
        print(
            f"{slip:6.2f} | {results['win_rate'].get(1, 0.0):8.2%} | {results['game_over_rate']:9.2%} | "
            f"{results['avg_rounds_completed']['p1']:7.2f} | {results['avg_steps']:6.1f} | {elapsed:8.2f}"
        )

    print()
    print("=" * 60)
    print("VERSUS (P1 slip 0.02)")
    print("=" * 60)

    for p2_slip in slip_rates:
        results = versus_stats(0.02, p2_slip)
        print(
            f"P2 slip {p2_slip:4.2f}: P1 wins {results['win_rate'].get(1, 0.0):6.2%}, "
            f"P2 wins {results['win_rate'].get(2, 0.0):6.2%}"
        )
    print()


if __name__ == "__main__":
    main()
