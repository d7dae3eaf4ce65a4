"""
Tests for match experiment runner and trackers.
"""

import pytest

from agents import RecallPlayer, RandomPlayer, PlayerParams
from core.rounds import MAX_ROUNDS
from envs import PatternMirrorEnv
from experiments import MatchExperiment, SummaryTracker, EpisodeTracker, winner_of


def single_factory(seed):
    return PatternMirrorEnv("single", seed=seed, device="cpu")


def versus_factory(seed):
    return PatternMirrorEnv("versus", seed=seed, device="cpu")


def perfect_policy(player_id=1):
    return RecallPlayer(player_id, PlayerParams(seed=0)).get_answer


def hopeless_policy(player_id=1):
    # Every cell wrong, every time
    return RecallPlayer(player_id, PlayerParams(slip_rate=1.0, seed=0)).get_answer


# ============================================================================
# SummaryTracker Tests
# ============================================================================

def test_summary_tracker_initialization():
    tracker = SummaryTracker()
    assert tracker.total_games == 0
    assert tracker.total_steps == 0
    assert tracker.get_results()["total_games"] == 0


def test_perfect_player_always_wins_single():
    exp = MatchExperiment(env_factory=single_factory, max_steps=50)
    results = exp.run_games(
        policy_map={"p1": perfect_policy()},
        n_games=5,
        tracker=SummaryTracker(),
        seed=42
    )

    assert results["total_games"] == 5
    assert results["win_rate"] == {1: 1.0}
    assert results["game_over_rate"] == 0.0
    assert results["avg_steps"] == MAX_ROUNDS
    assert results["avg_rounds_completed"]["p1"] == MAX_ROUNDS
    assert results["avg_score"]["p1"] == 10 * MAX_ROUNDS
    assert results["rewards_per_agent"]["p1"] == pytest.approx(MAX_ROUNDS + 5.0)
    assert results["reward_std_per_agent"]["p1"] == pytest.approx(0.0)


def test_hopeless_player_always_loses_single():
    exp = MatchExperiment(env_factory=single_factory, max_steps=50)
    results = exp.run_games(policy_map={"p1": hopeless_policy()}, n_games=4, seed=1)

    assert results["win_rate"] == {}
    assert results["game_over_rate"] == 1.0
    assert results["avg_steps"] == 3
    assert results["avg_rounds_completed"]["p1"] == 0


def test_versus_perfect_beats_hopeless():
    exp = MatchExperiment(env_factory=versus_factory, max_steps=50)
    results = exp.run_games(
        policy_map={"p1": hopeless_policy(1), "p2": perfect_policy(2)},
        n_games=3,
        seed=7
    )
    assert results["win_rate"] == {2: 1.0}
    assert results["avg_rounds_completed"]["p2"] == MAX_ROUNDS
    assert results["avg_rounds_completed"]["p1"] == 0


def test_summary_tracker_reset():
    tracker = SummaryTracker()
    exp = MatchExperiment(env_factory=single_factory, max_steps=20)
    exp.run_games(policy_map={"p1": perfect_policy()}, n_games=2, tracker=tracker, seed=3)
    assert tracker.total_games == 2

    tracker.reset()
    assert tracker.total_games == 0
    assert tracker.total_steps == 0


# ============================================================================
# EpisodeTracker Tests
# ============================================================================

def test_episode_tracker_stores_games():
    exp = MatchExperiment(env_factory=single_factory, max_steps=50)
    episodes = exp.run_games(
        policy_map={"p1": hopeless_policy()},
        n_games=3,
        tracker=EpisodeTracker(),
        seed=0
    )

    assert len(episodes) == 3
    for idx, episode in enumerate(episodes):
        assert episode["episode_idx"] == idx
        assert episode["winner"] == 0
        assert episode["screen"] == "game_over"
        assert episode["steps"] == 3
        assert episode["players"]["p1"]["lives"] == 0
        assert episode["players"]["p1"]["total_reward"] == pytest.approx(-3.0 - 5.0)


def test_step_limit_abandons_game():
    exp = MatchExperiment(env_factory=versus_factory, max_steps=4)
    episodes = exp.run_games(
        policy_map={"p1": hopeless_policy(1), "p2": hopeless_policy(2)},
        n_games=1,
        tracker=EpisodeTracker(),
        seed=0
    )
    assert episodes[0]["steps"] == 4
    assert episodes[0]["screen"] == "playing"
    assert episodes[0]["winner"] == 0


# ============================================================================
# Runner
# ============================================================================

def test_missing_policy_raises():
    exp = MatchExperiment(env_factory=versus_factory)
    with pytest.raises(ValueError):
        exp.run_games(policy_map={"p1": perfect_policy()}, n_games=1, seed=0)


def test_run_sweep():
    exp = MatchExperiment(env_factory=single_factory, max_steps=50)

    def make_policies(params):
        return {"p1": RecallPlayer(1, PlayerParams(**params)).get_answer}

    sweep = exp.run_sweep(
        policy_factory=make_policies,
        param_grid=[{"slip_rate": 0.0, "seed": 0}, {"slip_rate": 1.0, "seed": 0}],
        n_games_per_config=2,
        seed=100
    )

    assert len(sweep) == 2
    assert sweep[0]["results"]["win_rate"] == {1: 1.0}
    assert sweep[1]["results"]["game_over_rate"] == 1.0
    assert sweep[1]["seed"] == 100 + 10000


def test_random_player_runs_to_completion():
    exp = MatchExperiment(env_factory=single_factory, max_steps=100)
    results = exp.run_games(
        policy_map={"p1": RandomPlayer(1, PlayerParams(seed=5)).get_answer},
        n_games=3,
        seed=11
    )
    assert results["total_games"] == 3


def test_winner_of():
    assert winner_of({"p1": {"winner": 2, "screen": "victory"}}) == 2
    assert winner_of({"p1": {"winner": 0, "screen": "victory"}}) == 1
    assert winner_of({"p1": {"winner": 0, "screen": "game_over"}}) == 0
