"""
Tests for envs.pattern_env module.
"""

import torch
import pytest

from core.events import EventKind, GameEvent
from core.rounds import MAX_LIVES, MAX_ROUNDS
from envs.pattern_env import PatternMirrorEnv, default_reward


def perfect(obs):
    """Answer with the mirrored pattern."""
    pattern = obs["pattern"]
    if obs["mirror_type"] == "horizontal":
        pattern = torch.flip(pattern, dims=[1])
    return {"answer": pattern}


def wrong(obs):
    answer = perfect(obs)["answer"].clone()
    answer[0, 0] = not bool(answer[0, 0])
    return {"answer": answer}


def test_single_env_initialization():
    env = PatternMirrorEnv("single", seed=42, device="cpu")
    obs = env.reset(seed=42)

    assert env.agent_ids == ["p1"]
    assert set(obs["p1"].keys()) >= {"pattern", "answer", "mirror_type", "grid_size", "round", "lives", "score", "status"}
    assert obs["p1"]["grid_size"] == 3
    assert obs["p1"]["round"] == 1
    assert obs["p1"]["lives"] == MAX_LIVES
    assert "opponent_round" not in obs["p1"]


def test_versus_env_initialization():
    env = PatternMirrorEnv("versus", seed=42, device="cpu")
    obs = env.reset(seed=42)

    assert env.agent_ids == ["p1", "p2"]
    assert obs["p1"]["opponent_round"] == 1
    assert obs["p2"]["opponent_round"] == 1


def test_reset_is_reproducible():
    env = PatternMirrorEnv("single", device="cpu")
    a = env.reset(seed=3)["p1"]["pattern"]
    b = env.reset(seed=3)["p1"]["pattern"]
    assert torch.equal(a, b)


def test_observations_are_copies():
    env = PatternMirrorEnv("single", seed=1, device="cpu")
    obs = env.reset(seed=1)
    obs["p1"]["answer"][0, 0] = True
    assert not bool(env.session.state(1).answer[0, 0])


def test_correct_step_advances_round():
    env = PatternMirrorEnv("single", seed=0, device="cpu")
    obs = env.reset(seed=0)
    obs, rewards, dones, infos = env.step({"p1": perfect(obs["p1"])})

    assert obs["p1"]["round"] == 2
    assert obs["p1"]["score"] == 10
    assert obs["p1"]["status"] == "playing"
    assert rewards["p1"] == 1.0
    assert dones["p1"] is False
    assert EventKind.ROUND_ADVANCED.value in infos["p1"]["events"]
    assert infos["p1"]["steps"] == 1


def test_wrong_steps_lead_to_game_over():
    env = PatternMirrorEnv("single", seed=0, device="cpu")
    obs = env.reset(seed=0)

    for _ in range(MAX_LIVES):
        obs, rewards, dones, infos = env.step({"p1": wrong(obs["p1"])})

    assert obs["p1"]["lives"] == 0
    assert obs["p1"]["round"] == 1
    assert dones["p1"] is True
    assert infos["p1"]["screen"] == "game_over"
    assert rewards["p1"] == -1.0 - 5.0


def test_perfect_player_clears_the_game():
    env = PatternMirrorEnv("single", seed=5, device="cpu")
    obs = env.reset(seed=5)
    dones = {"p1": False}
    steps = 0
    while not dones["p1"]:
        obs, rewards, dones, infos = env.step({"p1": perfect(obs["p1"])})
        steps += 1

    assert steps == MAX_ROUNDS
    assert infos["p1"]["screen"] == "victory"
    assert infos["p1"]["rounds_completed"] == MAX_ROUNDS
    assert rewards["p1"] == 1.0 + 5.0


def test_missing_action_is_skipped():
    env = PatternMirrorEnv("versus", seed=0, device="cpu")
    obs = env.reset(seed=0)
    obs, rewards, _, _ = env.step({"p1": perfect(obs["p1"]), "p2": None})

    assert obs["p1"]["round"] == 2
    assert obs["p2"]["round"] == 1
    assert rewards["p2"] == 0.0


def test_answer_with_wrong_shape_raises():
    env = PatternMirrorEnv("single", seed=0, device="cpu")
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step({"p1": {"answer": torch.zeros(4, 4, dtype=torch.bool)}})


def test_versus_tie_goes_to_p1():
    env = PatternMirrorEnv("versus", seed=9, device="cpu")
    obs = env.reset(seed=9)
    for _ in range(MAX_ROUNDS):
        obs, rewards, dones, infos = env.step({"p1": perfect(obs["p1"]), "p2": perfect(obs["p2"])})

    assert dones["p1"] and dones["p2"]
    assert infos["p1"]["winner"] == 1
    assert rewards["p1"] == 1.0 + 5.0
    assert rewards["p2"] == 1.0 - 5.0
    assert infos["p1"]["events"].count(EventKind.MATCH_WON.value) == 1


def test_custom_reward_fn():
    calls = []

    def reward_fn(events, agent_id, player_id):
        calls.append((agent_id, player_id))
        return float(len(events))

    env = PatternMirrorEnv("single", reward_fn=reward_fn, seed=0, device="cpu")
    obs = env.reset(seed=0)
    _, rewards, _, _ = env.step({"p1": perfect(obs["p1"])})

    assert calls == [("p1", 1)]
    assert rewards["p1"] > 0


def test_default_reward_ignores_other_players_events():
    events = [GameEvent(EventKind.ANSWER_CORRECT, player_id=2, round=1)]
    assert default_reward(events, "p1", 1) == 0.0
    assert default_reward(events, "p2", 2) == 1.0
