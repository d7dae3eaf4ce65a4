"""
Game trackers for Pattern Mirror experiments.

Trackers receive callbacks while MatchExperiment drives games and
accumulate data for analysis.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Union
import numpy as np
import torch

from core.game_session import NO_WINNER


def _to_float(x: Union[float, np.ndarray, torch.Tensor]) -> float:
    """Convert a scalar reward (float, array or tensor) to a Python float."""
    if isinstance(x, torch.Tensor):
        return float(x.detach().cpu().sum())
    return float(np.sum(x))


def winner_of(final_infos: dict[str, dict[str, Any]]) -> int:
    """
    Winning player id for a finished game, 0 if nobody won.

    A single-player victory counts as a win for player 1.
    """
    info = next(iter(final_infos.values()), {})
    if info.get("winner", NO_WINNER) != NO_WINNER:
        return int(info["winner"])
    if info.get("screen") == "victory":
        return 1
    return NO_WINNER


class GameTracker(ABC):
    """
    Abstract base class for game trackers.

    Trackers receive callbacks during game execution:
    - on_step: Called after each environment step
    - on_episode_end: Called when a game ends
    - get_results: Returns accumulated results
    """

    @abstractmethod
    def on_step(
        self,
        step: int,
        obs_dict: dict[str, Any],
        actions_dict: dict[str, Any],
        rewards_dict: dict[str, float],
        dones_dict: dict[str, bool],
        infos_dict: dict[str, Any]
    ) -> None:
        """
        Called after each environment step.

        Args:
            step: Current step number
            obs_dict: Observations for each agent
            actions_dict: Actions from each agent
            rewards_dict: Rewards for each agent
            dones_dict: Done flags for each agent
            infos_dict: Info dicts for each agent
        """
        pass

    @abstractmethod
    def on_episode_end(self, episode_idx: int, final_infos: dict[str, Any]) -> None:
        """
        Called when a game ends (or hits the step limit).

        Args:
            episode_idx: Index of the completed game
            final_infos: Final info dict from the environment
        """
        pass

    @abstractmethod
    def get_results(self) -> Any:
        pass

    def reset(self) -> None:
        """Reset tracker state (optional)."""
        pass


class SummaryTracker(GameTracker):
    """
    Tracker that accumulates summary statistics.

    Only stores aggregates: win counts per player, game-over count, and
    running sums of rounds completed, score and reward per agent.
    """

    def __init__(self):
        self.total_games = 0
        self.total_steps = 0
        self.agent_ids: list[str] = []

        self.wins: dict[int, int] = {}
        self.game_overs = 0

        self.total_rounds: dict[str, float] = {}
        self.total_scores: dict[str, float] = {}
        self.total_rewards: dict[str, float] = {}
        self.reward_sum_sq: dict[str, float] = {}

        self.current_episode_rewards: dict[str, float] = {}

    def _ensure_agent(self, agent_id: str) -> None:
        if agent_id not in self.total_rewards:
            self.agent_ids.append(agent_id)
            self.total_rounds[agent_id] = 0.0
            self.total_scores[agent_id] = 0.0
            self.total_rewards[agent_id] = 0.0
            self.reward_sum_sq[agent_id] = 0.0
            self.current_episode_rewards[agent_id] = 0.0

    def on_step(
        self,
        step: int,
        obs_dict: dict[str, Any],
        actions_dict: dict[str, Any],
        rewards_dict: dict[str, float],
        dones_dict: dict[str, bool],
        infos_dict: dict[str, Any]
    ) -> None:
        """Accumulate rewards for the current game."""
        for agent_id, reward in rewards_dict.items():
            self._ensure_agent(agent_id)
            self.current_episode_rewards[agent_id] += _to_float(reward)
        self.total_steps += 1

    def on_episode_end(self, episode_idx: int, final_infos: dict[str, Any]) -> None:
        """Fold the finished game into the aggregates."""
        for agent_id, info in final_infos.items():
            self._ensure_agent(agent_id)
            episode_total = self.current_episode_rewards[agent_id]
            self.total_rewards[agent_id] += episode_total
            self.reward_sum_sq[agent_id] += episode_total ** 2
            self.total_rounds[agent_id] += info.get("rounds_completed", 0)
            self.total_scores[agent_id] += info.get("score", 0)
            self.current_episode_rewards[agent_id] = 0.0

        winner = winner_of(final_infos)
        if winner != NO_WINNER:
            self.wins[winner] = self.wins.get(winner, 0) + 1
        if next(iter(final_infos.values()), {}).get("screen") == "game_over":
            self.game_overs += 1

        self.total_games += 1

    def get_results(self) -> dict[str, Any]:
        """
        Get summary statistics.

        Returns:
            Dictionary with:
                - total_games: Number of games played
                - win_rate: Dict of player id -> fraction of games won
                - game_over_rate: Fraction of games lost on lives
                - avg_steps: Average steps per game
                - avg_rounds_completed: Dict of agent id -> mean rounds cleared
                - avg_score: Dict of agent id -> mean final score
                - rewards_per_agent: Dict of average rewards per agent
                - reward_std_per_agent: Dict of reward std per agent
        """
        if self.total_games == 0:
            return {
                "total_games": 0,
                "win_rate": {},
                "game_over_rate": 0.0,
                "avg_steps": 0.0,
                "avg_rounds_completed": {},
                "avg_score": {},
                "rewards_per_agent": {},
                "reward_std_per_agent": {},
            }

        n = self.total_games
        avg_rewards = {}
        std_rewards = {}
        for agent_id in self.agent_ids:
            mean = self.total_rewards[agent_id] / n
            # Var = E[X^2] - E[X]^2
            variance = max(0.0, (self.reward_sum_sq[agent_id] / n) - mean ** 2)
            avg_rewards[agent_id] = mean
            std_rewards[agent_id] = float(np.sqrt(variance))

        return {
            "total_games": n,
            "win_rate": {pid: count / n for pid, count in sorted(self.wins.items())},
            "game_over_rate": self.game_overs / n,
            "avg_steps": self.total_steps / n,
            "avg_rounds_completed": {aid: self.total_rounds[aid] / n for aid in self.agent_ids},
            "avg_score": {aid: self.total_scores[aid] / n for aid in self.agent_ids},
            "rewards_per_agent": avg_rewards,
            "reward_std_per_agent": std_rewards,
        }

    def reset(self) -> None:
        """Reset all statistics."""
        self.__init__()


class EpisodeTracker(GameTracker):
    """
    Tracker that stores per-game results.

    Keeps one record per game: winner, outcome screen, steps, and per-agent
    rounds completed, score, lives and total reward.
    """

    def __init__(self):
        self.episodes: list[dict[str, Any]] = []
        self.current_episode_rewards: dict[str, float] = {}
        self.current_steps = 0

    def on_step(
        self,
        step: int,
        obs_dict: dict[str, Any],
        actions_dict: dict[str, Any],
        rewards_dict: dict[str, float],
        dones_dict: dict[str, bool],
        infos_dict: dict[str, Any]
    ) -> None:
        for agent_id, reward in rewards_dict.items():
            self.current_episode_rewards[agent_id] = (
                self.current_episode_rewards.get(agent_id, 0.0) + _to_float(reward)
            )
        self.current_steps += 1

    def on_episode_end(self, episode_idx: int, final_infos: dict[str, Any]) -> None:
        first = next(iter(final_infos.values()), {})
        self.episodes.append({
            "episode_idx": episode_idx,
            "winner": winner_of(final_infos),
            "screen": first.get("screen"),
            "steps": self.current_steps,
            "players": {
                agent_id: {
                    "rounds_completed": info.get("rounds_completed", 0),
                    "score": info.get("score", 0),
                    "lives": info.get("lives", 0),
                    "total_reward": self.current_episode_rewards.get(agent_id, 0.0),
                }
                for agent_id, info in final_infos.items()
            },
        })
        self.current_episode_rewards = {}
        self.current_steps = 0

    def get_results(self) -> list[dict]:
        """
        Get list of game records.

        Returns:
            List of dicts, one per game, containing:
                - episode_idx: Game index
                - winner: Winning player id (0 if none)
                - screen: Final screen ("victory", "game_over" or "playing" on timeout)
                - steps: Steps taken
                - players: Per-agent rounds_completed, score, lives, total_reward
        """
        return self.episodes

    def reset(self) -> None:
        """Clear all episode data."""
        self.__init__()
