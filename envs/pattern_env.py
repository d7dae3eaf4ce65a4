"""
Turn-based multi-agent Pattern Mirror environment.

Wraps a GameSession in a reset/step API so scripted or learned players
can be driven without a renderer. Display delays are collapsed: every
step resolves all deferred transitions before returning.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import torch

from core.events import EventKind, GameEvent
from core.game_session import GameMode, GameSession, SessionParams
from core.grid import as_grid


def default_reward(events: list[GameEvent], agent_id: str, player_id: int) -> float:
    """
    Default reward: +1 per correct check, -1 per wrong check, +5 for
    finishing the game or winning the match, -5 for a game over or a lost
    match.

    Args:
        events: Events emitted during the step
        agent_id: Agent ID string
        player_id: Player id the agent controls

    Returns:
        Float reward
    """
    reward = 0.0
    for event in events:
        if event.kind is EventKind.MATCH_WON:
            reward += 5.0 if event.winner == player_id else -5.0
            continue
        if event.player_id != player_id:
            continue
        if event.kind is EventKind.ANSWER_CORRECT:
            reward += 1.0
        elif event.kind is EventKind.ANSWER_WRONG:
            reward -= 1.0
        elif event.kind is EventKind.PLAYER_FINISHED:
            reward += 5.0
        elif event.kind is EventKind.GAME_OVER:
            reward -= 5.0
    return reward


class PatternMirrorEnv:
    """
    Multi-agent Pattern Mirror environment.

    Agent IDs are ["p1"] in single mode and ["p1", "p2"] in versus mode.
    Each step, every agent that can act submits a full answer grid; the
    env toggles the cells that differ from the player's current answer,
    checks it, then resolves the deferred transitions. Agents are
    processed in agent-ID order, so when both players clear the final
    round in the same step, p1 wins.

    Attributes:
        mode: GameMode
        params: SessionParams used on every reset
        device: Device tensors are stored on
        session: Current GameSession
        reward_fn: Reward function (defaults to default_reward)
        agent_ids: List of agent IDs
    """

    def __init__(
        self,
        mode: GameMode | str = GameMode.SINGLE,
        params: Optional[SessionParams] = None,
        reward_fn: Optional[Callable[[list[GameEvent], str, int], float]] = None,
        seed: Optional[int] = None,
        device: Optional[torch.device | str] = None
    ):
        """
        Initialize environment.

        Args:
            mode: "single" or "versus"
            params: SessionParams (seed is overridden by `seed` when given)
            reward_fn: Optional custom reward function
            seed: Random seed for the first session
            device: Device to store tensors on (cpu/cuda/mps)
        """
        if device is None:
            from utils.device import get_device
            device = get_device()
        self.device = torch.device(device) if isinstance(device, str) else device

        self.mode = GameMode(mode)
        self.params = params if params is not None else SessionParams()
        self.reward_fn = reward_fn or default_reward
        self.agent_ids = ["p1"] if self.mode is GameMode.SINGLE else ["p1", "p2"]
        self.steps = 0
        self.session = self._new_session(seed)

    def _new_session(self, seed: Optional[int]) -> GameSession:
        params = self.params
        if seed is not None:
            params = SessionParams(
                seed=seed,
                density=params.density,
                correct_delay=params.correct_delay,
                wrong_delay=params.wrong_delay,
            )
        return GameSession(self.mode, params=params, device=self.device)

    @staticmethod
    def player_id(agent_id: str) -> int:
        return int(agent_id[1:])

    def reset(self, seed: Optional[int] = None) -> dict[str, Any]:
        """
        Start a new session.

        Args:
            seed: Random seed for the new session

        Returns:
            obs_dict: Dictionary mapping agent_id to observations
        """
        self.session.close()
        self.session = self._new_session(seed)
        self.steps = 0
        return self._get_observations()

    def step(
        self,
        actions_dict: dict[str, Optional[dict[str, Any]]]
    ) -> tuple[dict, dict, dict, dict]:
        """
        Execute one step.

        Args:
            actions_dict: Dictionary mapping agent_id to {"answer": grid}.
                Missing or None actions are skipped, as are actions for
                players that cannot act.

        Returns:
            Tuple of (obs_dict, rewards_dict, dones_dict, infos_dict)

        Raises:
            ValueError: If an answer grid has the wrong shape
        """
        events: list[GameEvent] = []
        unsubscribe = self.session.events.subscribe(events.append)
        try:
            for agent_id in self.agent_ids:
                action = actions_dict.get(agent_id)
                if not action or "answer" not in action:
                    continue
                pid = self.player_id(agent_id)
                if self.session.is_over or not self.session.state(pid).is_playing:
                    continue
                self._apply_answer(pid, action["answer"])
                self.session.check_answer(pid)
            self.session.flush()
        finally:
            unsubscribe()

        self.steps += 1

        obs_dict = self._get_observations()
        rewards_dict = {
            agent_id: self.reward_fn(events, agent_id, self.player_id(agent_id))
            for agent_id in self.agent_ids
        }
        dones_dict = {agent_id: self.session.is_over for agent_id in self.agent_ids}
        infos_dict = self.get_infos(events)

        return obs_dict, rewards_dict, dones_dict, infos_dict

    def _apply_answer(self, player_id: int, answer: Any) -> None:
        state = self.session.state(player_id)
        answer = as_grid(answer, device=state.answer.device)
        if answer.shape != state.answer.shape:
            raise ValueError(
                f"Answer for player {player_id} has shape {tuple(answer.shape)}. "
                f"Expected ({state.grid_size}, {state.grid_size})"
            )
        changed = torch.nonzero(answer ^ state.answer, as_tuple=False)
        for row, col in changed.tolist():
            self.session.toggle_cell(player_id, row, col)

    def _get_observations(self) -> dict[str, dict[str, Any]]:
        obs_dict = {}
        for agent_id in self.agent_ids:
            state = self.session.state(self.player_id(agent_id))
            obs = {
                "pattern": state.pattern.clone(),
                "answer": state.answer.clone(),
                "mirror_type": state.mirror_type.value,
                "grid_size": state.grid_size,
                "round": state.round,
                "lives": state.lives,
                "score": state.score,
                "status": state.status.value,
            }
            if self.mode is GameMode.VERSUS:
                other = 2 if state.player_id == 1 else 1
                obs["opponent_round"] = self.session.state(other).round
            obs_dict[agent_id] = obs
        return obs_dict

    def get_infos(self, events: Optional[list[GameEvent]] = None) -> dict[str, dict[str, Any]]:
        """Per-agent game info; `events` are the ones emitted during the last step."""
        kinds = [event.kind.value for event in events or []]
        infos = {}
        for agent_id in self.agent_ids:
            state = self.session.state(self.player_id(agent_id))
            infos[agent_id] = {
                "winner": self.session.winner,
                "screen": self.session.screen.value,
                "round": state.round,
                "rounds_completed": state.rounds_completed,
                "lives": state.lives,
                "score": state.score,
                "steps": self.steps,
                "events": kinds,
            }
        return infos


__all__ = ["PatternMirrorEnv", "default_reward"]
