"""
Round controller for a single game session.

A GameSession owns the progression of one or two players from round 1 to
the end of the game. Check actions resolve in two steps: the verdict is
applied immediately (status, score, lives) and the round/life consequences
are deferred by a short display window through a DeferredScheduler.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, Optional

import torch

from core.events import EventBus, EventKind, GameEvent
from core.grid import grids_match
from core.player_state import PlayerState, PlayerStatus, advance_round, create_player_state
from core.rounds import (
    CORRECT_DELAY_SEC,
    MAX_LIVES,
    MAX_ROUNDS,
    PATTERN_DENSITY,
    POINTS_PER_ROUND,
    WRONG_DELAY_SEC,
)
from core.scheduler import DeferredScheduler

logger = logging.getLogger(__name__)

NO_WINNER = 0


class GameMode(str, Enum):
    SINGLE = "single"
    VERSUS = "versus"


class Screen(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"
    VICTORY = "victory"


@dataclass
class SessionParams:
    """
    Parameters for a game session.

    Attributes:
        seed: Seed for pattern generation (None for nondeterministic patterns).
            A session replays the same pattern sequence for the same seed.
        density: Probability that a pattern cell is on
        correct_delay: Seconds between a correct check and the round advancing
        wrong_delay: Seconds between a wrong check and the retry/game over
    """
    seed: Optional[int] = None
    density: float = PATTERN_DENSITY
    correct_delay: float = CORRECT_DELAY_SEC
    wrong_delay: float = WRONG_DELAY_SEC


class GameSession:
    """
    One live game: single-player or two-player versus.

    In SINGLE mode player 1 plays until round MAX_ROUNDS is cleared
    (victory) or lives run out (game over). In VERSUS mode players 1 and 2
    progress independently and the first to clear round MAX_ROUNDS wins the
    match; wrong answers cost a life but never end the match.

    Attributes:
        session_id: Unique id, used to drop transitions from replaced sessions
        mode: GameMode
        params: SessionParams
        players: Mapping of player id to PlayerState
        winner: Winning player id in VERSUS mode (NO_WINNER until decided)
        screen: Screen.PLAYING until the game ends
        events: EventBus that outcome events are emitted on
        scheduler: DeferredScheduler holding pending transitions
    """

    _ids = itertools.count(1)

    def __init__(
        self,
        mode: GameMode | str,
        params: Optional[SessionParams] = None,
        events: Optional[EventBus] = None,
        clock: Optional[Callable[[], float]] = None,
        device: Optional[torch.device | str] = None
    ):
        """
        Start a session at round 1 for every player.

        Args:
            mode: "single" or "versus"
            params: SessionParams (defaults used when None)
            events: EventBus to emit on (a private bus when None)
            clock: Time source for deferred transitions
            device: Device for the grids (cpu/cuda/mps)

        Raises:
            ValueError: If mode is not a known GameMode
        """
        self.mode = GameMode(mode)
        self.params = params if params is not None else SessionParams()
        self.events = events if events is not None else EventBus()
        self.scheduler = DeferredScheduler(clock)
        self.session_id = next(self._ids)

        from utils.device import resolve_device
        self.device = resolve_device(device)

        self.generator = torch.Generator()
        if self.params.seed is not None:
            self.generator.manual_seed(self.params.seed)
        else:
            self.generator.seed()

        player_ids = (1,) if self.mode is GameMode.SINGLE else (1, 2)
        self.players: dict[int, PlayerState] = {
            pid: create_player_state(
                pid,
                round_num=1,
                lives=MAX_LIVES,
                density=self.params.density,
                generator=self.generator,
                device=self.device,
            )
            for pid in player_ids
        }
        self.winner = NO_WINNER
        self.screen = Screen.PLAYING
        self.closed = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def player_ids(self) -> list[int]:
        return list(self.players)

    @property
    def is_over(self) -> bool:
        return self.screen is not Screen.PLAYING

    def state(self, player_id: int) -> PlayerState:
        """
        Get a player's state.

        Raises:
            ValueError: If the player is not part of this session
        """
        try:
            return self.players[player_id]
        except KeyError:
            raise ValueError(
                f"Unknown player {player_id!r} for {self.mode.value} session "
                f"(players: {self.player_ids})"
            ) from None

    def summary(self) -> dict[str, Any]:
        """Result-screen data: per-player progress plus the outcome."""
        return {
            "mode": self.mode.value,
            "screen": self.screen.value,
            "winner": self.winner,
            "players": {
                pid: {
                    "round": state.round,
                    "rounds_completed": state.rounds_completed,
                    "score": state.score,
                    "lives": state.lives,
                    "status": state.status.value,
                }
                for pid, state in self.players.items()
            },
        }

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def toggle_cell(self, player_id: int, row: int, col: int) -> bool:
        """
        Flip one answer cell for a player.

        Returns:
            True if the cell was toggled, False if the player cannot act
            right now (result window, finished, or match over)

        Raises:
            ValueError: For unknown players or out-of-range coordinates
        """
        state = self.state(player_id)
        if not self._can_act(state):
            return False

        state.toggle(row, col)
        self.events.emit(GameEvent(
            EventKind.CELL_TOGGLED, player_id=player_id, round=state.round, row=row, col=col
        ))
        return True

    def check_answer(self, player_id: int) -> bool:
        """
        Compare a player's answer with the mirrored pattern.

        A correct answer scores POINTS_PER_ROUND and schedules the round
        advance; a wrong one costs a life and schedules the retry.

        Returns:
            True if the check was applied, False if the player cannot act

        Raises:
            ValueError: For unknown players
        """
        state = self.state(player_id)
        if not self._can_act(state):
            logger.debug(f"check ignored for player {player_id} (status={state.status.value})")
            return False

        if grids_match(state.target(), state.answer):
            self._mark_correct(state)
        else:
            self._mark_wrong(state)
        return True

    def update(self, now: Optional[float] = None) -> int:
        """Resolve deferred transitions that are due; returns how many ran."""
        return self.scheduler.poll(now)

    def flush(self) -> int:
        """Resolve every pending transition immediately."""
        return self.scheduler.flush()

    def close(self) -> None:
        """Retire the session; pending transitions are dropped."""
        self.closed = True
        self.scheduler.cancel_all()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _can_act(self, state: PlayerState) -> bool:
        return not self.closed and not self.is_over and state.is_playing

    def _mark_correct(self, state: PlayerState) -> None:
        state.status = PlayerStatus.CORRECT
        state.score += POINTS_PER_ROUND
        self.scheduler.schedule(
            self.params.correct_delay,
            partial(self._resolve_correct, state.player_id, state.round),
            label=f"p{state.player_id}-correct",
        )
        self.events.emit(GameEvent(EventKind.ANSWER_CORRECT, player_id=state.player_id, round=state.round))

    def _mark_wrong(self, state: PlayerState) -> None:
        state.status = PlayerStatus.WRONG
        state.lives = max(0, state.lives - 1)
        self.scheduler.schedule(
            self.params.wrong_delay,
            partial(self._resolve_wrong, state.player_id, state.round),
            label=f"p{state.player_id}-wrong",
        )
        self.events.emit(GameEvent(EventKind.ANSWER_WRONG, player_id=state.player_id, round=state.round))

    def _is_stale(self, player_id: int, round_num: int, expected: PlayerStatus) -> bool:
        state = self.players[player_id]
        if self.closed or state.round != round_num or state.status is not expected:
            logger.warning(
                f"Dropping stale {expected.value} transition for player {player_id} "
                f"(session {self.session_id}, round {round_num})"
            )
            return True
        return False

    def _resolve_correct(self, player_id: int, round_num: int) -> None:
        if self._is_stale(player_id, round_num, PlayerStatus.CORRECT):
            return
        state = self.players[player_id]

        if self.mode is GameMode.VERSUS:
            if self.winner != NO_WINNER:
                logger.debug(f"Match already won by player {self.winner}; player {player_id} stays put")
                return
            if round_num + 1 > MAX_ROUNDS:
                self._declare_winner(state)
                return
        elif round_num >= MAX_ROUNDS:
            state.status = PlayerStatus.FINISHED
            state.won = True
            self.screen = Screen.VICTORY
            logger.info(f"Player {player_id} cleared all {MAX_ROUNDS} rounds with score {state.score}")
            self.events.emit(GameEvent(EventKind.PLAYER_FINISHED, player_id=player_id, round=round_num))
            return

        next_state = advance_round(state, density=self.params.density, generator=self.generator)
        self.players[player_id] = next_state
        logger.debug(
            f"Player {player_id} advanced to round {next_state.round} "
            f"(grid {next_state.grid_size}, mirror {next_state.mirror_type.value})"
        )
        self.events.emit(GameEvent(EventKind.ROUND_ADVANCED, player_id=player_id, round=next_state.round))

    def _resolve_wrong(self, player_id: int, round_num: int) -> None:
        if self._is_stale(player_id, round_num, PlayerStatus.WRONG):
            return
        state = self.players[player_id]

        if self.mode is GameMode.VERSUS:
            if self.winner != NO_WINNER:
                return
        elif state.lives == 0:
            state.status = PlayerStatus.FINISHED
            self.screen = Screen.GAME_OVER
            logger.info(f"Player {player_id} ran out of lives in round {round_num}")
            self.events.emit(GameEvent(EventKind.GAME_OVER, player_id=player_id, round=round_num))
            return

        # Retry the same pattern with the answer as it was
        state.status = PlayerStatus.PLAYING

    def _declare_winner(self, state: PlayerState) -> None:
        # Write-once: the first completion processed wins
        if self.winner != NO_WINNER:
            return
        self.winner = state.player_id
        state.status = PlayerStatus.FINISHED
        state.won = True
        self.screen = Screen.VICTORY
        logger.info(f"Player {state.player_id} wins the match")
        self.events.emit(GameEvent(
            EventKind.MATCH_WON, player_id=state.player_id, round=state.round, winner=state.player_id
        ))


__all__ = ["GameMode", "Screen", "SessionParams", "GameSession", "NO_WINNER"]
