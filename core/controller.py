"""
Presentation-facing game controller.

Holds at most one live GameSession. `start_game` and `retry` replace it,
`reset_to_menu` retires it; the event bus survives across sessions so a
renderer subscribes once.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

import torch

from core.events import EventBus, EventCallback, EventKind, GameEvent
from core.game_session import NO_WINNER, GameMode, GameSession, Screen, SessionParams
from core.player_state import PlayerState

logger = logging.getLogger(__name__)


class GameController:
    """
    Entry point for the presentation layer.

    Example:
        ```python
        controller = GameController()
        controller.subscribe(lambda event: audio.play(event.sound_cue))
        controller.start_game("single")
        controller.toggle_cell(1, 0, 2)
        controller.check_answer(1)
        # once per frame
        controller.update()
        ```

    Attributes:
        params: SessionParams used for every new session; a seeded controller
            plays game k with seed + k
        games_started: Number of sessions created so far
        events: EventBus shared by all sessions
        session: The live GameSession, or None at the menu
    """

    def __init__(
        self,
        params: Optional[SessionParams] = None,
        clock: Optional[Callable[[], float]] = None,
        device: Optional[torch.device | str] = None
    ):
        """
        Initialize controller at the menu.

        Args:
            params: SessionParams for new sessions
            clock: Time source for deferred transitions
            device: Device for the grids
        """
        self.params = params if params is not None else SessionParams()
        self.clock = clock
        self.device = device
        self.events = EventBus()
        self.session: Optional[GameSession] = None
        self.games_started = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def screen(self) -> Screen:
        return Screen.MENU if self.session is None else self.session.screen

    @property
    def mode(self) -> Optional[GameMode]:
        return None if self.session is None else self.session.mode

    @property
    def winner(self) -> int:
        return NO_WINNER if self.session is None else self.session.winner

    def state(self, player_id: int) -> PlayerState:
        return self._live_session().state(player_id)

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        return self.events.subscribe(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(self, mode: GameMode | str) -> GameSession:
        """
        Start a fresh game, replacing any live session.

        Raises:
            ValueError: If mode is unknown
        """
        mode = GameMode(mode)
        self._retire_session()
        self.session = GameSession(
            mode,
            params=self._next_params(),
            events=self.events,
            clock=self.clock,
            device=self.device,
        )
        logger.info(f"Started {mode.value} game (session {self.session.session_id})")
        self.events.emit(GameEvent(EventKind.GAME_STARTED))
        return self.session

    def retry(self) -> GameSession:
        """Start a fresh game in the current mode."""
        return self.start_game(self._live_session().mode)

    def reset_to_menu(self) -> None:
        if self.session is None:
            return
        self._retire_session()
        self.events.emit(GameEvent(EventKind.RETURNED_TO_MENU))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def toggle_cell(self, player_id: int, row: int, col: int) -> bool:
        return self._live_session().toggle_cell(player_id, row, col)

    def check_answer(self, player_id: int) -> bool:
        return self._live_session().check_answer(player_id)

    def update(self, now: Optional[float] = None) -> int:
        """Resolve due transitions of the live session (no-op at the menu)."""
        if self.session is None:
            return 0
        return self.session.update(now)

    def _next_params(self) -> SessionParams:
        # Seeded controllers offset the seed per game so a retry deals new patterns
        params = self.params
        if params.seed is not None:
            params = replace(params, seed=params.seed + self.games_started)
        self.games_started += 1
        return params

    def _live_session(self) -> GameSession:
        if self.session is None:
            raise RuntimeError("No game in progress; call start_game() first")
        return self.session

    def _retire_session(self) -> None:
        if self.session is not None:
            logger.debug(f"Retiring session {self.session.session_id}")
            self.session.close()
            self.session = None


__all__ = ["GameController"]
