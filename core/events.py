"""
Outcome events emitted by the round controller.

Presentation layers subscribe to these to trigger audio/visual cues
without diffing state themselves.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    CELL_TOGGLED = "cellToggled"
    ANSWER_CORRECT = "answerCorrect"
    ANSWER_WRONG = "answerWrong"
    ROUND_ADVANCED = "roundAdvanced"
    PLAYER_FINISHED = "playerFinished"
    GAME_OVER = "gameOver"
    MATCH_WON = "matchWon"
    GAME_STARTED = "gameStarted"
    RETURNED_TO_MENU = "returnedToMenu"


# Cue names the audio collaborator plays for each event
SOUND_CUES = {
    EventKind.CELL_TOGGLED: "cell_click",
    EventKind.ANSWER_CORRECT: "correct",
    EventKind.ANSWER_WRONG: "wrong",
    EventKind.PLAYER_FINISHED: "victory",
    EventKind.MATCH_WON: "victory",
    EventKind.GAME_OVER: "game_over",
    EventKind.GAME_STARTED: "menu_click",
}


@dataclass(frozen=True)
class GameEvent:
    """
    A single outcome event.

    Attributes:
        kind: Event kind
        player_id: Player the event concerns (0 for session-level events)
        round: Player's round when the event fired
        winner: Winning player id for MATCH_WON
        row: Toggled row for CELL_TOGGLED
        col: Toggled column for CELL_TOGGLED
    """
    kind: EventKind
    player_id: int = 0
    round: int = 0
    winner: Optional[int] = None
    row: Optional[int] = None
    col: Optional[int] = None

    @property
    def sound_cue(self) -> Optional[str]:
        return SOUND_CUES.get(self.kind)


EventCallback = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous fan-out of GameEvents to subscribers.

    Keeps a bounded history so polling renderers can read recent events.
    """

    def __init__(self, history_size: int = 64):
        self._subscribers: list[EventCallback] = []
        self.history: Deque[GameEvent] = deque(maxlen=history_size)

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """
        Register a callback.

        Returns:
            Function that removes the subscription when called
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: GameEvent) -> None:
        """
        Deliver an event to every subscriber.

        A subscriber that raises is logged and skipped; the remaining
        subscribers still receive the event and game state is unaffected.
        """
        logger.debug(f"event {event.kind.value} player={event.player_id} round={event.round}")
        self.history.append(event)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed on {event.kind.value} event")

    def clear_history(self) -> None:
        self.history.clear()


__all__ = ["EventKind", "GameEvent", "EventBus", "EventCallback", "SOUND_CUES"]
