"""
Core game logic for Pattern Mirror.

The grid engine (pure functions over bool tensors) and the round
controller (per-player progression, two-player match arbitration and the
presentation-facing GameController).
"""

from core.rounds import MirrorType, MAX_ROUNDS, MAX_LIVES
from core.grid import generate_pattern, create_empty_grid, apply_mirror, grids_match
from core.events import EventKind, GameEvent, EventBus
from core.player_state import PlayerState, PlayerStatus
from core.game_session import GameMode, GameSession, Screen, SessionParams, NO_WINNER
from core.controller import GameController

__all__ = [
    "MirrorType",
    "MAX_ROUNDS",
    "MAX_LIVES",
    "generate_pattern",
    "create_empty_grid",
    "apply_mirror",
    "grids_match",
    "EventKind",
    "GameEvent",
    "EventBus",
    "PlayerState",
    "PlayerStatus",
    "GameMode",
    "GameSession",
    "Screen",
    "SessionParams",
    "NO_WINNER",
    "GameController",
]
