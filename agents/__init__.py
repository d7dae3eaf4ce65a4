"""
Scripted players for Pattern Mirror.

Modules:
    base_player: BasePlayer and PlayerParams
    random_player: RandomPlayer baseline
    recall_player: RecallPlayer with tunable slip and mirror-blind rates
"""

from agents.base_player import BasePlayer, PlayerParams
from agents.random_player import RandomPlayer
from agents.recall_player import RecallPlayer

__all__ = [
    "BasePlayer",
    "PlayerParams",
    "RandomPlayer",
    "RecallPlayer",
]
