"""
Base class for scripted Pattern Mirror players.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Any


@dataclass
class PlayerParams:
    """
    Parameters for scripted players.

    Attributes:
        slip_rate: Probability of getting any single cell wrong
        mirror_blind_rate: Probability of forgetting to apply the round's mirror
        density: Cell density used by players that guess at random
        seed: Random seed for reproducibility
    """
    slip_rate: float = 0.0
    mirror_blind_rate: float = 0.0
    density: float = 0.4
    seed: Optional[int] = None


class BasePlayer(ABC):
    """
    Abstract base class for players driven through PatternMirrorEnv.

    Players see the pattern, their current answer and the round's mirror
    type, and submit a complete answer grid.
    """

    def __init__(self, player_id: int = 1, params: Optional[PlayerParams] = None):
        """
        Initialize player.

        Args:
            player_id: Player this agent controls (1 or 2)
            params: PlayerParams with configuration
        """
        self.player_id = player_id
        self.params = params if params is not None else PlayerParams()

    @abstractmethod
    def get_answer(self, obs: dict[str, Any]) -> dict[str, Any]:
        """
        Get answer action from observation.

        Args:
            obs: Agent observation from the environment containing:
                - "pattern": [N, N] bool tensor
                - "answer": [N, N] bool tensor (current answer)
                - "mirror_type": "none" | "horizontal" | "vertical" | "both"
                - "grid_size", "round", "lives", "score", "status"
                - "opponent_round" (versus mode only)

        Returns:
            Action dict {"answer": [N, N] bool tensor}
        """
        pass

    def reset(self) -> None:
        """Reset agent state for a new game (optional)."""
        pass
