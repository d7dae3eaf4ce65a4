"""
Random baseline player.
"""

from __future__ import annotations

from typing import Optional, Any
import torch

from agents.base_player import BasePlayer, PlayerParams
from core.grid import generate_pattern


class RandomPlayer(BasePlayer):
    """
    Ignores the pattern and submits a random grid of the right size.
    """

    def __init__(self, player_id: int = 1, params: Optional[PlayerParams] = None):
        super().__init__(player_id, params)
        self.generator = torch.Generator()
        if self.params.seed is not None:
            self.generator.manual_seed(self.params.seed)

    def get_answer(self, obs: dict[str, Any]) -> dict[str, Any]:
        answer = generate_pattern(
            int(obs["grid_size"]),
            density=self.params.density,
            generator=self.generator,
            device=obs["pattern"].device,
        )
        return {"answer": answer}
