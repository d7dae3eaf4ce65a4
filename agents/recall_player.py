"""
Recall player: reproduces the pattern with tunable mistakes.
"""

from __future__ import annotations

from typing import Optional, Any
import torch

from agents.base_player import BasePlayer, PlayerParams
from core.grid import apply_mirror
from core.rounds import MirrorType


class RecallPlayer(BasePlayer):
    """
    Player that remembers the pattern and applies the mirror.

    With probability `mirror_blind_rate` it forgets the mirror for a whole
    answer; independently, each cell is flipped with probability
    `slip_rate`. With both rates at 0 every answer is correct.
    """

    def __init__(self, player_id: int = 1, params: Optional[PlayerParams] = None):
        """
        Initialize recall player.

        Args:
            player_id: Player this agent controls
            params: PlayerParams (slip_rate, mirror_blind_rate and seed are used)
        """
        super().__init__(player_id, params)
        self.generator = torch.Generator()
        if self.params.seed is not None:
            self.generator.manual_seed(self.params.seed)

    def get_answer(self, obs: dict[str, Any]) -> dict[str, Any]:
        """
        Reproduce the mirrored pattern, with mistakes.

        Args:
            obs: Agent observation from environment

        Returns:
            Action dict with the answer grid
        """
        pattern = torch.as_tensor(obs["pattern"], dtype=torch.bool)
        mirror_type = MirrorType(obs["mirror_type"])

        forgot_mirror = torch.rand(1, generator=self.generator).item() < self.params.mirror_blind_rate
        answer = apply_mirror(pattern, MirrorType.NONE if forgot_mirror else mirror_type)

        # Generate on CPU with seeded generator, then move to the pattern's device
        slips = (torch.rand(answer.shape, generator=self.generator) < self.params.slip_rate).to(answer.device)
        return {"answer": answer ^ slips}
