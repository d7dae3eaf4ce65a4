"""
Per-player progression state.

A PlayerState is one player's view of the game: which round they are on,
their score and lives, the pattern they must reproduce and the answer they
are editing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import torch

from core.grid import Grid, apply_mirror, create_empty_grid, generate_pattern
from core.rounds import (
    MAX_LIVES,
    PATTERN_DENSITY,
    MirrorType,
    grid_size_for_round,
    mirror_type_for_round,
)


class PlayerStatus(str, Enum):
    PLAYING = "playing"
    CORRECT = "correct"
    WRONG = "wrong"
    FINISHED = "finished"


@dataclass
class PlayerState:
    """
    Progression state for a single player.

    Attributes:
        player_id: 1 or 2
        round: Current round (1..MAX_ROUNDS)
        score: Accumulated points
        lives: Remaining lives (0..MAX_LIVES)
        pattern: [N, N] bool tensor the player must reproduce (never edited)
        answer: [N, N] bool tensor the player is editing
        grid_size: N, a function of round
        mirror_type: Mirror applied to the pattern, a function of round
        status: PlayerStatus
        won: True once the player has completed the final round
    """
    player_id: int
    round: int
    score: int
    lives: int
    pattern: Grid
    answer: Grid
    grid_size: int
    mirror_type: MirrorType
    status: PlayerStatus = PlayerStatus.PLAYING
    won: bool = False

    @property
    def is_playing(self) -> bool:
        return self.status is PlayerStatus.PLAYING

    @property
    def rounds_completed(self) -> int:
        return self.round if self.won else self.round - 1

    def target(self) -> Grid:
        """Pattern after the round's mirror: what the answer must equal."""
        return apply_mirror(self.pattern, self.mirror_type)

    def toggle(self, row: int, col: int) -> bool:
        """
        Flip one answer cell.

        Raises:
            ValueError: If (row, col) is outside the grid

        Returns:
            New value of the cell
        """
        if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
            raise ValueError(
                f"Cell ({row}, {col}) is outside the {self.grid_size}x{self.grid_size} grid"
            )
        self.answer[row, col] = not bool(self.answer[row, col])
        return bool(self.answer[row, col])


def create_player_state(
    player_id: int,
    round_num: int = 1,
    score: int = 0,
    lives: int = MAX_LIVES,
    density: float = PATTERN_DENSITY,
    generator: Optional[torch.Generator] = None,
    device: Optional[torch.device | str] = None
) -> PlayerState:
    """
    Build a fresh PlayerState for a round.

    Grid size and mirror come from the difficulty curve; the pattern is
    freshly generated and the answer starts empty.

    Args:
        player_id: Player identity
        round_num: Round to build the state for
        score: Score carried into the round
        lives: Lives carried into the round (MAX_LIVES for a new game)
        density: Pattern cell density
        generator: Optional seeded generator
        device: Device for the grids

    Returns:
        PlayerState with status PLAYING
    """
    grid_size = grid_size_for_round(round_num)
    return PlayerState(
        player_id=player_id,
        round=round_num,
        score=score,
        lives=lives,
        pattern=generate_pattern(grid_size, density=density, generator=generator, device=device),
        answer=create_empty_grid(grid_size, device=device),
        grid_size=grid_size,
        mirror_type=mirror_type_for_round(round_num),
        status=PlayerStatus.PLAYING,
    )


def advance_round(
    state: PlayerState,
    density: float = PATTERN_DENSITY,
    generator: Optional[torch.Generator] = None
) -> PlayerState:
    """Next round's state for a player, carrying score and lives forward."""
    return create_player_state(
        player_id=state.player_id,
        round_num=state.round + 1,
        score=state.score,
        lives=state.lives,
        density=density,
        generator=generator,
        device=state.pattern.device,
    )


__all__ = ["PlayerStatus", "PlayerState", "create_player_state", "advance_round"]
