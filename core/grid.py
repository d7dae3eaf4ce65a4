"""
Grid engine for Pattern Mirror.

Pure functions over square boolean grids. A grid is a 2-D torch.bool
tensor; nothing here keeps state, and no function mutates its inputs.
"""

from __future__ import annotations

from typing import Any, Optional

import torch

from core.rounds import MirrorType, PATTERN_DENSITY

Grid = torch.Tensor


def as_grid(data: Any, device: Optional[torch.device | str] = None) -> Grid:
    """
    Coerce nested lists, numpy arrays or tensors into a bool grid.

    Args:
        data: Grid-like data with two dimensions
        device: Optional target device

    Returns:
        [N, M] bool tensor

    Raises:
        ValueError: If data is not two-dimensional
    """
    grid = torch.as_tensor(data, dtype=torch.bool, device=device)
    if grid.ndim != 2:
        raise ValueError(f"Grid must be 2-D, got shape {tuple(grid.shape)}")
    return grid


def generate_pattern(
    size: int,
    density: float = PATTERN_DENSITY,
    generator: Optional[torch.Generator] = None,
    device: Optional[torch.device | str] = None
) -> Grid:
    """
    Generate a random size x size pattern.

    Each cell is independently on with probability `density`. Values of
    density outside [0, 1] are the caller's responsibility.

    Args:
        size: Grid side length (>= 1)
        density: Probability that a cell is on
        generator: Optional seeded generator for reproducible patterns
        device: Device to place the grid on

    Returns:
        [size, size] bool tensor
    """
    if size < 1:
        raise ValueError(f"Grid size must be >= 1, got {size}")
    # Draw on CPU with the (CPU) generator, then move to the target device
    pattern = torch.rand((size, size), generator=generator) < density
    return pattern.to(device) if device is not None else pattern


def create_empty_grid(size: int, device: Optional[torch.device | str] = None) -> Grid:
    """Return a size x size grid with every cell off."""
    if size < 1:
        raise ValueError(f"Grid size must be >= 1, got {size}")
    return torch.zeros((size, size), dtype=torch.bool, device=device)


def apply_mirror(grid: Grid, mirror_type: MirrorType | str) -> Grid:
    """
    Apply a mirror transform, returning a new grid.

    HORIZONTAL reverses each row, VERTICAL reverses the row order and BOTH
    does both (a 180 degree rotation). NONE returns a copy. Every non-identity
    mirror is its own inverse.

    Args:
        grid: [N, M] bool tensor
        mirror_type: MirrorType or its string value

    Returns:
        Transformed [N, M] bool tensor
    """
    mirror_type = MirrorType(mirror_type)
    grid = as_grid(grid)

    if mirror_type is MirrorType.HORIZONTAL:
        return torch.flip(grid, dims=[1])
    if mirror_type is MirrorType.VERTICAL:
        return torch.flip(grid, dims=[0])
    if mirror_type is MirrorType.BOTH:
        return torch.flip(grid, dims=[0, 1])
    return grid.clone()


def grids_match(a: Grid, b: Grid) -> bool:
    """
    Structural equality of two grids.

    Grids with different dimensions never match; this is not an error.
    """
    a = as_grid(a)
    b = as_grid(b, device=a.device)
    if a.shape != b.shape:
        return False
    return bool(torch.equal(a, b))


__all__ = [
    "Grid",
    "as_grid",
    "generate_pattern",
    "create_empty_grid",
    "apply_mirror",
    "grids_match",
]
