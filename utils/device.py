"""
Device management utilities for PyTorch.

Provides centralized GPU detection and device management for CUDA (NVIDIA),
MPS (Apple Silicon), and CPU fallback. Set PATTERN_MIRROR_DEVICE to force a
specific device (e.g. "cpu" for tests).
"""

import os

import torch

_override = os.environ.get("PATTERN_MIRROR_DEVICE")

# Detect best available device
if _override:
    DEFAULT_DEVICE = torch.device(_override)
    DEVICE_NAME = _override.upper()
elif torch.cuda.is_available():
    DEFAULT_DEVICE = torch.device("cuda")
    DEVICE_NAME = "CUDA"
elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
    DEFAULT_DEVICE = torch.device("mps")
    DEVICE_NAME = "MPS (Apple Silicon)"
else:
    DEFAULT_DEVICE = torch.device("cpu")
    DEVICE_NAME = "CPU"


def get_device() -> torch.device:
    """
    Get the default compute device.

    Returns:
        torch.device: PATTERN_MIRROR_DEVICE if set, else best available (CUDA > MPS > CPU)
    """
    return DEFAULT_DEVICE


def get_device_name() -> str:
    """
    Get human-readable device name.

    Returns:
        str: Device name (e.g., "CUDA", "MPS (Apple Silicon)", "CPU")
    """
    return DEVICE_NAME


def resolve_device(device=None) -> torch.device:
    """Normalize a device argument, falling back to the default device."""
    if device is None:
        return DEFAULT_DEVICE
    return torch.device(device) if isinstance(device, str) else device


def to_numpy(tensor: torch.Tensor) -> "np.ndarray":
    """
    Convert PyTorch tensor to NumPy array.

    Handles device transfers (GPU -> CPU) automatically, so renderers can
    read grids without touching torch.

    Args:
        tensor: PyTorch tensor

    Returns:
        NumPy array
    """
    import numpy as np
    return tensor.detach().cpu().numpy()


def to_torch(array: "np.ndarray", device: torch.device = None) -> torch.Tensor:
    """
    Convert NumPy array to PyTorch tensor.

    Args:
        array: NumPy array
        device: Target device (defaults to DEFAULT_DEVICE)

    Returns:
        PyTorch tensor on specified device
    """
    import numpy as np
    return torch.from_numpy(np.ascontiguousarray(array)).to(resolve_device(device))
