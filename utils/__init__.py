"""
Utility functions for Pattern Mirror.
"""

from utils.device import (
    get_device,
    get_device_name,
    resolve_device,
    to_numpy,
    to_torch,
    DEFAULT_DEVICE,
    DEVICE_NAME
)

__all__ = [
    "get_device",
    "get_device_name",
    "resolve_device",
    "to_numpy",
    "to_torch",
    "DEFAULT_DEVICE",
    "DEVICE_NAME",
]
