"""
Pytest configuration for Pattern Mirror.

Pins grids to the CPU so tests are deterministic and don't need a GPU.
"""

import os

# Must be set before utils.device is imported.
os.environ.setdefault("PATTERN_MIRROR_DEVICE", "cpu")
