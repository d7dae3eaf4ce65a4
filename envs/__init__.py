"""
Environments module for Pattern Mirror.

This module provides a turn-based multi-agent environment over the round
controller, used by scripted players and experiments.
"""

from envs.pattern_env import PatternMirrorEnv, default_reward

__all__ = ["PatternMirrorEnv", "default_reward"]
