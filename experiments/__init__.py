"""
Experiments module for Pattern Mirror.

Runs many games between scripted players and collects results with
callback-based trackers.

Exported Classes:
    MatchExperiment: Game-running orchestration class
    GameTracker: Abstract base class for trackers
    SummaryTracker: Aggregate statistics tracker (O(1) memory)
    EpisodeTracker: Per-game results tracker (O(n_games) memory)

Example:
    >>> from experiments import MatchExperiment, SummaryTracker
    >>> from envs import PatternMirrorEnv
    >>> from agents import RecallPlayer, PlayerParams
    >>>
    >>> exp = MatchExperiment(
    ...     env_factory=lambda seed: PatternMirrorEnv("single", seed=seed),
    ...     max_steps=100
    ... )
    >>> player = RecallPlayer(1, PlayerParams(slip_rate=0.03, seed=0))
    >>> results = exp.run_games(
    ...     policy_map={"p1": player.get_answer},
    ...     n_games=50,
    ...     tracker=SummaryTracker(),
    ...     seed=42
    ... )
    >>> print(f"Victory rate: {results['win_rate'].get(1, 0.0):.2%}")
"""

from experiments.trackers import GameTracker, SummaryTracker, EpisodeTracker, winner_of
from experiments.match_experiment import MatchExperiment

__all__ = [
    "MatchExperiment",
    "GameTracker",
    "SummaryTracker",
    "EpisodeTracker",
    "winner_of",
]
