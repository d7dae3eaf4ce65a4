"""
Experiment runner for Pattern Mirror.

This module provides the MatchExperiment class for playing many games
between scripted players and collecting results through trackers.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Any

from envs.pattern_env import PatternMirrorEnv
from experiments.trackers import GameTracker, SummaryTracker

logger = logging.getLogger(__name__)

# Seed offset between consecutive sweep configurations
SWEEP_SEED_STRIDE = 10000


class MatchExperiment:
    """
    Experiment runner for PatternMirrorEnv.

    Example:
        ```python
        exp = MatchExperiment(
            env_factory=lambda seed: PatternMirrorEnv("versus", seed=seed),
            max_steps=200
        )

        p1 = RecallPlayer(1, PlayerParams(slip_rate=0.02))
        p2 = RecallPlayer(2, PlayerParams(slip_rate=0.05))
        policy_map = {"p1": p1.get_answer, "p2": p2.get_answer}

        results = exp.run_games(policy_map=policy_map, n_games=100)
        print(f"P1 win rate: {results['win_rate'].get(1, 0.0):.2f}")
        ```

    Attributes:
        env_factory: Callable that creates an environment given a seed
        max_steps: Maximum steps per game before it is abandoned
    """

    def __init__(
        self,
        env_factory: Callable[[int], PatternMirrorEnv],
        max_steps: int = 200
    ):
        """
        Initialize experiment runner.

        Args:
            env_factory: Function that creates environment given seed.
                        Example: lambda seed: PatternMirrorEnv("single", seed=seed)
            max_steps: Maximum number of steps per game
        """
        self.env_factory = env_factory
        self.max_steps = max_steps

    def run_games(
        self,
        policy_map: dict[str, Callable[[dict], dict]],
        n_games: int,
        tracker: Optional[GameTracker] = None,
        seed: Optional[int] = None,
        verbose: bool = False
    ) -> Any:
        """
        Run n_games with given policies and tracker.

        Args:
            policy_map: Dictionary mapping agent_id to policy function.
                       Policy functions take an observation dict and return
                       an action dict. Must include all agents in the env.
            n_games: Number of games to run
            tracker: GameTracker instance to collect data. If None, uses SummaryTracker.
            seed: Random seed for first game (incremented for subsequent games)
            verbose: If True, print progress

        Returns:
            Results from tracker.get_results()

        Raises:
            ValueError: If policy_map doesn't cover all agents
        """
        if tracker is None:
            tracker = SummaryTracker()

        if seed is None:
            seed = random.randint(0, 2**31 - 1)

        for game_idx in range(n_games):
            game_seed = seed + game_idx
            env = self.env_factory(game_seed)

            missing_agents = set(env.agent_ids) - set(policy_map.keys())
            if missing_agents:
                raise ValueError(
                    f"policy_map missing policies for agents: {missing_agents}"
                )

            obs_dict = env.reset(seed=game_seed)
            infos_dict = env.get_infos()

            for step in range(self.max_steps):
                if env.session.is_over:
                    break

                actions_dict = {
                    agent_id: policy(obs_dict[agent_id])
                    for agent_id, policy in policy_map.items()
                    if agent_id in env.agent_ids
                }
                obs_dict, rewards_dict, dones_dict, infos_dict = env.step(actions_dict)

                tracker.on_step(
                    step=step,
                    obs_dict=obs_dict,
                    actions_dict=actions_dict,
                    rewards_dict=rewards_dict,
                    dones_dict=dones_dict,
                    infos_dict=infos_dict
                )
            else:
                if not env.session.is_over:
                    logger.warning(f"Game {game_idx} (seed {game_seed}) hit the {self.max_steps}-step limit")

            tracker.on_episode_end(episode_idx=game_idx, final_infos=infos_dict)

            if verbose:
                print(f"Completed {game_idx + 1}/{n_games} games")

        return tracker.get_results()

    def run_sweep(
        self,
        policy_factory: Callable[[dict], dict[str, Callable]],
        param_grid: list[dict],
        n_games_per_config: int = 10,
        tracker_factory: Optional[Callable[[], GameTracker]] = None,
        seed: Optional[int] = None,
        verbose: bool = False
    ) -> list[dict]:
        """
        Play a batch of games for each configuration in a parameter grid.

        Every configuration gets its own block of seeds, so two configs never
        replay the same pattern sequence.

        Example:
            ```python
            def policy_factory(params):
                player = RecallPlayer(1, PlayerParams(slip_rate=params["slip_rate"]))
                return {"p1": player.get_answer}

            sweep = exp.run_sweep(
                policy_factory,
                param_grid=[{"slip_rate": r} for r in (0.0, 0.02, 0.05, 0.1)],
                n_games_per_config=50,
            )
            for entry in sweep:
                print(entry["params"]["slip_rate"], entry["results"]["avg_rounds_completed"])
            ```

        Args:
            policy_factory: Builds a policy_map from one params dict
            param_grid: Parameter dicts to evaluate, in order
            n_games_per_config: Games played per configuration
            tracker_factory: Creates a fresh tracker per configuration
                           (SummaryTracker when None)
            seed: Base seed; configuration i starts at seed + i * SWEEP_SEED_STRIDE
            verbose: If True, print progress

        Returns:
            One dict per configuration with keys "params", "results" and "seed"
        """
        make_tracker = tracker_factory if tracker_factory is not None else SummaryTracker
        base_seed = seed if seed is not None else random.randint(0, 2**31 - 1)

        sweep_results = []
        for i, params in enumerate(param_grid):
            config_seed = base_seed + i * SWEEP_SEED_STRIDE
            logger.info(f"Sweep config {i + 1}/{len(param_grid)} {params} (seed {config_seed})")
            if verbose:
                print(f"\nConfiguration {i + 1}/{len(param_grid)}: {params}")

            results = self.run_games(
                policy_map=policy_factory(params),
                n_games=n_games_per_config,
                tracker=make_tracker(),
                seed=config_seed,
                verbose=verbose
            )
            sweep_results.append({"params": params, "results": results, "seed": config_seed})

        return sweep_results
