"""
Information-Set Monte Carlo Tree Search driver.

This module runs the ISMCTS iteration loop over a single tree shared by all
determinizations of the searching player's information set:

    1. Determinize: sample a fully observed state consistent with what the
       player to move knows (State.randomize)
    2. Selection: availability-based UCT descent restricted to actions legal
       in this determinization
    3. Expansion: add one child for a random untried legal action
    4. Rollout: random playout to a terminal state (State.do_rollout)
    5. Backpropagation: credit each node on the path with the reward of the
       actor recorded on its edge

Iterations run until a wall-clock budget expires. The clock is only read every
`check_interval` iterations, so a search always completes whole batches of
iterations (a 0 ms budget still runs one batch if the first check happens
within the first millisecond).

Example:
    >>> from ismcts.mcts import Searcher
    >>> searcher = Searcher(exploration_constant=0.7, default_capacity=100_000)
    >>> result = searcher.search(game, time_budget_ms=250)
    >>> result.best_action
    'play_ace'
    >>> result.simulation_count > 0
    True
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Tuple

import numpy as np

from ismcts.config import SearchConfig
from ismcts.mcts.node import NodeStats
from ismcts.mcts.state import State
from ismcts.mcts.tree import Tree

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """
    Outcome of one Searcher.search call.

    Attributes:
        best_action: Most visited root action legal in the real state, or None
            if the root has no legal child
        scored_actions: (UCT score, action) for every legal root child
        child_stats: (NodeStats, action) for every legal root child
        simulation_count: Number of completed iterations
        elapsed_sec: Wall-clock duration of the search
        tree_size: Number of nodes in the tree, root included
    """

    best_action: Optional[Hashable]
    scored_actions: List[Tuple[float, Hashable]] = field(default_factory=list)
    child_stats: List[Tuple[NodeStats, Hashable]] = field(default_factory=list)
    simulation_count: int = 0
    elapsed_sec: float = 0.0
    tree_size: int = 0

    @property
    def simulations_per_second(self) -> float:
        if self.elapsed_sec <= 0:
            return 0.0
        return self.simulation_count / self.elapsed_sec

    def visit_counts(self) -> Dict[Hashable, int]:
        """Map each legal root action to its child's visit count."""
        return {action: stats.visits for stats, action in self.child_stats}

    def action_probabilities(self, temperature: float = 1.0) -> Dict[Hashable, float]:
        """
        Convert root visit counts into a probability distribution.

        Args:
            temperature: Temperature for sampling
                - 0.0: Greedy (all mass on the most visited action)
                - 1.0: Proportional to visit counts
                - >1.0: More uniform

        Returns:
            Dictionary mapping action -> probability (empty if no legal child)

        Example:
            >>> result.visit_counts()
            {'a': 30, 'b': 10}
            >>> result.action_probabilities(temperature=1.0)
            {'a': 0.75, 'b': 0.25}
        """
        if not self.child_stats:
            return {}

        actions = [action for _, action in self.child_stats]
        visits = np.array([stats.visits for stats, _ in self.child_stats], dtype=np.float64)

        if temperature == 0:
            probs = np.zeros(len(visits))
            probs[np.argmax(visits)] = 1.0
        else:
            visits_temp = visits ** (1.0 / temperature)
            total = visits_temp.sum()
            if total > 0:
                probs = visits_temp / total
            else:
                probs = np.ones(len(visits)) / len(visits)

        return {action: float(prob) for action, prob in zip(actions, probs)}

    def select_action(
        self,
        temperature: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ) -> Optional[Hashable]:
        """
        Sample a root action from the visit-count distribution.

        Args:
            temperature: See action_probabilities
            rng: numpy Generator to sample with (a fresh default_rng if None)

        Returns:
            Sampled action, or None if the root has no legal child
        """
        action_probs = self.action_probabilities(temperature)
        if not action_probs:
            return None

        rng = rng if rng is not None else np.random.default_rng()
        actions = list(action_probs.keys())
        index = rng.choice(len(actions), p=list(action_probs.values()))
        return actions[int(index)]


class Searcher:
    """
    Time-bounded ISMCTS searcher.

    The searcher owns one Tree that is reset at the start of every search; no
    statistics carry over between calls.

    Attributes:
        tree: Search tree of the most recent search
        check_interval: Iterations between two wall-clock checks

    Example:
        >>> searcher = Searcher()
        >>> result = searcher.search(game, time_budget_ms=100)
        >>> game.apply_action(result.best_action)
    """

    def __init__(
        self,
        exploration_constant: float = math.sqrt(2),
        default_capacity: int = 500_000,
        check_interval: int = 2048,
    ):
        """
        Initialize searcher.

        Args:
            exploration_constant: UCT exploration constant c (default: sqrt(2))
                Higher = more exploration, lower = more exploitation
            default_capacity: Expected tree size per search (default: 500,000)
            check_interval: Iterations between clock checks (default: 2048)
        """
        self.tree = Tree(exploration_constant, default_capacity)
        self.check_interval = check_interval

    @classmethod
    def from_config(cls, config: SearchConfig) -> "Searcher":
        config.validate()
        return cls(
            exploration_constant=config.exploration_constant,
            default_capacity=config.default_capacity,
            check_interval=config.check_interval,
        )

    def search(
        self,
        state: State,
        time_budget_ms: int,
        inference: Any = None,
        max_simulations: Optional[int] = None,
    ) -> SearchResult:
        """
        Run ISMCTS from the player to move's information set.

        Args:
            state: Real game state (may hide information); never mutated
            time_budget_ms: Wall-clock budget in milliseconds
            inference: Opaque hint forwarded to state.randomize() when not None
            max_simulations: Optional cap on the number of iterations

        Returns:
            SearchResult with the recommended action and root statistics

        Raises:
            ValueError: If time_budget_ms is negative
        """
        if time_budget_ms < 0:
            raise ValueError(f"time_budget_ms must be non-negative, got {time_budget_ms}")

        self.tree.reset()
        root_id = self.tree.add_node(None, None)
        perspective = state.turn()

        i = 0
        started = time.perf_counter()

        while True:
            if i % self.check_interval == 0 and _elapsed_ms(started) > time_budget_ms:
                break
            if max_simulations is not None and i >= max_simulations:
                break

            if _SEARCH_PROFILING_ENABLED:
                self._profiled_iteration(state, perspective, inference, root_id)
            else:
                if inference is None:
                    det = state.randomize(perspective)
                else:
                    det = state.randomize(perspective, inference)

                node_id = self.tree.select(root_id, det)
                node_id = self.tree.expand(node_id, det)
                det.do_rollout()
                self.backpropagate(det, node_id)

            i += 1

        elapsed = time.perf_counter() - started

        result = SearchResult(
            best_action=self.tree.best_action(root_id, state),
            scored_actions=self.tree.scored_actions(root_id, state),
            child_stats=self.tree.child_stats(root_id, state),
            simulation_count=i,
            elapsed_sec=elapsed,
            tree_size=len(self.tree),
        )

        if _SEARCH_PROFILING_ENABLED:
            _SEARCH_METRICS['searches'] += 1
            _SEARCH_METRICS['simulations'] += i
            _SEARCH_METRICS['search_total_sec'] += elapsed

        logger.debug(
            "Search finished: %d simulations in %.1f ms, %d nodes, best action %r",
            i, elapsed * 1000.0, result.tree_size, result.best_action,
        )
        if result.best_action is None and not state.is_terminal():
            logger.warning(
                "Search ended without a legal root child after %d simulations "
                "(time budget %d ms)", i, time_budget_ms,
            )

        return result

    def backpropagate(self, state: State, node_id: int) -> None:
        """
        Credit the terminal reward to every node from node_id up to the root.

        Each node receives the reward of the actor recorded on its edge; the
        root has no edge and is not updated.

        Args:
            state: Terminal determinization reached by the rollout
            node_id: Node returned by expand()
        """
        current: Optional[int] = node_id

        while current is not None:
            edge = self.tree.get_edge(current)
            if edge is not None:
                self.tree.update_node(current, state.reward(edge.actor))
            current = self.tree.get_parent_id(current)

    def _profiled_iteration(
        self, state: State, perspective: Hashable, inference: Any, root_id: int
    ) -> None:
        t0 = time.perf_counter()
        if inference is None:
            det = state.randomize(perspective)
        else:
            det = state.randomize(perspective, inference)
        t1 = time.perf_counter()
        node_id = self.tree.select(root_id, det)
        t2 = time.perf_counter()
        node_id = self.tree.expand(node_id, det)
        t3 = time.perf_counter()
        det.do_rollout()
        t4 = time.perf_counter()
        self.backpropagate(det, node_id)
        t5 = time.perf_counter()

        _SEARCH_METRICS['determinize_total_sec'] += t1 - t0
        _SEARCH_METRICS['select_total_sec'] += t2 - t1
        _SEARCH_METRICS['expand_total_sec'] += t3 - t2
        _SEARCH_METRICS['rollout_total_sec'] += t4 - t3
        _SEARCH_METRICS['backprop_total_sec'] += t5 - t4


def run_search(state: State, config: SearchConfig, inference: Any = None) -> SearchResult:
    """
    One-shot search driven entirely by a SearchConfig.

    Args:
        state: Real game state
        config: Search configuration (validated here)
        inference: Opaque hint forwarded to state.randomize()

    Returns:
        SearchResult of a fresh Searcher
    """
    searcher = Searcher.from_config(config)
    return searcher.search(
        state,
        config.time_budget_ms,
        inference=inference,
        max_simulations=config.max_simulations,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


# -------------------
# Lightweight metrics
# -------------------
_SEARCH_PROFILING_ENABLED = False
_SEARCH_METRICS = {
    'searches': 0,
    'simulations': 0,
    'search_total_sec': 0.0,
    'determinize_total_sec': 0.0,
    'select_total_sec': 0.0,
    'expand_total_sec': 0.0,
    'rollout_total_sec': 0.0,
    'backprop_total_sec': 0.0,
}


def enable_metrics(enabled: bool = True) -> None:
    """Enable or disable per-phase search instrumentation for this process."""
    global _SEARCH_PROFILING_ENABLED
    _SEARCH_PROFILING_ENABLED = bool(enabled)


def reset_metrics() -> None:
    """Reset search metrics counters for this process."""
    for k in list(_SEARCH_METRICS.keys()):
        _SEARCH_METRICS[k] = 0.0 if k.endswith('_sec') else 0


def get_metrics() -> dict:
    """Return a shallow copy of current search metrics with derived averages."""
    m = dict(_SEARCH_METRICS)
    sims = m.get('simulations', 0) or 0
    for phase in ('determinize', 'select', 'expand', 'rollout', 'backprop'):
        m[f'avg_{phase}_us'] = (
            (m.get(f'{phase}_total_sec', 0.0) / sims) * 1e6 if sims else 0.0
        )
    m['avg_simulations_per_search'] = (
        sims / m['searches'] if m.get('searches', 0) else 0.0
    )
    return m
