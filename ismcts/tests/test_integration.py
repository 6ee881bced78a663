"""
End-to-end tests for ISMCTS searches.

Test Coverage:
    - One-ply game: the rewarding action is recommended
    - Terminal root: search returns without a recommendation
    - Zero time budget: at most one batch of iterations
    - Hidden-information game: tree invariants after a full search
    - Determinism with a seeded game
"""

import random

import pytest

from ismcts.mcts.search import Searcher
from ismcts.tests.games import HiddenCardGame, OnePlyGame, TerminalGame


def tree_snapshot(tree):
    return [
        (node.parent, node.edge, node.visits, node.availability, round(node.score, 9))
        for node in tree
    ]


class TestEndToEndScenarios:
    """Scenarios a caller relies on."""

    @pytest.mark.slow
    def test_one_ply_game_prefers_rewarding_action(self):
        """A pays 1, B pays 0: A is recommended in (nearly) every run."""
        searcher = Searcher(default_capacity=64)
        wins = 0
        runs = 20

        for seed in range(runs):
            game = OnePlyGame(("A", "B"), rng=random.Random(seed))
            result = searcher.search(game, time_budget_ms=60_000, max_simulations=1000)
            assert result.simulation_count == 1000
            wins += result.best_action == "A"

        assert wins / runs > 0.95

    def test_terminal_root(self):
        """A finished game yields no recommendation and no error."""
        game = TerminalGame()
        result = Searcher(default_capacity=16).search(game, time_budget_ms=5)

        assert result.best_action is None
        assert result.tree_size == 1
        assert result.scored_actions == []
        assert result.child_stats == []
        # Every iteration degenerates into a rollout of the terminal state
        assert game.rollouts == result.simulation_count

    def test_zero_time_budget(self):
        """A 0 ms budget stops at the first clock check past the start."""
        game = OnePlyGame(("A", "B"))
        result = Searcher(default_capacity=64).search(game, time_budget_ms=0)

        assert result.simulation_count % 2048 == 0
        if result.simulation_count == 0:
            assert result.best_action is None
        else:
            assert result.best_action in ("A", "B")


class TestHiddenInformationSearch:
    """Invariants of a tree built over an information set."""

    @pytest.fixture
    def searched_tree(self):
        game = HiddenCardGame.deal(deck_size=10, hand_size=4, seed=21)
        searcher = Searcher(exploration_constant=0.7, default_capacity=8192)
        result = searcher.search(game, time_budget_ms=60_000, max_simulations=1500)
        return game, searcher, result

    def test_parent_ids_precede_child_ids(self, searched_tree):
        _, searcher, _ = searched_tree
        tree = searcher.tree

        for node_id in range(1, len(tree)):
            parent_id = tree.get_parent_id(node_id)
            assert parent_id is not None
            assert parent_id < node_id
            assert node_id in tree.node(parent_id).children

    def test_availability_at_least_one(self, searched_tree):
        _, searcher, _ = searched_tree
        assert all(node.availability >= 1 for node in searcher.tree)

    def test_visited_nodes_have_visited_ancestors(self, searched_tree):
        """Every non-root node was visited, and at least as often as its children combined."""
        _, searcher, _ = searched_tree
        tree = searcher.tree

        for node_id, node in enumerate(tree):
            if node_id == 0:
                continue
            assert node.visits >= 1
            child_visits = sum(tree.node(child).visits for child in node.children)
            assert node.visits >= child_visits

    def test_root_is_never_credited(self, searched_tree):
        _, searcher, _ = searched_tree
        root = searcher.tree.node(0)
        assert root.visits == 0
        assert root.score == 0.0

    def test_opponent_replies_vary_across_determinizations(self, searched_tree):
        """Opponent nodes hold replies from several sampled hands."""
        game, searcher, _ = searched_tree
        tree = searcher.tree

        opponent_cards = {
            node.edge.action for node in tree
            if node.edge is not None and node.edge.actor == 1
        }
        assert not opponent_cards <= set(game.hands[1])

    def test_availability_exceeds_visits_for_conditional_actions(self, searched_tree):
        """Opponent replies are offered more often than they are chosen."""
        _, searcher, _ = searched_tree
        tree = searcher.tree

        opponent_nodes = [
            node for node in tree
            if node.edge is not None and node.edge.actor == 1 and node.visits > 10
        ]
        assert opponent_nodes
        assert any(node.availability > node.visits for node in opponent_nodes)

    def test_scored_actions_are_legal(self, searched_tree):
        game, _, result = searched_tree
        legal = game.possible_actions()

        assert result.scored_actions
        assert all(legal.contains(action) for _, action in result.scored_actions)
        assert {action for _, action in result.scored_actions} == set(legal)

    def test_best_action_is_most_visited(self, searched_tree):
        _, _, result = searched_tree
        visits = result.visit_counts()

        assert visits[result.best_action] == max(visits.values())
        assert sum(visits.values()) == result.simulation_count


class TestDeterminism:
    """Seeded searches are reproducible."""

    def test_same_seed_same_tree(self):
        first = Searcher(default_capacity=4096)
        second = Searcher(default_capacity=4096)

        result1 = first.search(HiddenCardGame.deal(seed=77), time_budget_ms=60_000, max_simulations=500)
        result2 = second.search(HiddenCardGame.deal(seed=77), time_budget_ms=60_000, max_simulations=500)

        assert result1.best_action == result2.best_action
        assert result1.tree_size == result2.tree_size
        assert tree_snapshot(first.tree) == tree_snapshot(second.tree)

    def test_searcher_reuse_is_reproducible(self):
        """Reusing a searcher gives the same tree as a fresh one."""
        searcher = Searcher(default_capacity=4096)
        searcher.search(HiddenCardGame.deal(seed=1), time_budget_ms=60_000, max_simulations=200)
        result1 = searcher.search(HiddenCardGame.deal(seed=2), time_budget_ms=60_000, max_simulations=200)
        snapshot1 = tree_snapshot(searcher.tree)

        fresh = Searcher(default_capacity=4096)
        result2 = fresh.search(HiddenCardGame.deal(seed=2), time_budget_ms=60_000, max_simulations=200)

        assert result1.best_action == result2.best_action
        assert snapshot1 == tree_snapshot(fresh.tree)
