"""
Information-Set Monte Carlo Tree Search (ISMCTS) engine.

This module provides the search engine for games with hidden information:
- State / ActionCollection: Abstract game interfaces implemented by games
- ActionSet: Ready-made dict-backed ActionCollection with a seedable RNG
- Edge / Node / NodeStats: Tree vertex and its statistics
- Tree: Arena of nodes with UCT selection and one-child expansion
- Searcher / SearchResult: Time-bounded search loop and its outcome

The implementation uses:
- A single tree over the searching player's information set
- One fresh determinization (State.randomize) per iteration
- Availability counts in place of parent visits in the UCT exploration term
- Random rollouts to terminal states for leaf evaluation
- Most visited legal root action as the recommendation

Example:
    >>> from ismcts.mcts import Searcher
    >>> from mygame import CardGame
    >>>
    >>> game = CardGame.deal(num_players=3)
    >>> searcher = Searcher(exploration_constant=0.7)
    >>> result = searcher.search(game, time_budget_ms=500)
    >>> game.apply_action(result.best_action)
"""

from ismcts.mcts.state import State, ActionCollection
from ismcts.mcts.actions import ActionSet
from ismcts.mcts.edge import Edge
from ismcts.mcts.node import Node, NodeStats
from ismcts.mcts.tree import Tree
from ismcts.mcts.search import Searcher, SearchResult, run_search

__all__ = [
    "State",
    "ActionCollection",
    "ActionSet",
    "Edge",
    "Node",
    "NodeStats",
    "Tree",
    "Searcher",
    "SearchResult",
    "run_search",
]
