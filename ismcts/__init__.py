"""
ismcts: Information-Set Monte Carlo Tree Search for hidden-information games.

The engine lives in ismcts.mcts; configuration in ismcts.config; rich
reporting of search results in ismcts.report.
"""

from ismcts.config import SearchConfig
from ismcts.mcts import ActionCollection, ActionSet, Searcher, SearchResult, State

__version__ = "0.1.0"

__all__ = [
    "SearchConfig",
    "ActionCollection",
    "ActionSet",
    "Searcher",
    "SearchResult",
    "State",
]
