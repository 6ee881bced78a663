"""
ISMCTS node with availability-based UCT scoring.

This module implements one vertex of the information-set search tree. Nodes do
not hold game states: the tree is built over an information set, and each
simulation replays edge actions on its own determinization instead.

Architecture Note:
    Nodes live in the Tree arena and refer to each other by integer id only
    (parent id and child ids). The edge records which action led here and which
    player took it, so rewards can be credited to the right actor during
    backpropagation.

Availability vs visits:
    In classical UCT the exploration term uses the parent's visit count. Under
    hidden information a child's action is not legal in every determinization,
    so the parent's visits overstate how often the child could have been
    chosen. Each node therefore counts its own availability (how many times its
    action was offered as a legal candidate during selection) and uses it in
    place of the parent's visit count:

        UCT(child) = score / visits + c * sqrt(ln(availability) / visits)
"""

import math
from dataclasses import dataclass
from typing import Hashable, List, Optional

from ismcts.mcts.edge import Edge
from ismcts.mcts.state import ActionCollection


@dataclass(frozen=True)
class NodeStats:
    """Snapshot of a node's statistics, for diagnostics."""

    avg_score: float
    visits: int
    availability: int


class Node:
    """
    Vertex of the search tree.

    Attributes:
        edge: Edge that led to this node (None for root)
        parent: Parent node id (None for root)
        children: Child node ids, in creation order
        tried_actions: Actions already expanded from this node. None until the
            first expansion, then a collection of the same type as the legal
            actions it was computed from
        visits: Number of backpropagations through this node
        availability: Number of selection steps in which this node's action
            was legal at its parent (starts at 1 for its own expansion)
        score: Sum of rewards credited to this node's actor
    """

    __slots__ = (
        "edge",
        "parent",
        "children",
        "tried_actions",
        "visits",
        "availability",
        "score",
    )

    def __init__(self, edge: Optional[Edge] = None, parent: Optional[int] = None):
        self.edge = edge
        self.parent = parent
        self.children: List[int] = []
        self.tried_actions: Optional[ActionCollection] = None

        # Statistics
        self.visits = 0
        self.availability = 1
        self.score = 0.0

    def is_root(self) -> bool:
        return self.parent is None

    def add_child(self, child_id: int) -> None:
        self.children.append(child_id)

    def has_untried_actions(self, legal_actions: ActionCollection) -> bool:
        """
        Check whether some legal action has not been expanded yet.

        Args:
            legal_actions: Legal actions under the current determinization

        Returns:
            True if legal_actions minus tried_actions is non-empty
        """
        if self.tried_actions is None:
            return not legal_actions.is_empty()
        return not legal_actions.difference(self.tried_actions).is_empty()

    def pop_action(self, legal_actions: ActionCollection) -> Optional[Hashable]:
        """
        Pick a random untried legal action and mark it as tried.

        Args:
            legal_actions: Legal actions under the current determinization
                (not modified)

        Returns:
            The chosen action, or None if every legal action was already tried

        Example:
            >>> from ismcts.mcts.actions import ActionSet
            >>> node = Node()
            >>> legal = ActionSet(["a", "b"])
            >>> {node.pop_action(legal), node.pop_action(legal)} == {"a", "b"}
            True
            >>> node.pop_action(legal) is None
            True
        """
        if self.tried_actions is None:
            self.tried_actions = legal_actions.empty()

        untried = legal_actions.difference(self.tried_actions)
        action = untried.extract_random()

        if action is not None:
            self.tried_actions.add(action)

        return action

    def increase_availability(self) -> None:
        self.availability += 1

    def update(self, reward: float) -> None:
        """
        Record one simulation result.

        Sole mutation path for visits and score; called once per node per
        backpropagation.
        """
        self.visits += 1
        self.score += reward

    def avg_score(self) -> float:
        """
        Mean reward of this node's actor.

        Precondition: at least one visit. Calling it on an unvisited node
        raises ZeroDivisionError.
        """
        return self.score / self.visits

    def uct_score(self, c: float) -> float:
        """
        Availability-based UCT score.

        Args:
            c: Exploration constant

        Returns:
            avg_score + c * sqrt(ln(availability) / visits)
        """
        n = self.visits
        return self.score / n + c * math.sqrt(math.log(self.availability) / n)

    def stats(self) -> NodeStats:
        return NodeStats(
            avg_score=self.avg_score(),
            visits=self.visits,
            availability=self.availability,
        )

    def __repr__(self) -> str:
        action = self.edge.action if self.edge is not None else None
        return (
            f"Node(action={action!r}, "
            f"visits={self.visits}, "
            f"avails={self.availability}, "
            f"score={self.score:.3f}, "
            f"children={len(self.children)})"
        )
