"""
Arena-backed ISMCTS tree.

The tree owns every Node in a single list and addresses them by dense integer
ids. Ids are allocated in creation order, so a child's id is always greater
than its parent's, and nodes are never removed: the whole arena is replaced by
reset() at the start of each search.

The tree implements the two tree-policy phases of an ISMCTS iteration:
    1. Selection: UCT descent restricted to actions legal in the current
       determinization, bumping the availability of every legal child seen
    2. Expansion: add one child for a random untried legal action

plus the final recommendation (most visited legal root child) and diagnostics.
"""

from typing import Hashable, Iterator, List, Optional, Tuple

from ismcts.mcts.edge import Edge
from ismcts.mcts.node import Node, NodeStats
from ismcts.mcts.state import ActionCollection, State


class Tree:
    """
    Search tree stored as an arena of nodes.

    Attributes:
        c: Exploration constant used in UCT scores
        default_capacity: Expected node count per search; the arena list grows
            by appending, so it is a sizing hint, not a limit
        index: Next node id to allocate (equals the number of live nodes)

    Example:
        >>> tree = Tree(c=1.41, default_capacity=1024)
        >>> root = tree.add_node(None, None)
        >>> child = tree.add_node(Edge("a", 0), root)
        >>> tree.node(root).children
        [1]
        >>> len(tree)
        2
    """

    def __init__(self, c: float, default_capacity: int):
        self.c = c
        self.default_capacity = default_capacity
        self.reset()

    def reset(self) -> None:
        """Discard every node."""
        self.index = 0
        self.nodes: List[Node] = []

    def add_node(self, edge: Optional[Edge], parent_id: Optional[int]) -> int:
        """
        Allocate a node and register it with its parent.

        Args:
            edge: Edge that leads to the node (None for root)
            parent_id: Parent node id (None for root)

        Returns:
            Id of the new node
        """
        node_id = self.index

        if parent_id is not None:
            self.nodes[parent_id].add_child(node_id)

        self.nodes.append(Node(edge, parent_id))
        self.index += 1

        return node_id

    def select(self, node_id: int, state: State) -> int:
        """
        Descend from node_id using availability-based UCT.

        Keeps descending while the state is non-terminal and the current node
        has no untried action among the actions legal in this determinization.
        Each chosen edge action is applied to `state`, which is advanced in
        place.

        Args:
            node_id: Node to start from (typically root)
            state: Determinized state matching node_id; mutated

        Returns:
            Id of the node where descent stopped
        """
        legal_actions = state.possible_actions()

        while not state.is_terminal() and self.is_fully_expanded(node_id, legal_actions):
            node_id = self._uct_select_child(node_id, legal_actions)

            state.apply_action(self.get_edge(node_id).action)

            if state.is_terminal():
                break
            legal_actions = state.possible_actions()

        return node_id

    def _uct_select_child(self, node_id: int, legal_actions: ActionCollection) -> int:
        """
        Pick the legal child with the highest UCT score.

        Every legal child scanned gets its availability increased after its
        score is read, whether it wins or not. Ties go to the first child in
        creation order.

        Raises:
            ValueError: If no child is legal in this determinization
        """
        best_child = None
        best_score = -float("inf")

        for child_id in self.nodes[node_id].children:
            child = self.nodes[child_id]
            if legal_actions.contains(child.edge.action):
                uct_score = child.uct_score(self.c)
                if uct_score > best_score:
                    best_score = uct_score
                    best_child = child_id
                child.increase_availability()

        if best_child is None:
            raise ValueError(f"Cannot select child: node {node_id} has no legal children")

        return best_child

    def expand(self, node_id: int, state: State) -> int:
        """
        Add one child for a random untried legal action.

        Args:
            node_id: Node returned by select()
            state: Determinized state matching node_id; advanced by the
                expanded action

        Returns:
            Id of the new child, or node_id if the state is terminal or every
            legal action has already been tried
        """
        if state.is_terminal():
            return node_id

        legal_actions = state.possible_actions()
        action = self.nodes[node_id].pop_action(legal_actions)

        if action is None:
            return node_id

        actor = state.turn()
        edge = Edge(action, actor)

        state.apply_action(action)
        return self.add_node(edge, node_id)

    def _legal_children(self, node_id: int, state: State) -> Iterator[int]:
        legal_actions = state.possible_actions()
        for child_id in self.nodes[node_id].children:
            if legal_actions.contains(self.nodes[child_id].edge.action):
                yield child_id

    def best_action(self, node_id: int, state: State) -> Optional[Hashable]:
        """
        Most visited child action that is legal in `state`.

        Visit count, not UCT score, is the recommendation criterion. Ties go to
        the first child in creation order.

        Returns:
            The action, or None if no child is legal (e.g. the root was never
            expanded within the time budget)
        """
        child_ids = list(self._legal_children(node_id, state))
        if not child_ids:
            return None

        best_id = max(child_ids, key=lambda child_id: self.nodes[child_id].visits)
        return self.nodes[best_id].edge.action

    def scored_actions(self, node_id: int, state: State) -> List[Tuple[float, Hashable]]:
        """UCT score and action of every child legal in `state`."""
        return [
            (self.nodes[child_id].uct_score(self.c), self.nodes[child_id].edge.action)
            for child_id in self._legal_children(node_id, state)
        ]

    def child_stats(self, node_id: int, state: State) -> List[Tuple[NodeStats, Hashable]]:
        """Statistics snapshot and action of every child legal in `state`."""
        return [
            (self.nodes[child_id].stats(), self.nodes[child_id].edge.action)
            for child_id in self._legal_children(node_id, state)
        ]

    def update_node(self, node_id: int, reward: float) -> None:
        self.nodes[node_id].update(reward)

    def is_fully_expanded(self, node_id: int, legal_actions: ActionCollection) -> bool:
        return not self.nodes[node_id].has_untried_actions(legal_actions)

    def get_parent_id(self, node_id: int) -> Optional[int]:
        return self.nodes[node_id].parent

    def get_edge(self, node_id: int) -> Optional[Edge]:
        return self.nodes[node_id].edge

    def node(self, node_id: int) -> Node:
        if not 0 <= node_id < self.index:
            raise IndexError(f"No node with id {node_id} (tree has {self.index} nodes)")
        return self.nodes[node_id]

    def __len__(self) -> int:
        return self.index

    def __iter__(self) -> Iterator[Node]:
        for node_id in range(self.index):
            yield self.nodes[node_id]
