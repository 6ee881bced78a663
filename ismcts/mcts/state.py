"""
Abstract game interfaces consumed by the ISMCTS engine.

The search engine never looks inside a game. Everything it needs is expressed
through two capabilities supplied by the game implementation:

    - ActionCollection: a set-like container of actions (legal moves, tried moves)
    - State: turn order, legality, terminal test, in-place action application,
      determinization, random playout and reward

Concrete games subclass both. See ismcts.mcts.actions.ActionSet for a ready-made
ActionCollection backed by an insertion-ordered dict.
"""

from abc import ABC, abstractmethod
from typing import Any, Hashable, Optional


class ActionCollection(ABC):
    """
    Mutable set-like container of actions.

    Used by the tree for two things:
        1. Legal actions of the current (possibly determinized) state
        2. Actions already expanded from a node (tried actions)

    Actions must be hashable and never None: extract_random() and
    Node.pop_action() return None to mean "nothing left".
    """

    @classmethod
    @abstractmethod
    def empty(cls) -> "ActionCollection":
        """Return a collection with no elements."""

    @abstractmethod
    def difference(self, other: "ActionCollection") -> "ActionCollection":
        """
        Return a new collection with the elements of self not present in other.

        Must not mutate self or other.
        """

    @abstractmethod
    def is_empty(self) -> bool:
        """True if the collection holds no actions."""

    @abstractmethod
    def extract_random(self) -> Optional[Hashable]:
        """
        Remove and return one uniformly random element.

        Returns:
            The removed action, or None if the collection is empty
        """

    @abstractmethod
    def contains(self, action: Hashable) -> bool:
        """Membership test."""

    @abstractmethod
    def add(self, action: Hashable) -> None:
        """Insert an action."""

    def __contains__(self, action: Hashable) -> bool:
        return self.contains(action)


class State(ABC):
    """
    Game state as seen by the search.

    A State may be the real game (with hidden information) or a determinization
    of it (fully observed). The engine only mutates determinizations: the state
    passed to Searcher.search is read for its turn and legal actions, and
    randomize() is used to obtain a private copy for each simulation.
    """

    @abstractmethod
    def turn(self) -> Hashable:
        """Identity of the player to act."""

    @abstractmethod
    def possible_actions(self) -> ActionCollection:
        """Legal actions from this state (empty when terminal)."""

    @abstractmethod
    def is_terminal(self) -> bool:
        """True once the game is over."""

    @abstractmethod
    def apply_action(self, action: Hashable) -> None:
        """Apply an action in place."""

    @abstractmethod
    def randomize(self, perspective: Hashable, inference: Any = None) -> "State":
        """
        Sample a determinization.

        Returns a new, fully observed state consistent with everything
        `perspective` knows. `inference` is an opaque hint forwarded untouched
        by the engine (for example the output of an external estimator); games
        that do not use it must accept and ignore it.
        """

    @abstractmethod
    def do_rollout(self) -> None:
        """Play random moves in place until the state is terminal."""

    @abstractmethod
    def reward(self, actor: Hashable) -> float:
        """Terminal payoff credited to `actor`."""
