"""
Dict-backed ActionCollection.

ActionSet keeps actions in insertion order without duplicates, answers membership
in constant time and draws random elements from an injectable random.Random, so
a game seeded once produces the same expansions (and therefore the same tree) on every run.
"""

import random
from typing import Dict, Hashable, Iterable, Iterator, Optional

from ismcts.mcts.state import ActionCollection


class ActionSet(ActionCollection):
    """
    Ordered, duplicate-free collection of hashable actions.

    Attributes:
        rng: Random generator used by extract_random (module `random` if None)

    Example:
        >>> legal = ActionSet(["bid0", "bid1", "bid2"])
        >>> tried = ActionSet(["bid1"])
        >>> untried = legal.difference(tried)
        >>> sorted(untried)
        ['bid0', 'bid2']
        >>> untried.extract_random() in ("bid0", "bid2")
        True
        >>> len(untried)
        1
    """

    __slots__ = ("_items", "rng")

    def __init__(
        self,
        actions: Iterable[Hashable] = (),
        rng: Optional[random.Random] = None,
    ):
        self._items: Dict[Hashable, None] = dict.fromkeys(actions)
        self.rng = rng

    @classmethod
    def empty(cls, rng: Optional[random.Random] = None) -> "ActionSet":
        return cls((), rng=rng)

    def difference(self, other: ActionCollection) -> "ActionSet":
        return ActionSet(
            (action for action in self._items if not other.contains(action)),
            rng=self.rng,
        )

    def is_empty(self) -> bool:
        return not self._items

    def extract_random(self) -> Optional[Hashable]:
        if not self._items:
            return None
        rng = self.rng if self.rng is not None else random
        action = list(self._items)[rng.randrange(len(self._items))]
        del self._items[action]
        return action

    def contains(self, action: Hashable) -> bool:
        return action in self._items

    def add(self, action: Hashable) -> None:
        self._items.setdefault(action)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionSet):
            return NotImplemented
        return self._items.keys() == other._items.keys()

    def __repr__(self) -> str:
        return f"ActionSet({list(self._items)!r})"
