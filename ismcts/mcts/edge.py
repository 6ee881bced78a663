"""Edge record: the action that led to a node and the player who took it."""

from dataclasses import dataclass
from typing import Hashable


@dataclass(frozen=True)
class Edge:
    """
    Move that leads from a parent node to its child.

    Attributes:
        action: Action applied to reach the child (never None)
        actor: Player who took it; backpropagation credits reward(actor)
    """

    action: Hashable
    actor: Hashable
