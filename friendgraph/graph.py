"""
In-memory undirected friendship graph built from a flat edge list.

Storage may keep one friendship as two directed rows (a -> b, b -> a); the
graph collapses every orientation into a single undirected adjacency, so
``(a, b)`` and ``(b, a)`` answer every query identically.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Hashable, Iterable, Iterator, List, Set, Tuple

UserId = Hashable
Edge = Tuple[UserId, UserId]


def canonical_edge(a: UserId, b: UserId) -> Edge:
    """Return the orientation-free form ``(min, max)`` of an edge."""
    return (a, b) if a <= b else (b, a)


class FriendshipGraph:
    """Read-only adjacency view over a snapshot of friendship edges."""

    def __init__(self, adjacency: Dict[UserId, Set[UserId]]) -> None:
        self._adjacency = adjacency

    @classmethod
    def build(cls, edges: Iterable[Edge]) -> "FriendshipGraph":
        """
        Build a graph from ``(user_a, user_b)`` pairs.

        Nothing is rejected: self-edges are skipped, and duplicates or
        reverse duplicates collapse because both sides are stored in sets.
        """
        adjacency: Dict[UserId, Set[UserId]] = {}
        for a, b in edges:
            if a == b:
                continue
            adjacency.setdefault(a, set()).add(b)
            adjacency.setdefault(b, set()).add(a)
        return cls(adjacency)

    def neighbors_of(self, user_id: UserId) -> FrozenSet[UserId]:
        """Direct friends of ``user_id``; empty for unknown or isolated users."""
        return frozenset(self._adjacency.get(user_id, ()))

    def are_friends(self, a: UserId, b: UserId) -> bool:
        return b in self._adjacency.get(a, ())

    def degree(self, user_id: UserId) -> int:
        return len(self._adjacency.get(user_id, ()))

    def users(self) -> FrozenSet[UserId]:
        """Every user that appears in at least one edge."""
        return frozenset(self._adjacency)

    def edges(self) -> List[Edge]:
        """Distinct undirected edges in canonical orientation, sorted."""
        seen = {
            canonical_edge(a, b)
            for a, neighbors in self._adjacency.items()
            for b in neighbors
        }
        return sorted(seen)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._adjacency

    def __iter__(self) -> Iterator[UserId]:
        return iter(self._adjacency)

    def __len__(self) -> int:
        return len(self._adjacency)
