"""
Core recommendation logic: "people you may know" ranked by mutual friends.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .graph import FriendshipGraph, UserId


@dataclass(frozen=True)
class Suggestion:
    """A second-degree contact and how many friends it shares with the requester."""

    user_id: UserId
    mutual_count: int


def count_mutuals(graph: FriendshipGraph, requester_id: UserId) -> Dict[UserId, int]:
    """
    Count, for every friend-of-a-friend, how many of the requester's direct
    friends lead to it.

    Each friend contributes at most one increment per candidate, so the count
    equals ``|neighbors(requester) & neighbors(candidate)|``.
    """
    direct_friends = graph.neighbors_of(requester_id)
    counts: Dict[UserId, int] = {}
    for friend_id in direct_friends:
        for candidate_id in graph.neighbors_of(friend_id):
            if candidate_id == requester_id or candidate_id in direct_friends:
                continue
            counts[candidate_id] = counts.get(candidate_id, 0) + 1
    return counts


def sort_suggestions(counts: Dict[UserId, int]) -> List[Suggestion]:
    """Order by mutual count descending, then by ascending user id."""
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [Suggestion(user_id=uid, mutual_count=count) for uid, count in ordered]


def rank(
    graph: FriendshipGraph,
    requester_id: UserId,
    limit: Optional[int] = None,
) -> List[Suggestion]:
    """
    Rank friend suggestions for ``requester_id``.

    An unknown requester or one without friends simply gets an empty list.
    """
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative")

    if not graph.neighbors_of(requester_id):
        return []

    suggestions = sort_suggestions(count_mutuals(graph, requester_id))
    logger.debug(
        f"Ranked {len(suggestions)} suggestions for {requester_id} "
        f"({graph.degree(requester_id)} direct friends)"
    )
    if limit is not None:
        return suggestions[:limit]
    return suggestions


def friend_counts(graph: FriendshipGraph, requester_id: UserId) -> Tuple[int, int]:
    """
    Return (number_of_direct_friends, number_of_friend_of_friend_candidates)
    for a given user.
    """
    return graph.degree(requester_id), len(count_mutuals(graph, requester_id))
