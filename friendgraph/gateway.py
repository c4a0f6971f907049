"""
Add and remove friendships through the store.

A friendship is a single undirected edge here; the store decides how many
physical rows that takes. The gateway validates the request, delegates the
write and reports what changed. It never swallows a store failure.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger

from .errors import InvalidOperation
from .graph import canonical_edge
from .models import FriendshipResult
from .store import FriendshipStore

Change = Literal["created", "removed", "unchanged"]


class MutationGateway:
    """Symmetric friendship writes on behalf of an authenticated requester."""

    def __init__(self, store: FriendshipStore) -> None:
        self._store = store

    async def add_friendship(self, requester_id: str, friend_id: str) -> FriendshipResult:
        """
        Befriend ``friend_id``. Re-adding an existing friendship succeeds
        without creating a duplicate.
        """
        if requester_id == friend_id:
            raise InvalidOperation("A user cannot be friends with themselves")

        a, b = canonical_edge(requester_id, friend_id)
        created = await self._store.insert_edge(requester_id, a, b)
        change: Change = "created" if created else "unchanged"
        logger.info(f"Friendship {a}-{b} {change} by {requester_id}")
        return FriendshipResult(user_id=requester_id, friend_id=friend_id, change=change)

    async def remove_friendship(self, requester_id: str, friend_id: str) -> FriendshipResult:
        """
        Unfriend ``friend_id`` whichever side created the friendship.
        Removing a friendship that does not exist is a successful no-op.
        """
        if requester_id == friend_id:
            return FriendshipResult(user_id=requester_id, friend_id=friend_id, change="unchanged")

        a, b = canonical_edge(requester_id, friend_id)
        removed = await self._store.delete_edge(requester_id, a, b)
        change: Change = "removed" if removed else "unchanged"
        logger.info(f"Friendship {a}-{b} {change} by {requester_id}")
        return FriendshipResult(user_id=requester_id, friend_id=friend_id, change=change)
