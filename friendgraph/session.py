"""
Host-side state for one signed-in user: profile, friends, everyone else,
and the current suggestions.

Every refresh rebuilds the friendship graph from a fresh edge snapshot, and
every friend/unfriend is followed by a refresh, so the next ranking always
sees the mutation.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional, Set, Tuple

from loguru import logger

from .config import Settings, get_settings
from .errors import FriendGraphError, MutationInProgress, UserNotFound
from .gateway import MutationGateway
from .graph import FriendshipGraph
from .models import FriendshipResult, SuggestedUser, User
from .narrator import Event, narrate
from .ranking import rank
from .store import FriendshipStore, InMemoryStore, Neo4jStore, UserDirectory
from .view import build_view

Store = InMemoryStore | Neo4jStore


class InFlightGuard:
    """Rejects a second friendship change for a (requester, target) pair still being written."""

    def __init__(self) -> None:
        self._pending: Set[Tuple[str, str]] = set()

    def busy(self, requester_id: str, target_id: str) -> bool:
        return (requester_id, target_id) in self._pending

    @contextmanager
    def hold(self, requester_id: str, target_id: str) -> Iterator[None]:
        key = (requester_id, target_id)
        if key in self._pending:
            raise MutationInProgress(target_id)
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)


class NetworkSession:
    """Everything the dashboard shows for ``user_id``."""

    def __init__(
        self,
        store: Store,
        user_id: str,
        settings: Optional[Settings] = None,
        guard: Optional[InFlightGuard] = None,
    ) -> None:
        self._directory: UserDirectory = store
        self._friendships: FriendshipStore = store
        self._gateway = MutationGateway(store)
        self._settings = settings or get_settings()
        self._guard = guard or InFlightGuard()
        self.user_id = user_id

        self.profile: Optional[User] = None
        self.friends: List[User] = []
        self.all_users: List[User] = []
        self.suggestions: List[SuggestedUser] = []
        self.direct_friends_count = 0
        self.friends_of_friends_count = 0
        self.graph = FriendshipGraph.build([])
        self.loaded = False

    async def _fetch_edges(self):
        if self._settings.use_network_query:
            return await self._friendships.get_network_friendships(self.user_id, self.user_id)
        return await self._friendships.list_all_edges()

    async def load(self) -> None:
        """
        Reload profile, roster and edges, then recompute suggestions.

        If any read fails the previously loaded state is kept as is and the
        error is re-raised.
        """
        try:
            profile = await self._directory.get_user(self.user_id)
            users = await self._directory.list_users()
            edges = await self._fetch_edges()
        except FriendGraphError as exc:
            logger.warning(f"Refresh for {self.user_id} failed, keeping previous state: {exc}")
            raise
        if profile is None:
            raise UserNotFound(self.user_id)

        graph = FriendshipGraph.build(edges)
        profiles = {u.user_id: u for u in users}
        friend_ids = graph.neighbors_of(self.user_id)

        suggestions: List[SuggestedUser] = []
        for suggestion in rank(graph, self.user_id):
            candidate = profiles.get(suggestion.user_id)
            if candidate is None:
                continue
            suggestions.append(
                SuggestedUser(**candidate.model_dump(), mutual_friends=suggestion.mutual_count)
            )

        self.profile = profile
        self.graph = graph
        self.all_users = [u for u in users if u.user_id != self.user_id]
        self.friends = [u for u in users if u.user_id in friend_ids]
        self.suggestions = suggestions[: self._settings.suggestion_limit]
        self.direct_friends_count = graph.degree(self.user_id)
        # Candidates without a profile are not shown, so they are not counted either.
        self.friends_of_friends_count = len(suggestions)
        self.loaded = True
        logger.info(
            f"Loaded network for {self.user_id}: {len(self.friends)} friends, "
            f"{len(self.suggestions)} suggestions"
        )

    @property
    def friend_ids(self) -> Set[str]:
        return {u.user_id for u in self.friends}

    def is_friend(self, user_id: str) -> bool:
        return self.graph.are_friends(self.user_id, user_id)

    def is_pending(self, target_id: str) -> bool:
        return self._guard.busy(self.user_id, target_id)

    async def add_friend(self, friend_id: str) -> FriendshipResult:
        with self._guard.hold(self.user_id, friend_id):
            result = await self._gateway.add_friendship(self.user_id, friend_id)
            await self.load()
        return result

    async def remove_friend(self, friend_id: str) -> FriendshipResult:
        with self._guard.hold(self.user_id, friend_id):
            result = await self._gateway.remove_friendship(self.user_id, friend_id)
            await self.load()
        return result

    def traversal(self) -> List[Event]:
        return narrate(self.graph, self.user_id, top_n=self._settings.top_n)

    def view(self):
        users = self.all_users + ([self.profile] if self.profile is not None else [])
        return build_view(self.graph, self.user_id, users)
