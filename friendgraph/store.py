"""
Storage adapters: the user directory and the friendship edge store.

The backend of record is Neo4j, where one friendship is two directed
``:KNOWS`` relationships. Both adapters enforce the same rules on their
own: no self-edges, no duplicate edges, and only a party to an edge may
create or delete it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger
from neo4j import AsyncDriver
from neo4j.exceptions import ServiceUnavailable, SessionExpired, TransientError

from .errors import InvalidOperation, NotAuthorized, TransientStoreFailure, UserNotFound
from .graph import canonical_edge
from .models import User

Edge = Tuple[str, str]


class UserDirectory(ABC):
    """Read access to user profiles."""

    @abstractmethod
    async def list_users(self) -> List[User]:
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        ...


class FriendshipStore(ABC):
    """Persistence of undirected friendship edges."""

    @abstractmethod
    async def list_all_edges(self) -> List[Edge]:
        """Every friendship, once, in canonical ``(min, max)`` orientation."""

    @abstractmethod
    async def insert_edge(self, requester_id: str, a: str, b: str) -> bool:
        """Record both directions of ``a``-``b``. Returns False if it already existed."""

    @abstractmethod
    async def delete_edge(self, requester_id: str, a: str, b: str) -> bool:
        """Remove ``a``-``b`` in either orientation. Returns False if nothing matched."""

    @abstractmethod
    async def get_network_friendships(self, requester_id: str, user_id: str) -> List[Edge]:
        """Edges among ``user_id``, its friends and its friends of friends."""


def check_party(requester_id: str, a: str, b: str) -> None:
    if a == b:
        raise InvalidOperation("A user cannot be friends with themselves")
    if requester_id not in (a, b):
        raise NotAuthorized(f"{requester_id} is not a party to the friendship {a}-{b}")


def check_owner(requester_id: str, user_id: str) -> None:
    if requester_id != user_id:
        raise NotAuthorized(f"{requester_id} may only query their own network")


class InMemoryStore(UserDirectory, FriendshipStore):
    """
    Process-local store with the same contract as :class:`Neo4jStore`.

    Rows are kept as directed pairs so that the two-row layout of the
    backend of record is reproduced exactly.
    """

    def __init__(
        self,
        users: Iterable[User] = (),
        edges: Iterable[Edge] = (),
    ) -> None:
        self._users: Dict[str, User] = {u.user_id: u for u in users}
        self._rows: Set[Edge] = set()
        for a, b in edges:
            if a != b:
                self._rows.update({(a, b), (b, a)})

    def add_user(self, user: User) -> None:
        self._users[user.user_id] = user

    def rows(self) -> Set[Edge]:
        """Directed rows as stored, for inspection."""
        return set(self._rows)

    async def list_users(self) -> List[User]:
        return sorted(self._users.values(), key=lambda u: u.name)

    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def list_all_edges(self) -> List[Edge]:
        return sorted({canonical_edge(a, b) for a, b in self._rows})

    async def insert_edge(self, requester_id: str, a: str, b: str) -> bool:
        check_party(requester_id, a, b)
        for uid in (a, b):
            if uid not in self._users:
                raise UserNotFound(uid)
        if (a, b) in self._rows or (b, a) in self._rows:
            # Repair a half-written pair rather than report a duplicate.
            self._rows.update({(a, b), (b, a)})
            return False
        self._rows.update({(a, b), (b, a)})
        return True

    async def delete_edge(self, requester_id: str, a: str, b: str) -> bool:
        check_party(requester_id, a, b)
        matched = {(a, b), (b, a)} & self._rows
        self._rows -= matched
        return bool(matched)

    async def get_network_friendships(self, requester_id: str, user_id: str) -> List[Edge]:
        check_owner(requester_id, user_id)
        edges = await self.list_all_edges()
        friends = {b if a == user_id else a for a, b in edges if user_id in (a, b)}
        second = {b if a in friends else a for a, b in edges if a in friends or b in friends}
        network = {user_id} | friends | second
        return [(a, b) for a, b in edges if a in network and b in network]


@asynccontextmanager
async def translate_errors(operation: str) -> AsyncIterator[None]:
    """Turn driver connectivity errors into :class:`TransientStoreFailure`."""
    try:
        yield
    except (ServiceUnavailable, SessionExpired, TransientError) as exc:
        logger.error(f"Neo4j {operation} failed: {exc}")
        raise TransientStoreFailure(f"{operation} failed: {exc}") from exc


class Neo4jStore(UserDirectory, FriendshipStore):
    """Neo4j-backed store: ``:User`` nodes linked by paired ``:KNOWS`` relationships."""

    def __init__(self, driver: AsyncDriver) -> None:
        self._driver = driver

    async def list_users(self) -> List[User]:
        query = """
        MATCH (u:User)
        RETURN u.id AS user_id, u.name AS name, u.email AS email,
               u.bio AS bio, u.avatar_url AS avatar_url
        ORDER BY u.name
        """
        async with translate_errors("list_users"):
            async with self._driver.session() as session:
                result = await session.run(query)
                records = await result.data()
        return [User(**record) for record in records]

    async def get_user(self, user_id: str) -> Optional[User]:
        query = """
        MATCH (u:User {id: $user_id})
        RETURN u.id AS user_id, u.name AS name, u.email AS email,
               u.bio AS bio, u.avatar_url AS avatar_url
        """
        async with translate_errors("get_user"):
            async with self._driver.session() as session:
                result = await session.run(query, user_id=user_id)
                record = await result.single()
        if record is None:
            return None
        return User(**record.data())

    async def list_all_edges(self) -> List[Edge]:
        # Undirected match so a half-written pair still shows up once.
        query = """
        MATCH (a:User)-[:KNOWS]-(b:User)
        WHERE a.id < b.id
        RETURN DISTINCT a.id AS a, b.id AS b
        """
        async with translate_errors("list_all_edges"):
            async with self._driver.session() as session:
                result = await session.run(query)
                records = await result.data()
        return [(r["a"], r["b"]) for r in records]

    async def insert_edge(self, requester_id: str, a: str, b: str) -> bool:
        check_party(requester_id, a, b)

        async def write_pair(tx, a: str, b: str):
            # Both directions are merged in one transaction: both rows or neither.
            query = """
            MATCH (a:User {id: $a}), (b:User {id: $b})
            OPTIONAL MATCH (a)-[existing:KNOWS]-(b)
            WITH a, b, count(existing) AS already
            MERGE (a)-[:KNOWS]->(b)
            MERGE (b)-[:KNOWS]->(a)
            RETURN already
            """
            result = await tx.run(query, a=a, b=b)
            return await result.single()

        async with translate_errors("insert_edge"):
            async with self._driver.session() as session:
                record = await session.execute_write(write_pair, a, b)
        if record is None:
            missing = a if await self.get_user(a) is None else b
            raise UserNotFound(missing)
        return record["already"] == 0

    async def delete_edge(self, requester_id: str, a: str, b: str) -> bool:
        check_party(requester_id, a, b)

        async def delete_pair(tx, a: str, b: str):
            query = """
            MATCH (:User {id: $a})-[r:KNOWS]-(:User {id: $b})
            DELETE r
            RETURN count(r) AS removed
            """
            result = await tx.run(query, a=a, b=b)
            return await result.single()

        async with translate_errors("delete_edge"):
            async with self._driver.session() as session:
                record = await session.execute_write(delete_pair, a, b)
        return record is not None and record["removed"] > 0

    async def get_network_friendships(self, requester_id: str, user_id: str) -> List[Edge]:
        check_owner(requester_id, user_id)
        query = """
        MATCH (me:User {id: $user_id})
        OPTIONAL MATCH (me)-[:KNOWS*1..2]-(n:User)
        WITH me, collect(DISTINCT n) AS reached
        WITH reached + me AS network
        UNWIND network AS a
        MATCH (a)-[:KNOWS]-(b:User)
        WHERE b IN network AND a.id < b.id
        RETURN DISTINCT a.id AS a, b.id AS b
        """
        async with translate_errors("get_network_friendships"):
            async with self._driver.session() as session:
                result = await session.run(query, user_id=user_id)
                records = await result.data()
        return [(r["a"], r["b"]) for r in records]
