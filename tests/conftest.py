"""
Shared fixtures: a small friendship network held in memory.

    alice — bob — carol
      |      |
     dave — erin     frank (no friends)
"""

import pytest

from friendgraph.config import Settings
from friendgraph.models import User
from friendgraph.store import InMemoryStore


def make_user(user_id: str, name: str) -> User:
    return User(user_id=user_id, name=name, email=f"{user_id}@example.com")


USERS = [
    make_user("alice", "Alice"),
    make_user("bob", "Bob"),
    make_user("carol", "Carol"),
    make_user("dave", "Dave"),
    make_user("erin", "Erin"),
    make_user("frank", "Frank"),
]

EDGES = [
    ("alice", "bob"),
    ("bob", "carol"),
    ("alice", "dave"),
    ("bob", "erin"),
    ("dave", "erin"),
]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        store_backend="memory",
        suggestion_limit=20,
        use_network_query=False,
        delay_start_ms=800,
        delay_friend_ms=600,
        delay_found_ms=400,
        delay_after_friend_ms=200,
        top_n=5,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(users=USERS, edges=EDGES)
