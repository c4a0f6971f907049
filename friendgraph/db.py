"""
Neo4j driver management and store selection.
"""

from loguru import logger
from neo4j import AsyncDriver, AsyncGraphDatabase

from .config import get_settings
from .store import InMemoryStore, Neo4jStore


_driver: AsyncDriver | None = None
_memory_store: InMemoryStore | None = None


def get_driver() -> AsyncDriver:
    """
    Lazily create and cache the Neo4j async driver.
    """
    global _driver  # noqa: PLW0603
    if _driver is None:
        settings = get_settings()
        logger.info(f"Connecting to Neo4j at {settings.neo4j_uri}")
        _driver = AsyncGraphDatabase.driver(
            settings.neo4j_uri,
            auth=(settings.neo4j_user, settings.neo4j_password),
        )
    return _driver


async def close_driver() -> None:
    global _driver  # noqa: PLW0603
    if _driver is not None:
        await _driver.close()
        _driver = None


def get_store() -> Neo4jStore | InMemoryStore:
    """Return the configured store; the in-memory one lives for the whole process."""
    global _memory_store  # noqa: PLW0603
    if get_settings().store_backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryStore()
        return _memory_store
    return Neo4jStore(get_driver())
