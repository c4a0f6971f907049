"""
Configuration utilities for the friend suggestion service.
"""

from functools import lru_cache
import os
import sys

from loguru import logger
from pydantic import BaseModel


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    neo4j_uri: str = os.getenv("NEO4J_URI", "bolt://localhost:7687")
    neo4j_user: str = os.getenv("NEO4J_USER", "neo4j")
    neo4j_password: str = os.getenv("NEO4J_PASSWORD", "password")

    # "neo4j" or "memory"
    store_backend: str = os.getenv("FRIENDGRAPH_STORE", "neo4j")
    suggestion_limit: int = int(os.getenv("FRIENDGRAPH_SUGGESTION_LIMIT", "20"))
    use_network_query: bool = _env_bool("FRIENDGRAPH_USE_NETWORK_QUERY")
    log_level: str = os.getenv("FRIENDGRAPH_LOG_LEVEL", "INFO")

    # Traversal playback pacing, in milliseconds.
    delay_start_ms: int = int(os.getenv("FRIENDGRAPH_DELAY_START_MS", "800"))
    delay_friend_ms: int = int(os.getenv("FRIENDGRAPH_DELAY_FRIEND_MS", "600"))
    delay_found_ms: int = int(os.getenv("FRIENDGRAPH_DELAY_FOUND_MS", "400"))
    delay_after_friend_ms: int = int(os.getenv("FRIENDGRAPH_DELAY_AFTER_FRIEND_MS", "200"))
    top_n: int = int(os.getenv("FRIENDGRAPH_TOP_N", "5"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or get_settings().log_level).upper())
