"""
ETL script to load a friendship network into Neo4j.

It expects the following files at the project root (or the paths given on
the command line):
- profiles.csv     columns: user_id, name, email[, bio, avatar_url]
- friendships.csv  columns: user_id, friend_id

This script:
- Creates :User nodes with `id`, `name`, `email`, `bio` and `avatar_url`
- Creates both directions of a :KNOWS relationship for every friendship,
  skipping self-friendships and collapsing duplicates
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

import pandas as pd
from neo4j import GraphDatabase

from friendgraph.config import get_settings
from friendgraph.graph import canonical_edge


PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_profiles(path: Path) -> pd.DataFrame:
    """Load user profiles; missing optional columns become empty."""
    df = pd.read_csv(path, dtype=str)
    for column in ("bio", "avatar_url"):
        if column not in df.columns:
            df[column] = None
    df = df.astype(object).where(df.notna(), None)
    return df[["user_id", "name", "email", "bio", "avatar_url"]]


def load_friendships(path: Path) -> List[Tuple[str, str]]:
    """Load friendships as distinct canonical pairs, without self-edges."""
    df = pd.read_csv(path, dtype=str)
    pairs = {
        canonical_edge(row.user_id, row.friend_id)
        for row in df.itertuples(index=False)
        if row.user_id != row.friend_id
    }
    return sorted(pairs)


def run(profiles_path: Path, friendships_path: Path):
    """Main ETL entrypoint."""
    settings = get_settings()
    print(f"[Network ETL] Connecting to Neo4j at: {settings.neo4j_uri}")

    driver = GraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
    )
    with driver.session() as test_session:
        test_session.run("RETURN 1").single()
    print("[Network ETL] ✓ Connection successful")

    profiles = load_profiles(profiles_path)
    friendships = load_friendships(friendships_path)
    print(f"[Network ETL] Loaded: {len(profiles)} profiles, {len(friendships)} friendships")

    with driver.session() as session:
        print("[Network ETL] Creating User constraint...")
        session.run("CREATE CONSTRAINT IF NOT EXISTS FOR (u:User) REQUIRE u.id IS UNIQUE")

        print(f"[Network ETL] Creating {len(profiles)} User nodes...")
        for row in profiles.to_dict("records"):
            session.run(
                """
                MERGE (u:User {id: $user_id})
                SET u.name = $name,
                    u.email = $email,
                    u.bio = $bio,
                    u.avatar_url = $avatar_url
                """,
                **row,
            )
        print(f"[Network ETL] ✓ Created {len(profiles)} User nodes")

        print(f"[Network ETL] Creating {len(friendships)} friendships...")
        skipped = 0
        for a, b in friendships:
            record = session.run(
                """
                MATCH (a:User {id: $a}), (b:User {id: $b})
                MERGE (a)-[:KNOWS]->(b)
                MERGE (b)-[:KNOWS]->(a)
                RETURN count(*) AS cnt
                """,
                a=a,
                b=b,
            ).single()
            if record is None or record["cnt"] == 0:
                skipped += 1
        print(
            f"[Network ETL] ✓ Created {len(friendships) - skipped} friendships "
            f"({skipped} skipped, unknown user)"
        )

    driver.close()
    print("[Network ETL] ✓ ETL completed successfully")


if __name__ == "__main__":
    args = sys.argv[1:]
    run(
        Path(args[0]) if len(args) > 0 else PROJECT_ROOT / "profiles.csv",
        Path(args[1]) if len(args) > 1 else PROJECT_ROOT / "friendships.csv",
    )
