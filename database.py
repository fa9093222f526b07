"""Durable story store for the Fable memory service.

This module provides the SQLite-based source of truth for stories. The
vector index is derived from this store and can always be rebuilt from it
(see StoryMemory.rehydrate).

Database Schema:
    stories table:
        - id (TEXT, PK): Story identifier from new_story_id()
        - original_story (TEXT): Raw story text
        - summary (TEXT): Generated summary
        - created_at (INTEGER): Ingestion timestamp (Unix epoch)

Features:
    - WAL mode for concurrent read/write access
    - Insert-or-replace writes keyed by story id
    - All SQLite errors surfaced as StoreUnavailable
    - Context manager support for auto-cleanup
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from errors import StoreUnavailable
from models.story import Story

logger = logging.getLogger(__name__)


class StoryStore:
    """SQLite store holding the authoritative copy of every story.

    Example:
        >>> with StoryStore("stories.db") as store:
        ...     store.put(story_id, "A dragon guarded a castle.", "A dragon guards a castle.")
        ...     story = store.get(story_id)
        ...     everything = store.list_all()
    """

    SCHEMA = """
    -- One row per ingested story
    CREATE TABLE IF NOT EXISTS stories (
        id TEXT PRIMARY KEY,             -- Story identifier
        original_story TEXT NOT NULL,    -- Raw story text
        summary TEXT NOT NULL,           -- Generated summary
        created_at INTEGER NOT NULL      -- When it was stored (Unix epoch)
    );
    """

    path: Path
    conn: sqlite3.Connection

    def __init__(self, path: Path | str):
        """Open the store, creating the file and schema if needed.

        Args:
            path: Path to SQLite database file

        Raises:
            StoreUnavailable: If the database cannot be opened
        """
        self.path = Path(path)
        with self._guard("open"):
            self.conn = sqlite3.connect(str(self.path))
            self.conn.row_factory = sqlite3.Row

            # WAL mode allows concurrent readers during writes
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.executescript(self.SCHEMA)
            self.conn.commit()
        logger.debug("Story store initialized | path=%s", self.path)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate SQLite errors into StoreUnavailable."""
        try:
            yield
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Story store {operation} failed ({self.path}): {e}") from e

    def put(self, story_id: str, original_story: str, summary: str) -> None:
        """Persist a story under its id.

        Args:
            story_id: Story identifier
            original_story: Raw story text
            summary: Generated summary

        Raises:
            StoreUnavailable: If the write fails
        """
        with self._guard("put"):
            self.conn.execute(
                """
                INSERT OR REPLACE INTO stories (id, original_story, summary, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (story_id, original_story, summary, int(time.time())),
            )
            self.conn.commit()
        logger.debug("Story saved | id=%s", story_id)

    def get(self, story_id: str) -> Story | None:
        """Get a story by id.

        Returns:
            The Story, or None if no story has that id
        """
        with self._guard("get"):
            row = self.conn.execute(
                "SELECT id, original_story, summary FROM stories WHERE id = ?",
                (story_id,),
            ).fetchone()
        if row is None:
            return None
        return Story(id=row["id"], original_story=row["original_story"], summary=row["summary"])

    def list_all(self) -> dict[str, Story]:
        """Load every stored story.

        Returns:
            Mapping of story id to Story (no particular order)
        """
        with self._guard("list_all"):
            rows = self.conn.execute(
                "SELECT id, original_story, summary FROM stories"
            ).fetchall()
        return {
            row["id"]: Story(id=row["id"], original_story=row["original_story"], summary=row["summary"])
            for row in rows
        }

    def count(self) -> int:
        """Get the number of stored stories."""
        with self._guard("count"):
            row = self.conn.execute("SELECT COUNT(*) AS total FROM stories").fetchone()
        return row["total"] or 0

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "StoryStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
