"""Story data models for the memory store and vector index.

This module defines the Story record kept in the durable store and the
IndexEntry projected from it into the vector index.

Identifier Strategy:
    Story ids are the ingestion time in milliseconds followed by a short
    random suffix, e.g. '1718031234567-3f9a1c'. The timestamp keeps ids
    roughly ordered by ingestion time; the suffix keeps two ingestions in
    the same millisecond from colliding.
"""

import secrets
import time

from pydantic import BaseModel, Field


def new_story_id() -> str:
    """Allocate a fresh story identifier.

    Returns:
        String of the form '<epoch_millis>-<6 hex chars>'
    """
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(3)}"


class Story(BaseModel):
    """A story persisted in the durable store.

    The durable store is the source of truth: the vector index only ever
    holds projections of these records (see IndexEntry).

    Attributes:
        id: Opaque unique identifier assigned at ingestion
        original_story: Raw story text supplied by the caller
        summary: Summary produced once by the text model at ingestion

    Example:
        >>> story = Story(
        ...     id=new_story_id(),
        ...     original_story="A dragon guarded a castle.",
        ...     summary="A dragon guards a castle.",
        ... )
    """

    id: str = Field(description="Unique story identifier")
    original_story: str = Field(description="Raw story text")
    summary: str = Field(description="Generated summary of the story")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"Story({self.id}, '{self.summary[:50]}...')"


class IndexEntry(BaseModel):
    """A vector index record derived from a Story.

    The summary is the embedded document; the raw story rides along as
    metadata. Entries have no lifecycle of their own and can be rebuilt
    from the durable store at any time.
    """

    id: str
    document: str
    metadata: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_story(cls, story: Story) -> "IndexEntry":
        """Project a Story into its vector index entry."""
        return cls(
            id=story.id,
            document=story.summary,
            metadata={"original_story": story.original_story},
        )
