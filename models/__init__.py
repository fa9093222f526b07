"""Pydantic models for the Fable story memory.

Story:
    Durable story record (id, original_story, summary).

IndexEntry:
    Vector index projection of a Story (summary as document,
    original story as metadata).

Answer:
    Result of the character answer pipeline, including the
    no-active-story result.

Example:
    >>> from models import Story, IndexEntry
    >>> story = Story(id="1", original_story="...", summary="...")
    >>> entry = IndexEntry.from_story(story)
"""

from models.story import Story, IndexEntry, new_story_id
from models.answer import Answer, NO_ACTIVE_STORY_TEXT

__all__ = [
    "Story",
    "IndexEntry",
    "new_story_id",
    "Answer",
    "NO_ACTIVE_STORY_TEXT",
]
