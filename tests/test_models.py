"""Tests for story, index entry and answer models."""

import re

from models import Answer, IndexEntry, NO_ACTIVE_STORY_TEXT, Story, new_story_id


def test_story_ids_are_unique():
    ids = {new_story_id() for _ in range(2000)}
    assert len(ids) == 2000


def test_story_id_format():
    assert re.fullmatch(r"\d{13}-[0-9a-f]{6}", new_story_id())


def test_index_entry_projects_story():
    story = Story(id="s1", original_story="A dragon guarded a castle.", summary="A dragon guards a castle.")

    entry = IndexEntry.from_story(story)

    assert entry.id == "s1"
    assert entry.document == "A dragon guards a castle."
    assert entry.metadata == {"original_story": "A dragon guarded a castle."}


def test_no_active_story_answer():
    answer = Answer.no_active_story()

    assert answer.text == NO_ACTIVE_STORY_TEXT
    assert answer.story_id is None
    assert not answer.found


def test_grounded_answer_is_found():
    assert Answer(text="Gold.", story_id="s1").found
