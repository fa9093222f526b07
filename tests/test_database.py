"""Tests for the SQLite story store."""

import pytest

from database import StoryStore
from errors import StoreUnavailable
from models.story import Story


class TestStoryStore:

    def test_put_and_get(self, story_store):
        story_store.put("s1", "A dragon guarded a castle.", "A dragon guards a castle.")

        assert story_store.get("s1") == Story(
            id="s1",
            original_story="A dragon guarded a castle.",
            summary="A dragon guards a castle.",
        )

    def test_get_missing(self, story_store):
        assert story_store.get("missing") is None

    def test_list_all(self, story_store):
        story_store.put("s1", "one", "1")
        story_store.put("s2", "two", "2")

        stories = story_store.list_all()

        assert set(stories) == {"s1", "s2"}
        assert stories["s2"].original_story == "two"
        assert stories["s2"].summary == "2"

    def test_list_all_empty(self, story_store):
        assert story_store.list_all() == {}

    def test_put_same_id_replaces(self, story_store):
        story_store.put("s1", "one", "1")
        story_store.put("s1", "one", "1 again")

        assert story_store.count() == 1
        assert story_store.get("s1").summary == "1 again"

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "stories.db"
        with StoryStore(path) as store:
            store.put("s1", "one", "1")

        with StoryStore(path) as store:
            assert store.get("s1").summary == "1"

    def test_closed_connection_raises_store_unavailable(self, tmp_path):
        store = StoryStore(tmp_path / "stories.db")
        store.close()

        with pytest.raises(StoreUnavailable):
            store.get("s1")
        with pytest.raises(StoreUnavailable):
            store.put("s1", "one", "1")
        with pytest.raises(StoreUnavailable):
            store.list_all()

    def test_unopenable_path(self, tmp_path):
        # A directory cannot be opened as a database file
        with pytest.raises(StoreUnavailable):
            StoryStore(tmp_path)
