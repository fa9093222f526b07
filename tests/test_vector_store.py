"""Tests for the ChromaDB vector store adapter."""

import logging

import pytest
from unittest.mock import MagicMock

import memory.vector_store as vector_store_module
from config import Config
from errors import EmbeddingFailure, IndexUnavailable
from memory.vector_store import VectorStore
from models.story import IndexEntry, Story


@pytest.fixture
def entry():
    return IndexEntry.from_story(Story(
        id="1718031234567-abc123",
        original_story="A dragon guarded a castle.",
        summary="A dragon guards a castle.",
    ))


class TestConnect:
    """Attach-or-create of the collection."""

    def test_creates_missing_collection(self, vector_store, chroma_client, caplog):
        with caplog.at_level(logging.INFO, logger="memory.vector_store"):
            vector_store.connect()

        assert "story_summaries" in chroma_client.collections
        assert "New vector collection created" in caplog.text

    def test_reattaches_existing_collection(self, vector_store, chroma_client, caplog):
        chroma_client.get_or_create_collection("story_summaries")

        with caplog.at_level(logging.INFO, logger="memory.vector_store"):
            vector_store.connect()

        assert "Existing vector collection attached" in caplog.text

    def test_accepts_collection_names_from_older_clients(self, embedder):
        client = MagicMock()
        client.list_collections.return_value = ["story_summaries"]

        VectorStore(client, embedder).connect()

        client.get_or_create_collection.assert_called_once_with(
            name="story_summaries",
            embedding_function=None,
        )

    def test_connect_is_idempotent(self, vector_store, chroma_client):
        vector_store.connect()
        first = vector_store.collection
        vector_store.connect()

        assert vector_store.collection is first
        assert len(chroma_client.collections) == 1

    def test_connection_error(self, embedder):
        client = MagicMock()
        client.list_collections.side_effect = ConnectionError("refused")

        with pytest.raises(IndexUnavailable):
            VectorStore(client, embedder).connect()


class TestUpsert:
    """Writing entries with explicit embeddings."""

    @pytest.mark.asyncio
    async def test_upsert_writes_entry(self, vector_store, collection, entry, embedder):
        await vector_store.upsert(entry)

        assert embedder.calls == [["A dragon guards a castle."]]
        record = collection.records[entry.id]
        assert record["document"] == "A dragon guards a castle."
        assert record["metadata"] == {"original_story": "A dragon guarded a castle."}
        assert record["embedding"] == [25.0, 1.0, 0.0]

    @pytest.mark.asyncio
    async def test_upsert_connects_lazily(self, vector_store, chroma_client, entry):
        await vector_store.upsert(entry)

        assert chroma_client.collections["story_summaries"].count() == 1

    @pytest.mark.asyncio
    async def test_upsert_overwrites_by_id(self, vector_store, collection, entry):
        await vector_store.upsert(entry)
        await vector_store.upsert(entry.model_copy(update={"document": "Updated summary."}))

        assert collection.count() == 1
        assert collection.records[entry.id]["document"] == "Updated summary."

    @pytest.mark.asyncio
    async def test_embedding_failure(self, vector_store, collection, entry, embedder):
        embedder.fail_with = RuntimeError("quota exceeded")

        with pytest.raises(EmbeddingFailure):
            await vector_store.upsert(entry)
        assert collection.count() == 0

    @pytest.mark.asyncio
    async def test_wrong_embedding_count(self, vector_store, collection, entry, embedder):
        async def no_vectors(texts):
            return []
        embedder.embed = no_vectors

        with pytest.raises(EmbeddingFailure):
            await vector_store.upsert(entry)

    @pytest.mark.asyncio
    async def test_index_write_failure(self, vector_store, collection, entry):
        collection.fail_with = ConnectionError("server gone")

        with pytest.raises(IndexUnavailable) as exc_info:
            await vector_store.upsert(entry)
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestRead:
    """get and count."""

    @pytest.mark.asyncio
    async def test_get_returns_entry(self, vector_store, entry):
        await vector_store.upsert(entry)

        assert await vector_store.get(entry.id) == entry

    @pytest.mark.asyncio
    async def test_get_missing(self, vector_store):
        assert await vector_store.get("nope") is None

    def test_count_failure(self, vector_store, collection):
        collection.count = MagicMock(side_effect=ConnectionError("server gone"))

        with pytest.raises(IndexUnavailable):
            vector_store.count()

    def test_count_missing_collection_is_zero(self, vector_store, chroma_client):
        assert vector_store.count() == 0
        assert chroma_client.collections == {}

    @pytest.mark.asyncio
    async def test_count_existing_collection_without_connect(self, chroma_client, embedder, entry):
        await VectorStore(chroma_client, embedder).upsert(entry)

        assert VectorStore(chroma_client, embedder).count() == 1


class TestLazyClient:
    """Client and embedder built on first use."""

    def test_from_config_builds_nothing(self, monkeypatch, tmp_path):
        client_factory = MagicMock()
        embedder_factory = MagicMock()
        monkeypatch.setattr(vector_store_module, "create_chroma_client", client_factory)
        monkeypatch.setattr(vector_store_module, "create_embedder", embedder_factory)

        store = VectorStore.from_config(Config(vector_db_path=tmp_path / "vectors"))

        client_factory.assert_not_called()
        embedder_factory.assert_not_called()
        assert store.collection_name == "story_summaries"

    def test_client_created_once_on_connect(self, chroma_client, embedder):
        factory = MagicMock(return_value=chroma_client)
        store = VectorStore(embedder=embedder, client_factory=factory)

        store.connect()
        store.connect()

        factory.assert_called_once_with()
        assert "story_summaries" in chroma_client.collections

    def test_requires_client_or_factory(self, embedder):
        with pytest.raises(ValueError):
            VectorStore(embedder=embedder)
