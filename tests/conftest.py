"""Shared fixtures for the story memory tests.

Provides in-memory stand-ins for the ChromaDB client, the embedder and the
text model, plus a real SQLite story store in a temporary directory.
"""

import pytest

from agents.characters import CHARACTER_PROMPT
from agents.narrator import NARRATOR_PROMPT
from agents.summarizer import SUMMARIZER_PROMPT
from database import StoryStore
from memory.vector_store import VectorStore
from pipeline import StoryMemory


class FakeCollection:
    """Dict-backed collection with the ChromaDB methods the code uses."""

    def __init__(self, name: str):
        self.name = name
        self.records: dict[str, dict] = {}
        self.upsert_calls = 0
        self.fail_with: Exception | None = None

    def upsert(self, ids, documents, metadatas, embeddings):
        if self.fail_with:
            raise self.fail_with
        self.upsert_calls += 1
        for id_, doc, meta, emb in zip(ids, documents, metadatas, embeddings):
            self.records[id_] = {"document": doc, "metadata": dict(meta), "embedding": list(emb)}

    def get(self, ids, include=None):
        found = [i for i in ids if i in self.records]
        return {
            "ids": found,
            "documents": [self.records[i]["document"] for i in found],
            "metadatas": [self.records[i]["metadata"] for i in found],
        }

    def count(self):
        return len(self.records)


class FakeChromaClient:
    """Client holding FakeCollections by name."""

    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def list_collections(self):
        return list(self.collections.values())

    def get_or_create_collection(self, name, embedding_function=None):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def get_collection(self, name, embedding_function=None):
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        return self.collections[name]


class FakeEmbedder:
    """Deterministic 3-dim embeddings derived from text length."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.fail_with: Exception | None = None

    async def embed(self, texts):
        self.calls.append(list(texts))
        if self.fail_with:
            raise self.fail_with
        return [[float(len(t)), 1.0, 0.0] for t in texts]


class ScriptedTextService:
    """Text service returning canned replies per system prompt.

    Records every call as (system_prompt, messages).
    """

    def __init__(self, summary="A summary.", characters="Alice, Bob", answer="An answer."):
        self.replies = {
            SUMMARIZER_PROMPT: summary,
            CHARACTER_PROMPT: characters,
            NARRATOR_PROMPT: answer,
        }
        self.calls: list[tuple[str, list[str]]] = []
        self.fail_with: Exception | None = None

    async def complete(self, system_prompt, messages):
        self.calls.append((system_prompt, list(messages)))
        if self.fail_with:
            raise self.fail_with
        return self.replies[system_prompt]

    def calls_for(self, system_prompt):
        return [messages for prompt, messages in self.calls if prompt == system_prompt]


@pytest.fixture
def story_store(tmp_path):
    store = StoryStore(tmp_path / "stories.db")
    yield store
    store.close()


@pytest.fixture
def chroma_client():
    return FakeChromaClient()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def vector_store(chroma_client, embedder):
    return VectorStore(chroma_client, embedder, "story_summaries")


@pytest.fixture
def text_service():
    return ScriptedTextService()


@pytest.fixture
def memory(story_store, vector_store, text_service):
    return StoryMemory(story_store, vector_store, text_service)


@pytest.fixture
def collection(chroma_client, vector_store):
    vector_store.connect()
    return chroma_client.collections["story_summaries"]
