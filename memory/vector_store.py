"""Vector index of story summaries using ChromaDB.

This module keeps a ChromaDB collection in step with the durable story
store. Each entry is keyed by story id, embeds the story summary as its
document, and carries the raw story as metadata.

Features:
    - Attach-or-create of the collection by name (idempotent)
    - Upsert keyed by id, so rewriting an entry never duplicates it
    - Embeddings computed explicitly by the configured embedder
    - Remote (HttpClient) or local persistent (PersistentClient) backends

The index is a derived cache: it can be discarded and rebuilt from the
story store at any time without data loss. It is written on every
ingestion and rehydration; nothing queries it for similarity yet.
"""

import asyncio
import logging
from typing import Any, Callable

from config import Config
from embeddings import Embedder, create_embedder
from errors import EmbeddingFailure, IndexUnavailable
from models.story import IndexEntry

logger = logging.getLogger(__name__)


def create_chroma_client(config: Config) -> Any:
    """Create a ChromaDB client from configuration.

    Uses a remote server when CHROMA_HOST is set, otherwise a persistent
    local index under VECTOR_DB_PATH.

    Raises:
        IndexUnavailable: If the client cannot be created
    """
    import chromadb
    from chromadb.config import Settings

    settings = Settings(anonymized_telemetry=False)
    try:
        if config.chroma_host:
            logger.info("Connecting to ChromaDB server | host=%s port=%d", config.chroma_host, config.chroma_port)
            return chromadb.HttpClient(host=config.chroma_host, port=config.chroma_port, settings=settings)
        config.vector_db_path.mkdir(parents=True, exist_ok=True)
        logger.info("Opening local ChromaDB index | path=%s", config.vector_db_path)
        return chromadb.PersistentClient(path=str(config.vector_db_path), settings=settings)
    except Exception as e:
        raise IndexUnavailable(f"Cannot create ChromaDB client: {e}") from e


class VectorStore:
    """ChromaDB-backed index of story summaries.

    The client and embedder may be passed directly or as factories. A
    factory runs on first use, so building a VectorStore never opens a
    connection or creates a directory.

    Example:
        >>> store = VectorStore(client, embedder, "story_summaries")
        >>> store.connect()
        >>> await store.upsert(IndexEntry.from_story(story))
    """

    def __init__(
        self,
        client: Any = None,
        embedder: Embedder | None = None,
        collection_name: str = "story_summaries",
        *,
        client_factory: Callable[[], Any] | None = None,
        embedder_factory: Callable[[], Embedder] | None = None,
    ):
        """Initialize the vector store.

        Args:
            client: ChromaDB client (HttpClient, PersistentClient, ...)
            embedder: Embedding function for documents
            collection_name: Name of the ChromaDB collection
            client_factory: Builds the client on first use when client is None
            embedder_factory: Builds the embedder on first use when embedder is None
        """
        if client is None and client_factory is None:
            raise ValueError("VectorStore needs a client or a client_factory")
        if embedder is None and embedder_factory is None:
            raise ValueError("VectorStore needs an embedder or an embedder_factory")
        self._client = client
        self._embedder = embedder
        self._client_factory = client_factory
        self._embedder_factory = embedder_factory
        self.collection_name = collection_name
        self._collection = None

    @classmethod
    def from_config(cls, config: Config) -> "VectorStore":
        """Build a store whose client and embedder are created on first use."""
        return cls(
            collection_name=config.collection_name,
            client_factory=lambda: create_chroma_client(config),
            embedder_factory=lambda: create_embedder(config),
        )

    @property
    def client(self) -> Any:
        """The ChromaDB client, created on first use.

        Raises:
            IndexUnavailable: If the client cannot be created
        """
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    @property
    def embedder(self) -> Embedder:
        """The document embedder, created on first use."""
        if self._embedder is None:
            self._embedder = self._embedder_factory()
        return self._embedder

    def connect(self) -> None:
        """Attach to the collection, creating it if absent.

        Safe to call repeatedly. The collection is created without an
        embedding function because embeddings are always supplied.

        Raises:
            IndexUnavailable: If the collection cannot be listed or created
        """
        try:
            # Older clients return names, newer ones Collection objects
            existing = {getattr(c, "name", c) for c in self.client.list_collections()}
            self._collection = self.client.get_or_create_collection(
                name=self.collection_name,
                embedding_function=None,
            )
        except Exception as e:
            raise IndexUnavailable(f"Cannot open collection '{self.collection_name}': {e}") from e

        if self.collection_name in existing:
            logger.info("Existing vector collection attached | name=%s", self.collection_name)
        else:
            logger.info("New vector collection created | name=%s", self.collection_name)

    @property
    def collection(self) -> Any:
        """The attached collection, connecting on first use."""
        if self._collection is None:
            self.connect()
        return self._collection

    async def upsert(self, entry: IndexEntry) -> None:
        """Add or overwrite one index entry.

        Args:
            entry: Entry to write (id, summary document, metadata)

        Raises:
            EmbeddingFailure: If the document cannot be embedded
            IndexUnavailable: If the write to ChromaDB fails
        """
        collection = self.collection

        try:
            embeddings = await self.embedder.embed([entry.document])
        except Exception as e:
            raise EmbeddingFailure(f"Embedding failed for story {entry.id}: {e}") from e
        if len(embeddings) != 1:
            raise EmbeddingFailure(
                f"Embedding failed for story {entry.id}: expected 1 vector, got {len(embeddings)}"
            )

        try:
            await asyncio.to_thread(
                collection.upsert,
                ids=[entry.id],
                documents=[entry.document],
                metadatas=[entry.metadata],
                embeddings=embeddings,
            )
        except Exception as e:
            raise IndexUnavailable(f"Vector upsert failed for story {entry.id}: {e}") from e

        logger.debug("Index entry upserted | id=%s", entry.id)

    async def get(self, story_id: str) -> IndexEntry | None:
        """Fetch one entry by id.

        Returns:
            The IndexEntry, or None if the id is not indexed

        Raises:
            IndexUnavailable: If the read fails
        """
        try:
            result = await asyncio.to_thread(
                self.collection.get,
                ids=[story_id],
                include=["documents", "metadatas"],
            )
        except IndexUnavailable:
            raise
        except Exception as e:
            raise IndexUnavailable(f"Vector get failed for story {story_id}: {e}") from e

        if not result["ids"]:
            return None
        return IndexEntry(
            id=result["ids"][0],
            document=result["documents"][0],
            metadata=dict(result["metadatas"][0] or {}),
        )

    def count(self) -> int:
        """Get the number of entries in the index.

        Read-only: a missing collection counts as 0 and is not created.

        Raises:
            IndexUnavailable: If the collection cannot be read
        """
        try:
            collection = self._collection
            if collection is None:
                existing = {getattr(c, "name", c) for c in self.client.list_collections()}
                if self.collection_name not in existing:
                    return 0
                collection = self.client.get_collection(name=self.collection_name, embedding_function=None)
            return collection.count()
        except IndexUnavailable:
            raise
        except Exception as e:
            raise IndexUnavailable(f"Vector count failed: {e}") from e
