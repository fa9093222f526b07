"""Memory infrastructure derived from the story store.

VectorStore:
    ChromaDB collection of story summaries keyed by story id.
    Rebuilt from the durable store on startup (rehydration).

LatestStoryPointer:
    Id of the most recently ingested story, used to ground answers.

Requirements:
    pip install chromadb

Example:
    >>> from memory import VectorStore, create_chroma_client
    >>> store = VectorStore(create_chroma_client(config), embedder, "story_summaries")
    >>> store.connect()
    >>> await store.upsert(entry)
"""

from memory.pointer import LatestStoryPointer
from memory.vector_store import VectorStore, create_chroma_client

__all__ = [
    "LatestStoryPointer",
    "VectorStore",
    "create_chroma_client",
]
