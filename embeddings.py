"""Embedding functions for the story vector index.

Summaries are embedded before they are written to the vector index. Two
providers are supported:

OpenAIEmbedder (EMBEDDING_PROVIDER=openai, default):
    Calls the OpenAI embeddings API (text-embedding-3-small by default).

LocalEmbedder (EMBEDDING_PROVIDER=local):
    Runs BAAI/bge-small-en-v1.5 locally via sentence-transformers.
    - 384 dimensions
    - Fast inference on CPU
    - Normalized vectors

Both expose the same coroutine, so the vector store does not care which
one it was given.

Usage:
    >>> from embeddings import create_embedder
    >>> embedder = create_embedder(config)
    >>> vectors = await embedder.embed(["A dragon guards a castle."])
"""

import asyncio
import logging
from typing import Protocol

import numpy as np
from openai import AsyncOpenAI

from config import Config

logger = logging.getLogger(__name__)

# Local model configuration
LOCAL_MODEL_NAME = "BAAI/bge-small-en-v1.5"
LOCAL_EMBEDDING_DIM = 384


class Embedder(Protocol):
    """Anything that can turn documents into embedding vectors."""

    async def embed(self, texts: list[str]) -> list[list[float]]:
        ...


class LocalEmbedder:
    """Wrapper for a sentence-transformers embedding model.

    Provides lazy loading and caching of the model instance.
    The model is loaded on first use and reused for subsequent calls.

    Attributes:
        model_name: HuggingFace model identifier
        dim: Embedding dimension size
    """

    def __init__(self, model_name: str = LOCAL_MODEL_NAME):
        self.model_name = model_name
        self.dim = LOCAL_EMBEDDING_DIM
        self._model = None

    def _load_model(self):
        """Lazily load the sentence-transformers model."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self.model_name)
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
            logger.info("Embedding model loaded | dim=%d", self.dim)
        return self._model

    def encode_batch(self, texts: list[str], batch_size: int = 32) -> np.ndarray:
        """Encode multiple texts to embedding vectors.

        Args:
            texts: List of input texts
            batch_size: Batch size for encoding

        Returns:
            numpy array of shape (len(texts), dim) with float32 values
        """
        if not texts:
            return np.array([], dtype=np.float32).reshape(0, self.dim)

        model = self._load_model()
        embeddings = model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
            batch_size=batch_size,
            show_progress_bar=False,
        )
        return embeddings.astype(np.float32)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Encode texts in a worker thread so the event loop stays free."""
        vectors = await asyncio.to_thread(self.encode_batch, texts)
        return vectors.tolist()


class OpenAIEmbedder:
    """Embeddings from the OpenAI embeddings API."""

    def __init__(self, model_name: str, api_key: str = "", client: AsyncOpenAI | None = None):
        self.model_name = model_name
        self._client = client or AsyncOpenAI(api_key=api_key or None)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Request one embedding per text, returned in input order."""
        if not texts:
            return []
        response = await self._client.embeddings.create(model=self.model_name, input=texts)
        data = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in data]


def create_embedder(config: Config) -> Embedder:
    """Build the embedder selected by EMBEDDING_PROVIDER.

    Args:
        config: Application configuration

    Returns:
        LocalEmbedder or OpenAIEmbedder instance
    """
    if config.embedding_provider == "local":
        return LocalEmbedder(config.embedding_model or LOCAL_MODEL_NAME)
    return OpenAIEmbedder(config.embedding_model, api_key=config.openai_api_key)
