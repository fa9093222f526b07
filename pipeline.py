"""Story memory pipeline: rehydration, ingestion and grounded answers.

Stores:
    StoryStore (SQLite) is the source of truth.
    VectorStore (ChromaDB) is a derived index that can be rebuilt from it.

Flow:
    1. Startup: attach the vector collection, then rehydrate it from the store
    2. add_story: summarize -> index upsert -> store put -> advance pointer
    3. answer: pointer -> stored summary -> in-character model answer
    4. extract_character_names: stateless model call, nothing stored

Consistency:
    The two stores are written without a transaction. The index is written
    first, so a failed store write leaves at worst an orphaned index entry,
    which nothing treats as authoritative. Rehydration re-projects every
    stored story into the index and is safe to repeat.
"""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any

from agents.characters import CharacterExtractor
from agents.llm import TextService
from agents.narrator import CharacterNarrator
from agents.summarizer import StorySummarizer
from config import Config
from database import StoryStore
from errors import FableError, IngestionFailure, RehydrationFailure
from memory.pointer import LatestStoryPointer
from memory.vector_store import VectorStore
from models.answer import Answer
from models.story import IndexEntry, new_story_id
from observability.tracing import setup_tracing, trace_operation

logger = logging.getLogger(__name__)


@dataclass
class RehydrationStats:
    """Counts from one rehydration pass."""
    stories: int = 0  # Stories found in the store
    upserted: int = 0  # Index entries written
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class StoryMemory:
    """Story memory backed by a durable store and a vector index.

    Example:
        >>> memory = StoryMemory.from_config(config)
        >>> await memory.start()  # attach index + rehydrate
        >>> story_id = await memory.add_story("A dragon guarded a castle.")
        >>> answer = await memory.answer("What is your treasure?", "Dragon")
    """

    def __init__(
        self,
        store: StoryStore,
        index: VectorStore,
        text_service: TextService,
        pointer: LatestStoryPointer | None = None,
    ):
        """Initialize the memory with its collaborators.

        Args:
            store: Durable story store (source of truth)
            index: Vector index of summaries
            text_service: Text model used by all agents
            pointer: Latest-story pointer (a fresh, unset one by default)
        """
        self.store = store
        self.index = index
        self.summarizer = StorySummarizer(text_service)
        self.extractor = CharacterExtractor(text_service)
        self.narrator = CharacterNarrator(text_service)
        self.pointer = pointer if pointer is not None else LatestStoryPointer()

    @classmethod
    def from_config(cls, config: Config) -> "StoryMemory":
        """Build the memory and its backing services from configuration.

        The ChromaDB client and embedder are created on first index use, so
        commands that only read the store never contact the index.

        Raises:
            StoreUnavailable: If the story database cannot be opened
        """
        if config.enable_logfire:
            setup_tracing(enabled=True, service_name="fable", token=config.logfire_token)

        store = StoryStore(config.db_path)
        return cls(store, VectorStore.from_config(config), TextService(config.text_model))

    async def start(self) -> RehydrationStats:
        """Attach the vector collection and rehydrate it from the store.

        Must succeed before the memory serves requests.

        Raises:
            RehydrationFailure: If the index cannot be attached or rebuilt
        """
        try:
            self.index.connect()
            return await self.rehydrate()
        except FableError as e:
            logger.error("Startup rehydration failed | type=%s error=%s", type(e).__name__, e)
            raise RehydrationFailure(f"Cannot rebuild vector index from story store: {e}") from e

    async def rehydrate(self) -> RehydrationStats:
        """Re-project every stored story into the vector index.

        Entries are upserted one at a time, keyed by story id, so running
        this repeatedly never duplicates entries. Index entries with no
        stored story are left untouched.

        Returns:
            RehydrationStats for this pass

        Raises:
            StoreUnavailable, IndexUnavailable, EmbeddingFailure
        """
        start = time.time()
        stats = RehydrationStats()

        with trace_operation("rehydrate") as attrs:
            stories = self.store.list_all()
            stats.stories = len(stories)

            if not stories:
                logger.info("No stories found in store, nothing to rehydrate")
            else:
                for story in stories.values():
                    await self.index.upsert(IndexEntry.from_story(story))
                    stats.upserted += 1
                logger.info("Vector index rehydrated | stories=%d", stats.upserted)

            stats.duration = time.time() - start
            attrs.update(stats.to_dict())

        return stats

    async def add_story(self, original_story: str) -> str:
        """Summarize, index and store a new story, then make it the latest.

        Steps:
            1. Summarize the story with the text model
            2. Allocate a new story id
            3. Upsert the summary into the vector index
            4. Persist the story in the durable store
            5. Point the latest-story pointer at it

        No rollback happens on failure, and the pointer only moves after
        both writes succeed.

        Args:
            original_story: Raw story text

        Returns:
            The new story id

        Raises:
            ValueError: If the story text is empty
            IngestionFailure: If any step fails (stage and cause attached)
        """
        if not original_story or not original_story.strip():
            raise ValueError("Story text must not be empty")

        with trace_operation("add_story", {"story_chars": len(original_story)}) as attrs:
            stage = "summarize"
            try:
                summary = await self.summarizer.summarize(original_story)
                story_id = new_story_id()

                stage = "index"
                await self.index.upsert(IndexEntry(
                    id=story_id,
                    document=summary,
                    metadata={"original_story": original_story},
                ))

                stage = "store"
                self.store.put(story_id, original_story, summary)
            except Exception as e:
                logger.error("Story ingestion failed | stage=%s type=%s error=%s", stage, type(e).__name__, e)
                raise IngestionFailure(stage, str(e)) from e

            self.pointer.advance(story_id)
            attrs["story_id"] = story_id

        logger.info("Story added | id=%s summary_chars=%d", story_id, len(summary))
        return story_id

    async def answer(
        self,
        query: str,
        character_name: str,
        pointer: LatestStoryPointer | None = None,
    ) -> Answer:
        """Answer a question in character, grounded in the latest story.

        Only the story the pointer names is used as context; the vector
        index is not consulted.

        Args:
            query: The user's question
            character_name: Character to answer as
            pointer: Pointer to resolve (defaults to this memory's pointer)

        Returns:
            Answer with the raw model output, or Answer.no_active_story()
            when the pointer is unset or its story is missing

        Raises:
            StoreUnavailable: If the store cannot be read
            GenerationFailure: If the model call fails
        """
        pointer = pointer if pointer is not None else self.pointer

        if not pointer.is_set:
            logger.info("No active story, add a story first")
            return Answer.no_active_story()

        with trace_operation("answer", {"story_id": pointer.story_id, "character": character_name}):
            story = self.store.get(pointer.story_id)
            if story is None:
                logger.warning("Latest story missing from store | id=%s", pointer.story_id)
                return Answer.no_active_story()

            text = await self.narrator.answer(story.summary, character_name, query)

        return Answer(text=text, story_id=story.id)

    async def extract_character_names(self, original_story: str) -> str:
        """Extract character names from a story, comma-joined.

        Nothing is stored and the pointer is not touched.

        Raises:
            GenerationFailure: If the model call fails
        """
        with trace_operation("extract_characters", {"story_chars": len(original_story)}):
            return await self.extractor.extract(original_story)

    def close(self) -> None:
        """Clean up resources."""
        self.store.close()
