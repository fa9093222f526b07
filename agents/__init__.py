"""Language-model agents for the Fable story memory.

Every agent shares one TextService (system prompt + user messages -> text):

StorySummarizer:
    Concise summary of a story, stored alongside it at ingestion.

CharacterExtractor:
    Comma-separated character names found in a story.

CharacterNarrator:
    Answers a question in a character's voice, grounded in a summary.

Example:
    >>> from agents import TextService, StorySummarizer
    >>> summarizer = StorySummarizer(TextService(config.text_model))
    >>> summary = await summarizer.summarize("A dragon guarded a castle.")
"""

from agents.llm import TextService
from agents.summarizer import StorySummarizer
from agents.characters import CharacterExtractor
from agents.narrator import CharacterNarrator

__all__ = [
    "TextService",
    "StorySummarizer",
    "CharacterExtractor",
    "CharacterNarrator",
]
