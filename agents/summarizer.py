"""Summarizer agent producing the stored summary of each story."""

import logging

from agents.llm import TextService

logger = logging.getLogger(__name__)


SUMMARIZER_PROMPT = "You are a helpful assistant that can summarize information concisely."


def _build_user_message(story: str) -> str:
    """Build the user message embedding the raw story."""
    return f'Please summarize the following story: "{story}"'


class StorySummarizer:
    """Summarizes a raw story once, at ingestion time."""

    def __init__(self, text_service: TextService):
        self.text_service = text_service

    async def summarize(self, story: str) -> str:
        """Summarize a story.

        Args:
            story: Raw story text

        Returns:
            Summary with surrounding whitespace removed

        Raises:
            GenerationFailure: If the model call fails
        """
        output = await self.text_service.complete(SUMMARIZER_PROMPT, [_build_user_message(story)])
        summary = output.strip()
        logger.info("Story summarized | story_chars=%d summary_chars=%d", len(story), len(summary))
        return summary
