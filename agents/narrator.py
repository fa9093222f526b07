"""Narrator agent answering questions in a character's voice.

The answer is grounded in a single story summary, supplied as its own user
message ahead of the role-play instruction. The model's reply is returned
exactly as produced, without trimming.
"""

import logging

from agents.llm import TextService

logger = logging.getLogger(__name__)


NARRATOR_PROMPT = "You are a helpful assistant with access to summarized memories."


def _build_context_message(summary: str) -> str:
    return f'Here is a summarized story: "{summary}"'


def _build_question_message(character_name: str, query: str) -> str:
    return f'As the character "{character_name}", please answer this question: "{query}"'


class CharacterNarrator:
    """Answers user questions as a named character of a story."""

    def __init__(self, text_service: TextService):
        self.text_service = text_service

    async def answer(self, summary: str, character_name: str, query: str) -> str:
        """Answer a question in character, grounded in a story summary.

        Args:
            summary: Summary of the grounding story
            character_name: Character to speak as
            query: The user's question, passed through literally

        Returns:
            Raw model output

        Raises:
            GenerationFailure: If the model call fails
        """
        output = await self.text_service.complete(
            NARRATOR_PROMPT,
            [
                _build_context_message(summary),
                _build_question_message(character_name, query),
            ],
        )
        logger.info("Character answered | character=%s answer_chars=%d", character_name, len(output))
        return output
