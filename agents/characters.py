"""Character extraction agent.

Asks the model for the proper names of the characters in a story as a
comma-separated list. The model's reply is free text, so it is treated as a
best-effort hint rather than structured data:

    - each comma-separated token is trimmed and empty tokens are dropped
    - a reply that says there are no characters yields an empty list
    - a single token that is too long to be a name (the model answered in
      prose instead of a list) yields an empty list
"""

import logging

from agents.llm import TextService

logger = logging.getLogger(__name__)


CHARACTER_PROMPT = (
    "You are a helpful assistant. Please identify and return only the character names "
    "from the following story, separated by commas, with no additional text."
)

# Replies meaning "no characters found"
_EMPTY_REPLIES = {"", "none", "n/a", "no characters", "no character names", "unknown"}

# A single token longer than this that ends a sentence is prose, not a name
MAX_NAME_WORDS = 5
_SENTENCE_END = (".", "!", "?")


def _build_user_message(story: str) -> str:
    """Build the user message embedding the raw story."""
    return f'Extract and return only the character names from this story: "{story}"'


def split_character_names(raw: str) -> list[str]:
    """Split a model reply into trimmed character names.

    Args:
        raw: Raw model output, e.g. "Alice,  Bob ,Carol"

    Returns:
        List of names, e.g. ["Alice", "Bob", "Carol"], or [] when the reply
        does not look like a name list
    """
    text = raw.strip()
    if text.lower().rstrip(".") in _EMPTY_REPLIES:
        return []

    names = [token.strip() for token in text.split(",")]
    names = [name for name in names if name]

    if len(names) == 1 and len(names[0].split()) > MAX_NAME_WORDS and names[0].endswith(_SENTENCE_END):
        logger.warning("Character reply is not a name list | reply=%s", names[0][:80])
        return []
    return names


def join_character_names(names: list[str]) -> str:
    """Join names with the normalized ', ' separator."""
    return ", ".join(names)


class CharacterExtractor:
    """Extracts character names from a story without storing anything."""

    def __init__(self, text_service: TextService):
        self.text_service = text_service

    async def extract_names(self, story: str) -> list[str]:
        """Extract character names as a list.

        Raises:
            GenerationFailure: If the model call fails
        """
        output = await self.text_service.complete(CHARACTER_PROMPT, [_build_user_message(story)])
        names = split_character_names(output)
        logger.info("Characters extracted | count=%d", len(names))
        return names

    async def extract(self, story: str) -> str:
        """Extract character names as a comma-joined string.

        Returns:
            Names joined with ', ', e.g. "Alice, Bob, Carol"
        """
        return join_character_names(await self.extract_names(story))
