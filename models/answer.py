"""Answer model returned by the character answer pipeline."""

from pydantic import BaseModel, Field

NO_ACTIVE_STORY_TEXT = "No relevant story found."


class Answer(BaseModel):
    """A character-voiced answer grounded in one story.

    Attributes:
        text: Raw text returned by the model, or the no-story message
        story_id: Story used as grounding context (None if no active story)
    """

    text: str = Field(description="Answer text, unmodified model output")
    story_id: str | None = Field(default=None, description="Grounding story id")

    @property
    def found(self) -> bool:
        """Whether the answer was grounded in a stored story."""
        return self.story_id is not None

    @classmethod
    def no_active_story(cls) -> "Answer":
        """Create the result returned when no story is available.

        Used when the latest-story pointer is unset or points at a story
        that is missing from the store. This is an informational result,
        not a failure.
        """
        return cls(text=NO_ACTIVE_STORY_TEXT, story_id=None)
