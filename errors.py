"""Error types raised by the story memory components.

Adapters raise the narrowest error for the collaborator that failed and chain
the underlying exception (``raise ... from e``). The memory pipeline lets them
propagate unchanged, except during ingestion where any failure is wrapped in
IngestionFailure together with the stage that failed.

A missing or dangling latest-story pointer is not an error: the answer
pipeline returns ``Answer.no_active_story()`` instead.
"""


class FableError(Exception):
    """Base class for all story memory errors."""
    pass


class StoreUnavailable(FableError):
    """Raised when the durable story store cannot be read or written."""
    pass


class IndexUnavailable(FableError):
    """Raised when the vector index cannot be reached or written."""
    pass


class EmbeddingFailure(FableError):
    """Raised when the embedding function fails for a document."""
    pass


class GenerationFailure(FableError):
    """Raised when a call to the generative text service fails."""
    pass


class IngestionFailure(FableError):
    """Raised when adding a story fails at any step.

    Attributes:
        stage: Step that failed ('summarize', 'index' or 'store')
    """

    def __init__(self, stage: str, message: str):
        super().__init__(f"Story ingestion failed at {stage}: {message}")
        self.stage = stage


class RehydrationFailure(FableError):
    """Raised when the vector index cannot be rebuilt from the story store."""
    pass
