"""Latest-story pointer shared by ingestion and answering.

The pointer names the story that answers are grounded in. Ingestion is the
only writer; the answer pipeline only reads it. Writes are last-writer-wins:
when two ingestions race, the pointer ends up at whichever finished last.

The pointer lives in process memory and is not restored by rehydration, so
after a restart no story is active until the next ingestion.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class LatestStoryPointer:
    """Id of the most recently ingested story, or None."""

    story_id: str | None = None

    @property
    def is_set(self) -> bool:
        return self.story_id is not None

    def advance(self, story_id: str) -> None:
        """Point at a newly ingested story."""
        previous = self.story_id
        self.story_id = story_id
        logger.debug("Latest story pointer moved | from=%s to=%s", previous, story_id)
