"""Text generation service shared by all story agents.

Every agent in this package makes the same kind of call: one system prompt
followed by one or more user messages, returning plain text. There is no
conversation state and no tool use, so calls go straight to the model via
PydanticAI's direct request API instead of through an Agent run.

Model strings use the PydanticAI format (provider:model). A local
OpenAI-compatible server can be used with 'openai:<model>@<base_url>'.
"""

import logging
from typing import Sequence

from openai import AsyncOpenAI
from pydantic_ai.direct import model_request
from pydantic_ai.messages import ModelRequest, SystemPromptPart, TextPart, UserPromptPart
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIModel
from pydantic_ai.profiles.openai import OpenAIModelProfile
from pydantic_ai.providers.openai import OpenAIProvider

from errors import GenerationFailure

logger = logging.getLogger(__name__)


def _parse_local_model(model_str: str) -> tuple[str, str] | None:
    """Parse local model string into (model_name, base_url) or None if not local."""
    if model_str.startswith("openai:") and "@" in model_str:
        rest = model_str[7:]
        model_name, base_url = rest.split("@", 1)
        return model_name, base_url
    return None


def _create_model(model_str: str) -> Model | str:
    """Create a PydanticAI model instance or pass through remote model string."""
    parsed = _parse_local_model(model_str)
    if parsed:
        model_name, base_url = parsed
        logger.info("Using local model | model=%s base_url=%s", model_name, base_url)
        client = AsyncOpenAI(base_url=base_url, api_key="local-model")
        profile = OpenAIModelProfile(supports_json_object_output=False)
        return OpenAIModel(
            model_name=model_name,
            provider=OpenAIProvider(openai_client=client),
            profile=profile,
        )
    return model_str


class TextService:
    """Single-shot text completion against a configured model.

    Example:
        >>> service = TextService("openai:gpt-4o")
        >>> text = await service.complete(
        ...     "You are a helpful assistant.",
        ...     ["Please summarize the following story: ..."],
        ... )
    """

    def __init__(self, model: str | Model):
        """Initialize the text service.

        Args:
            model: PydanticAI model string or model instance
        """
        self.model = _create_model(model) if isinstance(model, str) else model

    @property
    def model_name(self) -> str:
        return self.model if isinstance(self.model, str) else self.model.model_name

    async def complete(self, system_prompt: str, messages: Sequence[str]) -> str:
        """Send one request and return the model's text.

        The request contains the system prompt followed by each user
        message in order, as separate messages.

        Args:
            system_prompt: Instructions for the model
            messages: User messages, in order

        Returns:
            Text of the response, exactly as the model produced it

        Raises:
            GenerationFailure: If the request fails or returns no text
        """
        request = ModelRequest(
            parts=[
                SystemPromptPart(content=system_prompt),
                *(UserPromptPart(content=message) for message in messages),
            ]
        )
        try:
            response = await model_request(self.model, [request])
        except Exception as e:
            logger.error("Text generation failed | model=%s error=%s", self.model_name, e)
            raise GenerationFailure(f"Text generation failed ({type(e).__name__}): {e}") from e

        texts = [part.content for part in response.parts if isinstance(part, TextPart)]
        if not texts:
            raise GenerationFailure(f"Model {self.model_name} returned no text")

        usage = response.usage
        logger.debug(
            "Text generated | model=%s input_tokens=%s output_tokens=%s",
            self.model_name,
            getattr(usage, "input_tokens", None),
            getattr(usage, "output_tokens", None),
        )
        return "".join(texts)
