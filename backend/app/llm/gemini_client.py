"""Gemini client wrapper for multi-turn chat."""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from google import genai
from google.genai import types

from app.config import get_settings
from app.errors import ProviderError
from app.llm.chat.models import ChatRole, ChatTurn

logger = logging.getLogger(__name__)

# Default retry configuration
MAX_RETRIES = 3
RETRY_DELAY = 1.0  # seconds
RETRY_MULTIPLIER = 2.0

# Gemini names the assistant side of a conversation "model"
_GEMINI_ROLES = {
    ChatRole.USER.value: "user",
    ChatRole.ASSISTANT.value: "model",
}


def to_contents(turns: Sequence[ChatTurn]) -> list[types.Content]:
    """Convert chat turns into Gemini request contents."""
    return [
        types.Content(
            role=_GEMINI_ROLES[turn.role],
            parts=[types.Part(text=turn.content)],
        )
        for turn in turns
    ]


def _is_retryable(error: Exception) -> bool:
    error_str = str(error).lower()
    return "rate" in error_str or "limit" in error_str or "500" in error_str or "503" in error_str


class GeminiClient:
    """Wrapper around Google GenAI client for chat replies."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY
                (or GOOGLE_API_KEY) from the environment.
            model: Model name, defaults to GEMINI_MODEL.
            temperature: Sampling temperature, defaults to MODEL_TEMPERATURE.
            max_tokens: Output token limit, defaults to MAX_OUTPUT_TOKENS.
        """
        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        if not self.api_key:
            raise ValueError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model or settings.gemini_model
        self.temperature = settings.temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.max_output_tokens
        self._client = genai.Client(api_key=self.api_key)

    def _config(self, system: str | None) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            system_instruction=system,
        )

    async def generate(self, turns: Sequence[ChatTurn], system: str | None = None) -> str:
        """Generate the assistant reply to a conversation.

        Args:
            turns: Full conversation, ending with the new user turn
            system: Optional system instruction

        Returns:
            Reply text

        Raises:
            ProviderError: If the call fails after retries or the reply is empty
        """
        contents = to_contents(turns)
        last_error: Exception | None = None
        delay = RETRY_DELAY

        for attempt in range(MAX_RETRIES):
            try:
                response = await self._client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=self._config(system),
                )
            except Exception as e:
                if not _is_retryable(e):
                    raise ProviderError(f"Gemini request failed: {e}") from e
                last_error = e
                if attempt + 1 < MAX_RETRIES:
                    logger.warning(
                        f"Gemini error (attempt {attempt + 1}/{MAX_RETRIES}), "
                        f"retrying in {delay}s: {e}"
                    )
                    await asyncio.sleep(delay)
                    delay *= RETRY_MULTIPLIER
                continue

            # Blocked or empty candidates come back without text
            if not response.text:
                raise ProviderError("Gemini returned an empty reply")
            return response.text

        raise ProviderError(f"Gemini request failed after {MAX_RETRIES} attempts: {last_error}")

    async def stream(
        self, turns: Sequence[ChatTurn], system: str | None = None
    ) -> AsyncIterator[str]:
        """Stream the assistant reply to a conversation chunk by chunk.

        Streams are not retried: once a chunk has been yielded the request
        cannot be replayed transparently.

        Raises:
            ProviderError: If the stream cannot be opened or breaks mid-flight
        """
        try:
            response_stream = await self._client.aio.models.generate_content_stream(
                model=self.model,
                contents=to_contents(turns),
                config=self._config(system),
            )
            async for chunk in response_stream:
                text = chunk.text
                if text:
                    yield text
        except Exception as e:
            raise ProviderError(f"Gemini stream failed: {e}") from e


# Global client instance (lazy initialization)
_gemini_client: GeminiClient | None = None


def get_gemini_client() -> GeminiClient | None:
    """Get or create the global Gemini client instance.

    Returns None if no API key is configured (every reply then falls back
    to offline mode).
    """
    global _gemini_client
    if _gemini_client is None:
        try:
            _gemini_client = GeminiClient()
        except ValueError:
            return None
    return _gemini_client


def gemini_available() -> bool:
    """Check if Gemini is available (API key is set)."""
    return bool(get_settings().gemini_api_key)
