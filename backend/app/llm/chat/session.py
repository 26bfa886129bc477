"""ChatSession wraps the Gemini client with accumulated turn history."""

import asyncio
import logging
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.errors import ProviderError
from app.llm.chat.models import ChatRole, ChatTurn, StreamEvent

if TYPE_CHECKING:
    from app.llm.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a friendly and knowledgeable fitness AI assistant. Your role is to help users with:

- Workout routines and exercise techniques
- Nutrition advice and meal planning
- Fitness motivation and goal setting
- Health and wellness tips
- Exercise form and safety
- use emojis not extensively but anywhere needed
- If asked to create table create table

Keep your responses:
- Conversational and encouraging
- Practical and actionable
- Focused on fitness and health topics
- Positive and motivational

If someone asks about non-fitness topics, politely redirect them to fitness-related questions. Always provide helpful, safe, and evidence-based fitness advice."""

STREAM_FAILED = "Streaming failed"


def new_session_id() -> str:
    """Random, URL-safe session identifier."""
    return uuid.uuid4().hex


class ChatSession:
    """A chat session holding the turn history of one conversation.

    User and assistant turns are committed together once the provider call
    succeeds, so a failed call leaves the history untouched. A per-session
    lock serializes messages sent to the same session.
    """

    def __init__(
        self,
        session_id: str,
        client: "GeminiClient | None",
        system_prompt: str | None = SYSTEM_PROMPT,
        created_at: datetime | None = None,
    ):
        self.session_id = session_id
        self.system_prompt = system_prompt
        self.created_at = created_at or datetime.now(UTC)
        self._client = client
        self._turns: list[ChatTurn] = []
        self._lock = asyncio.Lock()

    @property
    def is_processing(self) -> bool:
        """Whether a message is currently being answered."""
        return self._lock.locked()

    def history(self) -> tuple[ChatTurn, ...]:
        """The accumulated turns in conversation order."""
        return tuple(self._turns)

    def age_seconds(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds()

    def _require_client(self) -> "GeminiClient":
        if self._client is None:
            raise ProviderError("Gemini client is not configured")
        return self._client

    async def send(self, text: str) -> str:
        """Send a message and wait for the complete reply.

        Raises:
            ProviderError: If the Gemini call fails or the reply is empty.
        """
        async with self._lock:
            client = self._require_client()
            user_turn = ChatTurn(role=ChatRole.USER, content=text)
            reply = await client.generate([*self._turns, user_turn], system=self.system_prompt)
            if not reply:
                raise ProviderError("Gemini returned an empty reply")
            self._turns.extend([user_turn, ChatTurn(role=ChatRole.ASSISTANT, content=reply)])
            logger.debug(f"Session {self.session_id} now has {len(self._turns)} turns")
            return reply

    async def stream(self, text: str) -> AsyncGenerator[StreamEvent, None]:
        """Send a message and yield the reply as it is generated.

        Yields ``chunk`` events as fragments arrive, then exactly one terminal
        event: ``complete`` with the full text (after the turns have been
        committed) or ``error`` if the stream broke or produced no text, in
        which case the partial text is discarded. The session lock is
        released before the terminal event is yielded.
        """
        async with self._lock:
            user_turn = ChatTurn(role=ChatRole.USER, content=text)
            parts: list[str] = []
            try:
                client = self._require_client()
                async for fragment in client.stream(
                    [*self._turns, user_turn], system=self.system_prompt
                ):
                    parts.append(fragment)
                    yield StreamEvent(type="chunk", text=fragment)
                if not parts:
                    raise ProviderError("Gemini stream produced no text")
            except ProviderError as e:
                logger.error(
                    f"Stream for session {self.session_id} failed after "
                    f"{len(parts)} chunk(s): {e}"
                )
                terminal = StreamEvent(type="error", error=STREAM_FAILED)
            else:
                full_text = "".join(parts)
                self._turns.extend(
                    [user_turn, ChatTurn(role=ChatRole.ASSISTANT, content=full_text)]
                )
                terminal = StreamEvent(type="complete", full_text=full_text)

        yield terminal

