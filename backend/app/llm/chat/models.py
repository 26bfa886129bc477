"""Pydantic models for chat sessions and the chat HTTP API."""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Role of a chat turn's author."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """A single turn in a chat session. Immutable once appended."""

    role: ChatRole
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    @property
    def sender(self) -> str:
        """Two-valued sender tag used by the browser client."""
        return "user" if self.role == ChatRole.USER.value else "bot"


class ChatMessage(BaseModel):
    """A message as rendered to the browser client."""

    id: int
    text: str
    sender: Literal["user", "bot"]
    timestamp: datetime

    @classmethod
    def from_bot(cls, text: str) -> "ChatMessage":
        """Build a bot message stamped with the current time."""
        now = datetime.now(UTC)
        return cls(id=int(now.timestamp() * 1000), text=text, sender="bot", timestamp=now)


class SendMessageRequest(BaseModel):
    """Body of ``POST /api/chat/message``.

    Fields are optional here so that missing values produce the service's
    own 400 error instead of a schema validation error.
    """

    session_id: str | None = Field(default=None, alias="sessionId")
    message: str | None = None
    stream: bool = False

    model_config = ConfigDict(populate_by_name=True)


class StartChatResponse(BaseModel):
    """Response after starting a chat session."""

    session_id: str = Field(alias="sessionId")
    message: ChatMessage

    model_config = ConfigDict(populate_by_name=True)


class SendMessageResponse(BaseModel):
    """Non-streaming reply. ``isOffline`` is only present on fallback replies."""

    message: ChatMessage
    is_offline: bool | None = Field(default=None, alias="isOffline")

    model_config = ConfigDict(populate_by_name=True)


class ChatHistoryResponse(BaseModel):
    """Accumulated turns of a session."""

    history: list[ChatMessage]


class StreamEvent(BaseModel):
    """One frame of a streamed reply.

    ``chunk`` carries ``text``, ``complete`` carries ``full_text`` and
    ``error`` carries ``error``; ``complete`` and ``error`` are terminal.
    """

    type: Literal["chunk", "complete", "error"]
    text: str | None = None
    full_text: str | None = Field(default=None, alias="fullText")
    error: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_terminal(self) -> bool:
        return self.type != "chunk"

    def to_frame(self, session_id: str) -> dict:
        """Wire representation of the event for a given session."""
        frame = self.model_dump(by_alias=True, exclude_none=True)
        frame["sessionId"] = session_id
        return frame
