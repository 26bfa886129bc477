"""Chat session infrastructure for multi-turn conversations.

This module provides the core abstractions for session-based chat:
- ChatSession: Wraps the Gemini client with the turn history of one conversation
- SessionStore: Owns every session for the lifetime of the process
- SessionReaper: Evicts sessions older than the TTL
- relay: Bounded producer/consumer channel for streamed replies
"""

from app.llm.chat.fallback import FALLBACK_RESPONSES, offline_reply, select_fallback
from app.llm.chat.models import (
    ChatHistoryResponse,
    ChatMessage,
    ChatRole,
    ChatTurn,
    SendMessageRequest,
    SendMessageResponse,
    StartChatResponse,
    StreamEvent,
)
from app.llm.chat.reaper import SessionReaper
from app.llm.chat.relay import relay
from app.llm.chat.session import ChatSession
from app.llm.chat.store import SessionStore

__all__ = [
    "FALLBACK_RESPONSES",
    "ChatHistoryResponse",
    "ChatMessage",
    "ChatRole",
    "ChatSession",
    "ChatTurn",
    "SendMessageRequest",
    "SendMessageResponse",
    "SessionReaper",
    "SessionStore",
    "StartChatResponse",
    "StreamEvent",
    "offline_reply",
    "relay",
    "select_fallback",
]
