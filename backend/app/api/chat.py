"""Chat API endpoints for multi-turn conversations."""

import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from app.config import get_settings
from app.errors import (
    MISSING_FIELDS,
    InternalError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from app.llm.chat.fallback import offline_reply
from app.llm.chat.models import (
    ChatHistoryResponse,
    ChatMessage,
    SendMessageRequest,
    SendMessageResponse,
    StartChatResponse,
    StreamEvent,
)
from app.llm.chat.relay import relay
from app.llm.chat.session import ChatSession
from app.llm.chat.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME_MESSAGE = (
    "Hi! I'm your AI fitness assistant powered by Google Gemini. "
    "Ask me anything about workouts, nutrition, or fitness! 💪"
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_session_store(request: Request) -> SessionStore:
    """The process-wide session store created in the app lifespan."""
    return request.app.state.session_store


def _require_session(store: SessionStore, session_id: str) -> ChatSession:
    session = store.get(session_id)
    if session is None:
        logger.warning(f"Chat session not found for sessionId: {session_id}")
        raise NotFoundError("Chat session not found. Please start a new session.")
    return session


def _offline_response(session_id: str | None, message: str | None) -> JSONResponse:
    body = SendMessageResponse(
        message=ChatMessage.from_bot(offline_reply(message)),
        is_offline=True,
    )
    logger.info(f"Sent fallback response for session: {session_id}")
    return JSONResponse(content=body.model_dump(mode="json", by_alias=True, exclude_none=True))


def _sse_frame(event: StreamEvent, session_id: str) -> str:
    return f"data: {json.dumps(event.to_frame(session_id))}\n\n"


@router.post("/chat/start")
async def start_chat(store: SessionStore = Depends(get_session_store)) -> StartChatResponse:
    """Start a new chat session.

    The welcome message is static and is not part of the session history.
    """
    try:
        session = store.create()
    except Exception as e:
        logger.exception(f"Error starting chat session: {e}")
        raise InternalError("Failed to start chat session", details=str(e)) from e

    return StartChatResponse(
        session_id=session.session_id,
        message=ChatMessage.from_bot(WELCOME_MESSAGE),
    )


@router.post("/chat/message", response_model=None)
async def send_message(
    request: SendMessageRequest | None = None,
    store: SessionStore = Depends(get_session_store),
) -> JSONResponse | StreamingResponse:
    """Send a message to a chat session.

    With ``stream`` set the reply is sent as ``text/event-stream`` frames:
    {"type": "chunk", "text": "...", "sessionId": "..."}
    {"type": "complete", "fullText": "...", "sessionId": "..."}
    {"type": "error", "error": "Streaming failed", "sessionId": "..."}

    Provider failures before any bytes are sent fall back to a canned reply
    flagged with ``isOffline``.
    """
    request = request or SendMessageRequest()
    session_id, message = request.session_id, request.message
    logger.info(f"Incoming message for sessionId: {session_id} stream: {request.stream}")

    if not session_id or not message:
        raise ValidationError(MISSING_FIELDS)

    session = _require_session(store, session_id)

    if not request.stream:
        try:
            reply = await session.send(message)
        except ProviderError as e:
            logger.error(f"Error sending message: {e}")
            return _offline_response(session_id, message)

        body = SendMessageResponse(message=ChatMessage.from_bot(reply))
        logger.info(f"Sent bot reply for session: {session_id}")
        return JSONResponse(content=body.model_dump(mode="json", by_alias=True, exclude_none=True))

    events = relay(session.stream(message), maxsize=get_settings().stream_buffer_size)

    # Nothing has been sent yet, so a failure here can still degrade to offline mode
    first = await anext(events)
    if first.type == "error":
        await events.aclose()
        return _offline_response(session_id, message)

    async def event_generator() -> AsyncGenerator[str, None]:
        try:
            yield _sse_frame(first, session_id)
            async for event in events:
                yield _sse_frame(event, session_id)
                if event.type == "error":
                    logger.warning(f"Streaming failed for session: {session_id}")
                elif event.type == "complete":
                    logger.info(f"Streaming completed for session: {session_id}")
        finally:
            await events.aclose()

    logger.info(f"Starting streaming response for session: {session_id}")
    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/chat/history/{session_id}")
async def get_chat_history(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> ChatHistoryResponse:
    """Get the accumulated turns of a session."""
    session = _require_session(store, session_id)

    return ChatHistoryResponse(
        history=[
            ChatMessage(
                id=index,
                text=turn.content,
                sender=turn.sender,
                timestamp=turn.timestamp,
            )
            for index, turn in enumerate(session.history())
        ]
    )


@router.delete("/chat/{session_id}")
async def clear_chat_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> dict[str, str]:
    """Delete a chat session and its history."""
    if not store.delete(session_id):
        logger.warning(f"Chat session not found for delete, sessionId: {session_id}")
        raise NotFoundError("Chat session not found")
    return {"message": "Chat session cleared successfully"}


# Admin endpoint for monitoring
@router.get("/chat/stats")
async def get_chat_stats(store: SessionStore = Depends(get_session_store)) -> dict[str, Any]:
    """Get chat session statistics (admin endpoint)."""
    return store.get_stats()
