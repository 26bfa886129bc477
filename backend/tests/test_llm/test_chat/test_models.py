"""Tests for chat model configuration."""

import pydantic
import pytest

from app.llm.chat.models import (
    ChatRole,
    ChatTurn,
    SendMessageRequest,
    SendMessageResponse,
    StartChatResponse,
    StreamEvent,
)


@pytest.mark.parametrize(
    "model", [ChatTurn, SendMessageRequest, StartChatResponse, SendMessageResponse, StreamEvent]
)
def test_configured_with_config_dict(model):
    """Configuration lives in ``model_config`` rather than an inner ``Config`` class."""
    assert "Config" not in vars(model)
    assert model.model_config


def test_turn_is_frozen_and_stores_role_value():
    turn = ChatTurn(role=ChatRole.USER, content="hi")

    assert turn.role == "user"
    assert turn.timestamp.tzinfo is not None
    with pytest.raises(pydantic.ValidationError):
        turn.content = "changed"


def test_request_accepts_alias_and_field_name():
    by_alias = SendMessageRequest.model_validate({"sessionId": "abc", "message": "hi"})
    by_name = SendMessageRequest(session_id="abc", message="hi")

    assert by_alias.session_id == by_name.session_id == "abc"


def test_event_frame_uses_aliases():
    event = StreamEvent(type="complete", full_text="done")

    assert event.to_frame("abc") == {"type": "complete", "fullText": "done", "sessionId": "abc"}
