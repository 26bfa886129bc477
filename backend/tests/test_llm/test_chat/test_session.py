"""Tests for ChatSession send/stream behaviour."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.errors import ProviderError
from app.llm.chat.models import ChatRole
from app.llm.chat.session import SYSTEM_PROMPT, ChatSession


async def collect(session: ChatSession, text: str) -> list:
    return [event async for event in session.stream(text)]


class TestSend:
    """Tests for the non-streaming path."""

    @pytest.mark.asyncio
    async def test_send_appends_user_and_assistant_turns(self, fake_client):
        """Each successful send adds exactly two turns in call order."""
        session = ChatSession("s1", fake_client)

        for text in ["hello", "how many squats?", "thanks"]:
            await session.send(text)

        history = session.history()
        assert len(history) == 6
        assert [t.role for t in history] == ["user", "assistant"] * 3
        assert [t.content for t in history[::2]] == ["hello", "how many squats?", "thanks"]
        assert history[1].content == "reply to hello"

    @pytest.mark.asyncio
    async def test_send_passes_full_history(self, fake_client):
        """The provider sees prior turns plus the new user turn."""
        session = ChatSession("s1", fake_client)
        await session.send("first")
        await session.send("second")

        last_call = fake_client.calls[-1]
        assert [t.content for t in last_call] == ["first", "reply to first", "second"]

    @pytest.mark.asyncio
    async def test_failed_send_leaves_history_unchanged(self, fake_client):
        """A provider failure commits neither turn."""
        session = ChatSession("s1", fake_client)
        await session.send("first")
        fake_client.fail = True

        with pytest.raises(ProviderError):
            await session.send("second")

        assert len(session.history()) == 2

    @pytest.mark.asyncio
    async def test_empty_reply_raises_provider_error(self, fake_client):
        """An empty provider reply is a failure and commits neither turn."""
        fake_client.generate = AsyncMock(return_value="")
        session = ChatSession("s1", fake_client)

        with pytest.raises(ProviderError):
            await session.send("hello")

        assert session.history() == ()

    @pytest.mark.asyncio
    async def test_send_without_client_raises_provider_error(self):
        """A session with no configured client fails like a provider outage."""
        session = ChatSession("s1", None)

        with pytest.raises(ProviderError):
            await session.send("hello")

        assert session.history() == ()

    @pytest.mark.asyncio
    async def test_concurrent_sends_do_not_interleave(self, fake_client):
        """Concurrent messages to one session are answered one at a time."""
        session = ChatSession("s1", fake_client)

        await asyncio.gather(session.send("a"), session.send("b"))

        contents = [t.content for t in session.history()]
        assert contents == ["a", "reply to a", "b", "reply to b"]

    def test_defaults(self, fake_client):
        """New sessions start empty with the fitness system prompt."""
        session = ChatSession("s1", fake_client)
        assert session.history() == ()
        assert session.system_prompt == SYSTEM_PROMPT
        assert not session.is_processing


class TestStream:
    """Tests for the streaming path."""

    @pytest.mark.asyncio
    async def test_stream_yields_chunks_then_complete(self, fake_client):
        """Chunks concatenate to the complete event's full text."""
        session = ChatSession("s1", fake_client)

        events = await collect(session, "plan my week")

        assert [e.type for e in events] == ["chunk", "chunk", "chunk", "complete"]
        chunk_text = "".join(e.text for e in events if e.type == "chunk")
        assert chunk_text == events[-1].full_text == "Try three sets."

    @pytest.mark.asyncio
    async def test_stream_commits_full_text(self, fake_client):
        """The assistant turn holds the concatenated reply."""
        session = ChatSession("s1", fake_client)

        await collect(session, "plan my week")

        history = session.history()
        assert len(history) == 2
        assert history[0].role == ChatRole.USER.value
        assert history[1].content == "Try three sets."

    @pytest.mark.asyncio
    async def test_interrupted_stream_discards_partial_text(self, fake_client):
        """A mid-stream failure ends with an error event and commits nothing."""
        fake_client.fail_after = 2
        session = ChatSession("s1", fake_client)

        events = await collect(session, "plan my week")

        assert [e.type for e in events] == ["chunk", "chunk", "error"]
        assert events[-1].error == "Streaming failed"
        assert session.history() == ()

    @pytest.mark.asyncio
    async def test_stream_failure_before_first_chunk(self, fake_client):
        """A stream that cannot open yields only the error event."""
        fake_client.fail = True
        session = ChatSession("s1", fake_client)

        events = await collect(session, "hi")

        assert len(events) == 1
        assert events[0].type == "error"

    @pytest.mark.asyncio
    async def test_stream_without_text_is_error(self, fake_client):
        """A stream that ends without producing text commits nothing."""
        fake_client.chunks = []
        session = ChatSession("s1", fake_client)

        events = await collect(session, "hi")

        assert [e.type for e in events] == ["error"]
        assert session.history() == ()
        assert not session.is_processing
