"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.chat import get_session_store
from app.errors import ProviderError
from app.llm.chat.models import ChatTurn
from app.llm.chat.store import SessionStore
from app.main import app


class FakeGeminiClient:
    """Stands in for GeminiClient; records every conversation it is sent.

    Args:
        chunks: Fragments streamed for each reply; their concatenation is
            also the non-streaming reply.
        fail: Make every call raise ProviderError.
        fail_after: Break streams with ProviderError after this many chunks.
    """

    def __init__(
        self,
        chunks: Sequence[str] = ("Try ", "three ", "sets."),
        fail: bool = False,
        fail_after: int | None = None,
    ):
        self.chunks = list(chunks)
        self.fail = fail
        self.fail_after = fail_after
        self.calls: list[list[ChatTurn]] = []
        self.model = "fake-gemini"

    async def generate(self, turns: Sequence[ChatTurn], system: str | None = None) -> str:
        self.calls.append(list(turns))
        await asyncio.sleep(0)
        if self.fail:
            raise ProviderError("quota exceeded")
        return f"reply to {turns[-1].content}"

    async def stream(
        self, turns: Sequence[ChatTurn], system: str | None = None
    ) -> AsyncIterator[str]:
        self.calls.append(list(turns))
        if self.fail:
            raise ProviderError("quota exceeded")
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise ProviderError("connection reset")
            await asyncio.sleep(0)
            yield chunk


@pytest.fixture
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def store(fake_client: FakeGeminiClient) -> SessionStore:
    return SessionStore(client=fake_client)


@pytest.fixture
async def client(store: SessionStore) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the test store."""
    app.dependency_overrides[get_session_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
