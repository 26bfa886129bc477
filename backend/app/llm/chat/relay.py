"""Bounded producer/consumer relay for streamed replies.

A producer task reads the session's event stream into a bounded queue and
the response writer consumes it. ``complete`` and ``error`` are terminal
events on the queue. If the consumer goes away (client disconnect), the
producer keeps draining the provider stream so the reply is still recorded
in history, but stops queueing events.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator

from app.llm.chat.models import StreamEvent
from app.llm.chat.session import STREAM_FAILED

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 32

# Strong references to running producers; the event loop only keeps weak ones
_producers: set[asyncio.Task] = set()


async def relay(
    source: AsyncIterator[StreamEvent],
    maxsize: int = DEFAULT_BUFFER_SIZE,
) -> AsyncGenerator[StreamEvent, None]:
    """Relay events from ``source`` through a bounded queue.

    Always ends with exactly one terminal event. A source that raises or
    stops without a terminal event is closed off with an ``error`` event.
    """
    queue: asyncio.Queue[StreamEvent] = asyncio.Queue(maxsize=maxsize)
    detached = False

    async def offer(event: StreamEvent) -> None:
        if not detached:
            await queue.put(event)

    async def produce() -> None:
        terminated = False
        try:
            # Drain fully so the source releases the session lock
            async for event in source:
                if terminated:
                    continue
                await offer(event)
                terminated = event.is_terminal
        except Exception as e:
            logger.exception(f"Stream producer failed: {e}")
        if not terminated:
            await offer(StreamEvent(type="error", error=STREAM_FAILED))

    task = asyncio.create_task(produce())
    _producers.add(task)
    task.add_done_callback(_producers.discard)

    try:
        while True:
            event = await queue.get()
            yield event
            if event.is_terminal:
                return
    finally:
        detached = True
        # Unblock a producer waiting on a full queue
        while not queue.empty():
            queue.get_nowait()
        if not task.done():
            logger.info("Stream consumer detached; reply will still be recorded")
