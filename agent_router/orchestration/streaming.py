"""
Queue-backed response stream.

A ResponseStream owns a producer coroutine that writes text chunks through
an `emit` callback and finally returns the AgentResponse. A supervising task
runs the producer, places every chunk on an asyncio.Queue as a StreamChunk
and finishes with a StreamComplete sentinel; the consumer reads chunks in
production order until the sentinel arrives.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from agent_router.schema import AgentResponse, StreamChunk, StreamComplete
from agent_router.utils.logger import get_logger

EmitFn = Callable[[str], Awaitable[None]]
ProducerFn = Callable[[EmitFn], Awaitable[AgentResponse]]
FailureFn = Callable[[BaseException], AgentResponse]


class ResponseStream:
    """
    Async iterator of text chunks for one streamed request.

    Usage:
        async with orchestrator.process_streaming(request) as stream:
            async for chunk in stream:
                print(chunk, end="")
        response = stream.response

    The producer starts on first iteration, so the stream can be created
    from synchronous code. A consumer that stops iterating before the end
    must leave the `async with` block or call aclose(); otherwise the
    producer task stays blocked on the full queue.
    """

    def __init__(
        self,
        producer: ProducerFn,
        on_failure: FailureFn,
        buffer_size: int = 32,
    ) -> None:
        self.logger = get_logger("orchestration.stream")
        self._producer = producer
        self._on_failure = on_failure
        self._buffer_size = buffer_size
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._response: Optional[AgentResponse] = None
        self._finished = False

    @property
    def response(self) -> Optional[AgentResponse]:
        """Final response; None until the stream has been fully consumed."""
        return self._response

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def producer_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> str:
        if self._finished:
            raise StopAsyncIteration
        if self._task is None:
            self._start()

        event = await self._queue.get()
        if isinstance(event, StreamComplete):
            self._response = event.response
            self._finished = True
            await self._task
            raise StopAsyncIteration
        return event.text

    async def collect(self) -> AgentResponse:
        """Drain the stream and return the final response."""
        async for _ in self:
            pass
        return self._response

    async def aclose(self) -> None:
        """Stop the producer if the consumer abandons the stream early."""
        self._finished = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    def _start(self) -> None:
        self._queue = asyncio.Queue(maxsize=self._buffer_size)
        self._task = asyncio.create_task(self._supervise())

    async def _emit(self, text: str) -> None:
        await self._queue.put(StreamChunk(text))

    async def _supervise(self) -> None:
        try:
            response = await self._producer(self._emit)
        except Exception as e:
            self.logger.error(f"[ResponseStream] Stream producer failed: {e}", exc_info=True)
            response = self._on_failure(e)
            await self._emit(response.content)
        await self._queue.put(StreamComplete(response))
