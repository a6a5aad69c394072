"""
Stream responses: operation-specific views over a stream session.

A stream response is consumed with ``async with`` so the connection is
released on every exit path, including a consumer that stops early:

    >>> async with await chat.send_message_stream("u1", "Hi") as stream:
    ...     async for text in stream.text():
    ...         print(text, end="")
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from dify_lib_python.client.response import ChatResult
from dify_lib_python.errors import ApiError, StreamConsumedError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from dify_lib_python.transport.session import StreamSession
    from dify_lib_python.types.events import StreamEvent


class StreamResponse:
    """Single-pass event sequence over one stream session."""

    def __init__(self, session: StreamSession) -> None:
        self._session = session
        self._iterator: AsyncGenerator[StreamEvent, None] | None = None

    @property
    def session(self) -> StreamSession:
        return self._session

    @property
    def closed(self) -> bool:
        return self._session.closed

    def events(self) -> AsyncIterator[StreamEvent]:
        """Iterate the events of the stream, once.

        Raises:
            StreamConsumedError: On a second call
        """
        if self._iterator is not None:
            raise StreamConsumedError()
        self._iterator = self._iterate()
        return self._iterator

    async def _iterate(self) -> AsyncGenerator[StreamEvent, None]:
        events = self._session.events()
        try:
            async for event in events:
                self._on_event(event)
                yield event
        finally:
            await events.aclose()
            await self._session.aclose()

    def _on_event(self, event: StreamEvent) -> None:
        """Hook for subclasses tracking stream state."""

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self.events()

    async def aclose(self) -> None:
        """Stop iteration and release the connection."""
        if self._iterator is not None:
            await self._iterator.aclose()
        await self._session.aclose()

    async def __aenter__(self) -> StreamResponse:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


class ChatStreamResponse(StreamResponse):
    """Chat and completion message stream.

    Tracks the identifiers announced by the stream and the final
    ``message_end`` metadata. An ``error`` event raises ApiError.

    Example:
        >>> async with await chat.send_message_stream("u1", "Hi") as stream:
        ...     result = await stream.collect()
        >>> result.answer
    """

    TEXT_EVENTS = frozenset({"message", "agent_message"})

    def __init__(self, session: StreamSession) -> None:
        super().__init__(session)
        self._result = ChatResult()
        self._finished = False

    @property
    def task_id(self) -> str | None:
        return self._result.task_id

    @property
    def conversation_id(self) -> str | None:
        return self._result.conversation_id

    @property
    def message_id(self) -> str | None:
        return self._result.message_id

    @property
    def metadata(self) -> dict[str, Any]:
        return self._result.metadata

    @property
    def finished(self) -> bool:
        """Whether ``message_end`` was received."""
        return self._finished

    def _on_event(self, event: StreamEvent) -> None:
        self._result.events_seen += 1
        name = event.name

        if name == "error":
            status = event.get("status")
            raise ApiError.from_response(
                status_code=status if isinstance(status, int) else 500,
                body=event.data,
            )

        for key in ("task_id", "conversation_id", "message_id"):
            if value := event.get(key):
                setattr(self._result, key, value)

        if name in self.TEXT_EVENTS:
            self._result.answer += event.get("answer", "") or ""
        elif name == "message_end":
            self._result.metadata = event.get("metadata") or {}
            self._finished = True
        elif name == "message_replace":
            self._result.answer = event.get("answer", "") or ""

    async def text(self) -> AsyncIterator[str]:
        """Yield answer text deltas."""
        async for event in self.events():
            if event.name in self.TEXT_EVENTS and (delta := event.get("answer")):
                yield delta

    async def collect(self) -> ChatResult:
        """Drain the stream and return the aggregated result."""
        async for _ in self.events():
            pass
        return self._result

    async def __aenter__(self) -> ChatStreamResponse:
        return self


class AudioStreamResponse(StreamResponse):
    """Text-to-speech stream of base64 audio chunks."""

    async def audio(self) -> AsyncIterator[bytes]:
        """Yield decoded audio chunks until ``tts_message_end``."""
        async for event in self.events():
            name = event.name
            if name == "tts_message" and (chunk := event.get("audio")):
                yield base64.b64decode(chunk)
            elif name == "tts_message_end":
                break
        await self.aclose()

    async def read(self) -> bytes:
        """Collect the whole audio payload."""
        return b"".join([chunk async for chunk in self.audio()])

    async def __aenter__(self) -> AudioStreamResponse:
        return self
