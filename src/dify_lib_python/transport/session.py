"""
Stream session: exclusive owner of an open streaming response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from dify_lib_python.errors import StreamConsumedError, TransportError
from dify_lib_python.pipeline import SSEDecoder
from dify_lib_python.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from dify_lib_python.pipeline.base import Decoder
    from dify_lib_python.types.events import StreamEvent

logger = get_logger("dify_lib_python.session")


class StreamSession:
    """Owns the open connection of one streaming request.

    The body can be read once, by a single pass over ``events()``. The
    connection is released exactly once: on normal completion, on a decode
    or transport error, or when ``aclose()`` is called.

    Example:
        >>> session = await transport.send(request, streaming=True)
        >>> try:
        ...     async for event in session.events():
        ...         handle(event)
        ... finally:
        ...     await session.aclose()
    """

    def __init__(self, response: httpx.Response, decoder: Decoder | None = None) -> None:
        self._response = response
        self._decoder = decoder or SSEDecoder()
        self._consumed = False
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._closed

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Decode the response body into events.

        Yields:
            StreamEvent objects in wire order

        Raises:
            StreamConsumedError: If the session was already iterated or closed
            StreamDecodeError: If an event payload is not valid JSON
            TransportError: If the connection fails mid-stream
        """
        if self._consumed or self._closed:
            raise StreamConsumedError()
        self._consumed = True

        decoded = self._decoder.decode(self._response.aiter_bytes())
        try:
            async for event in decoded:
                yield event
        except httpx.HTTPError as e:
            raise TransportError(
                f"Stream interrupted: {e}",
                url=str(self._response.request.url),
                cause=e,
            ) from e
        finally:
            await decoded.aclose()
            await self.aclose()

    async def aclose(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()
        logger.debug("Stream session closed", url=str(self._response.request.url))

    async def __aenter__(self) -> StreamSession:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()
