"""
Server-Sent Events decoder.

Parses the line-oriented event-stream format:
```
event: message
data: {"answer": "Hel"}

data: {"event": "message", "answer": "lo"}

data: [DONE]
```
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dify_lib_python.errors import StreamDecodeError
from dify_lib_python.pipeline.base import Decoder
from dify_lib_python.telemetry import get_logger
from dify_lib_python.types.events import StreamEvent

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

logger = get_logger("dify_lib_python.pipeline")


class _StreamDone(Exception):
    """Terminal sentinel reached."""


@dataclass
class _PendingEvent:
    """Fields accumulated for the event currently being read."""

    data_lines: list[str] = field(default_factory=list)
    event: str | None = None
    id: str | None = None
    raw_lines: list[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(self.data_lines)

    @property
    def data(self) -> str:
        return "\n".join(self.data_lines)

    @property
    def raw(self) -> str:
        return "\n".join(self.raw_lines)


class SSEDecoder(Decoder):
    """Server-Sent Events decoder.

    Buffers raw bytes so that chunk boundaries may fall anywhere, including
    inside a multi-byte UTF-8 character. CRLF and LF line endings are both
    accepted. Events without a data field (keep-alives) are dropped.

    A pending event left at end of input without its terminating blank
    line is still emitted when its data is valid JSON; otherwise it is
    discarded as a truncated tail and logged at debug level.

    Attributes:
        data_field: Name of the payload field (default: "data")
        done_signal: Payload that ends the stream (default: "[DONE]")
    """

    def __init__(self, data_field: str = "data", done_signal: str = "[DONE]") -> None:
        self._data_field = data_field
        self._done_signal = done_signal

    async def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncGenerator[StreamEvent, None]:
        """Decode an SSE byte stream into events.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            StreamEvent objects in wire order

        Raises:
            StreamDecodeError: If a completed event's data is not valid JSON
        """
        buffer = bytearray()
        # Bytes before this offset hold no newline
        scanned = 0
        pending = _PendingEvent()

        try:
            async for chunk in byte_stream:
                buffer.extend(chunk)

                while True:
                    newline = buffer.find(b"\n", scanned)
                    if newline < 0:
                        scanned = len(buffer)
                        break
                    line = self._decode_line(bytes(buffer[:newline]))
                    del buffer[: newline + 1]
                    scanned = 0

                    if line:
                        self._feed_line(pending, line)
                        continue

                    if pending.has_data:
                        yield self._build_event(pending)
                    pending = _PendingEvent()

            if buffer:
                self._feed_line(pending, self._decode_line(bytes(buffer)))
            if pending.has_data:
                event = self._build_trailing_event(pending)
                if event is not None:
                    yield event
        except _StreamDone:
            return

    @staticmethod
    def _decode_line(raw: bytes) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode("utf-8", errors="replace")

    def _feed_line(self, pending: _PendingEvent, line: str) -> None:
        pending.raw_lines.append(line)

        # Comment
        if line.startswith(":"):
            return

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == self._data_field:
            pending.data_lines.append(value)
        elif name == "event":
            pending.event = value or None
        elif name == "id":
            pending.id = value or None
        # 'retry' and unknown lines stay in the raw text only

    def _build_event(self, pending: _PendingEvent) -> StreamEvent:
        data = pending.data
        if data == self._done_signal:
            raise _StreamDone
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            raise StreamDecodeError(
                f"Stream event data is not valid JSON: {e.msg}",
                raw=pending.raw,
                cause=e,
            ) from e
        return StreamEvent(event=pending.event, id=pending.id, data=parsed, raw=pending.raw)

    def _build_trailing_event(self, pending: _PendingEvent) -> StreamEvent | None:
        if pending.data == self._done_signal:
            return None
        try:
            return self._build_event(pending)
        except StreamDecodeError:
            logger.debug("Discarding truncated trailing event", fragment=pending.raw[:200])
            return None
