"""
Base abstractions for the streaming pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from dify_lib_python.types.events import StreamEvent


class Decoder(ABC):
    """Abstract decoder that converts a byte stream to stream events.

    Decoders are pull-based: they advance only while the consumer
    iterates, and hold no reference to the connection.
    """

    @abstractmethod
    def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncGenerator[StreamEvent, None]:
        """Decode a byte stream into events.

        Args:
            byte_stream: Async iterator of raw bytes, split at arbitrary points

        Yields:
            Stream events in wire order
        """
        ...
