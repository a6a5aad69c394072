"""Root pytest fixtures for dify-lib-python tests."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from dify_lib_python.config import ClientConfig
from dify_lib_python.transport import HttpTransport

TEST_API_KEY = "app-unittestkey1234"
TEST_BASE_URI = "https://dify.test/v1"


class CountingStream(httpx.AsyncByteStream):
    """Response body stream that records reads and closes."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.chunks_read = 0
        self.close_count = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            self.chunks_read += 1
            yield chunk

    async def aclose(self) -> None:
        self.close_count += 1


def sse(*events: dict[str, Any], done: bool = False) -> bytes:
    """Encode payloads as an event-stream body."""
    body = b"".join(f"data: {json.dumps(e)}\n\n".encode() for e in events)
    if done:
        body += b"data: [DONE]\n\n"
    return body


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_uri=TEST_BASE_URI, api_key=TEST_API_KEY)


@pytest.fixture
def captured() -> list[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def make_transport(
    config: ClientConfig, captured: list[httpx.Request]
) -> Callable[..., HttpTransport]:
    """Build an HttpTransport answering through an httpx.MockTransport.

    The handler receives the request (already read) and returns a response.
    """

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        **overrides: Any,
    ) -> HttpTransport:
        def record(request: httpx.Request) -> httpx.Response:
            request.read()
            captured.append(request)
            return handler(request)

        cfg = ClientConfig(
            **{
                "base_uri": config.base_uri,
                "api_key": config.api_key,
                **overrides,
            }
        )
        return HttpTransport(cfg, transport=httpx.MockTransport(record))

    return factory
