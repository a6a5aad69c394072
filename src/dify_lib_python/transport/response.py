"""
Buffered response wrapper.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from dify_lib_python.errors import DecodeError

_UNPARSED = object()


class Response:
    """A completed, fully read HTTP response.

    The JSON body is parsed on first access and cached. Binary payloads
    (e.g. synthesized audio) are read through ``raw_body`` instead.

    Example:
        >>> response = await transport.send(Request.get("/parameters"))
        >>> response.status_code
        200
        >>> response.json()["opening_statement"]
    """

    __slots__ = ("_headers", "_json", "_raw_body", "_status_code")

    def __init__(
        self,
        status_code: int,
        headers: httpx.Headers | dict[str, str] | None = None,
        raw_body: bytes = b"",
    ) -> None:
        self._status_code = status_code
        self._headers = httpx.Headers(headers or {})
        self._raw_body = raw_body
        self._json: Any = _UNPARSED

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> Response:
        """Snapshot a read httpx response."""
        return cls(response.status_code, response.headers, response.content)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._headers

    @property
    def raw_body(self) -> bytes:
        return self._raw_body

    @property
    def text(self) -> str:
        return self._raw_body.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self._status_code < 300

    def header(self, name: str) -> str | None:
        """Get a header value (case-insensitive), or None if absent."""
        return self._headers.get(name)

    def json(self) -> Any:
        """Parse the body as JSON, once.

        Returns:
            The decoded JSON value; later calls return the same object

        Raises:
            DecodeError: If the body is not valid UTF-8 JSON
        """
        if self._json is _UNPARSED:
            try:
                self._json = json.loads(self._raw_body.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise DecodeError(f"Response body is not valid UTF-8: {e}", cause=e) from e
            except json.JSONDecodeError as e:
                raise DecodeError(
                    f"Response body is not valid JSON: {e.msg}",
                    cause=e,
                ).with_hint(f"content-type is {self.header('content-type')!r}") from e
        return self._json

    def __repr__(self) -> str:
        return f"<Response [{self._status_code}]>"
