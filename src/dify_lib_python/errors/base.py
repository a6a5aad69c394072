"""Base error classes for dify-lib-python.

Provides a layered error hierarchy:
- DifyLibError: Base class for all library errors
- RequestBuildError: Malformed request input, raised before any I/O
- TransportError: HTTP/network errors
- ApiError: Non-2xx responses from the service
- DecodeError: Buffered body is not valid JSON
- StreamDecodeError: Streamed event payload is not valid JSON
- StreamConsumedError: A stream session was iterated twice
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Statuses a caller may reasonably retry. The library itself never does.
_RETRYABLE_STATUSES = frozenset({408, 429})


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'request', 'transport', 'stream')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class DifyLibError(Exception):
    """Base class for all dify-lib-python errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> DifyLibError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class RequestBuildError(DifyLibError):
    """Request could not be built.

    Raised before any network call when:
    - An upload path is missing or unreadable
    - A file part has no resolvable filename
    - The request path is an absolute URL
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="request")
        if field:
            ctx.details["field"] = field
        super().__init__(message, ctx)
        self.field = field
        self.__cause__ = cause


class TransportError(DifyLibError):
    """Error during HTTP transport.

    Raised when:
    - Network connection failure
    - Timeout
    - The connection drops while a stream is being read
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.__cause__ = cause


class ApiError(DifyLibError):
    """Error response (HTTP status >= 400) from the service.

    Attributes:
        status_code: HTTP status code
        body: Decoded JSON error body, or the raw body text
        code: Service error code (e.g. ``invalid_param``) when present
        request_id: Request identifier from the response headers
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: Any = None,
        code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="api")
        ctx.details["status_code"] = status_code
        if code:
            ctx.details["code"] = code
        if request_id:
            ctx.details["request_id"] = request_id
        super().__init__(message, ctx)

        self.status_code = status_code
        self.body = body
        self.code = code
        self.request_id = request_id

    @property
    def retryable(self) -> bool:
        """Whether a caller-side retry is sensible for this status."""
        return self.status_code in _RETRYABLE_STATUSES or self.status_code >= 500

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> ApiError:
        """Create ApiError from an HTTP error response.

        Args:
            status_code: HTTP status code
            body: Decoded JSON body, raw text, or None
            headers: Response headers

        Returns:
            ApiError carrying the service's code and message when present
        """
        code = None
        message = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or body.get("error")
        elif isinstance(body, str) and body.strip():
            message = body.strip()[:200]

        request_id = None
        if headers:
            request_id = headers.get("x-request-id") or headers.get("X-Request-Id")

        return cls(
            message=str(message) if message else f"HTTP {status_code}",
            status_code=status_code,
            body=body,
            code=code,
            request_id=request_id,
        )


class DecodeError(DifyLibError):
    """A response body that should be JSON is not."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="response")
        super().__init__(message, ctx)
        self.__cause__ = cause


class StreamDecodeError(DecodeError):
    """A completed streamed event carries a payload that is not valid JSON.

    Terminates the event sequence; the stream session is closed.

    Attributes:
        raw: The offending event text
    """

    def __init__(
        self,
        message: str,
        *,
        raw: str = "",
        cause: Exception | None = None,
    ) -> None:
        ctx = ErrorContext(source="stream")
        ctx.details["raw"] = raw[:200]
        super().__init__(message, ctx, cause=cause)
        self.raw = raw


class StreamConsumedError(DifyLibError):
    """A stream session may be iterated only once."""

    def __init__(self, message: str = "Stream session was already consumed") -> None:
        super().__init__(message, ErrorContext(source="stream"))
