"""Tests for error module."""

from dify_lib_python.errors import (
    ApiError,
    DecodeError,
    DifyLibError,
    ErrorContext,
    RequestBuildError,
    StreamConsumedError,
    StreamDecodeError,
    TransportError,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        assert str(ErrorContext()) == ""

    def test_context_with_source(self) -> None:
        assert "[transport]" in str(ErrorContext(source="transport"))

    def test_context_with_hint(self) -> None:
        """Test context with hint."""
        ctx = ErrorContext(hint="Check your API key")
        assert "(hint: Check your API key)" in str(ctx)


class TestDifyLibError:
    """Tests for base error class."""

    def test_basic_error(self) -> None:
        error = DifyLibError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_with_hint(self) -> None:
        """Test hints attach to the error context."""
        error = RequestBuildError("Bad path", field="path").with_hint("Use a relative path")

        assert error.context.hint == "Use a relative path"
        assert error.context.details == {"field": "path"}

    def test_hint_is_rendered(self) -> None:
        """Test a hint added after construction shows in the message."""
        error = RequestBuildError("Bad path").with_hint("Use a relative path")

        assert str(error) == "Bad path [request] (hint: Use a relative path)"
        assert error.message == "Bad path"

    def test_hierarchy(self) -> None:
        for error in (
            RequestBuildError("x"),
            TransportError("x"),
            ApiError("x", status_code=500),
            DecodeError("x"),
            StreamDecodeError("x"),
            StreamConsumedError(),
        ):
            assert isinstance(error, DifyLibError)
        assert isinstance(StreamDecodeError("x"), DecodeError)

    def test_cause_is_chained(self) -> None:
        cause = OSError("refused")
        error = TransportError("Connection failed", url="https://dify.test/v1", cause=cause)

        assert error.__cause__ is cause
        assert error.context.details["url"] == "https://dify.test/v1"


class TestApiError:
    """Tests for ApiError."""

    def test_from_json_body(self) -> None:
        """Test code and message are read from a JSON error body."""
        error = ApiError.from_response(
            400,
            {"code": "invalid_param", "message": "query is required", "status": 400},
            {"x-request-id": "req-9"},
        )

        assert error.status_code == 400
        assert error.code == "invalid_param"
        assert error.message == "query is required"
        assert error.request_id == "req-9"
        assert "[api]" in str(error)

    def test_from_text_body(self) -> None:
        error = ApiError.from_response(503, "  upstream unavailable \n")

        assert error.message == "upstream unavailable"
        assert error.code is None
        assert error.body == "  upstream unavailable \n"

    def test_from_empty_body(self) -> None:
        error = ApiError.from_response(401, None)

        assert error.message == "HTTP 401"

    def test_long_text_is_truncated(self) -> None:
        error = ApiError.from_response(500, "x" * 500)

        assert len(error.message) == 200
        assert len(error.body) == 500

    def test_retryable(self) -> None:
        """Test which statuses are worth retrying."""
        assert ApiError("x", status_code=429).retryable
        assert ApiError("x", status_code=408).retryable
        assert ApiError("x", status_code=503).retryable
        assert not ApiError("x", status_code=400).retryable
        assert not ApiError("x", status_code=404).retryable


class TestStreamErrors:
    """Tests for stream error types."""

    def test_stream_decode_error_keeps_raw(self) -> None:
        error = StreamDecodeError("bad", raw="data: {" + "a" * 300)

        assert error.raw.startswith("data: {")
        assert len(error.context.details["raw"]) == 200
        assert error.context.source == "stream"

    def test_consumed_message(self) -> None:
        assert "already consumed" in str(StreamConsumedError())
