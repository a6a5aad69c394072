"""Error hierarchy for dify-lib-python.

Provides structured error types for request building, transport,
service responses and stream decoding.
"""

from dify_lib_python.errors.base import (
    ApiError,
    DecodeError,
    DifyLibError,
    ErrorContext,
    RequestBuildError,
    StreamConsumedError,
    StreamDecodeError,
    TransportError,
)

__all__ = [
    "ApiError",
    "DecodeError",
    "DifyLibError",
    "ErrorContext",
    "RequestBuildError",
    "StreamConsumedError",
    "StreamDecodeError",
    "TransportError",
]
