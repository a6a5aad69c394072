"""dify-lib-python: async Python client for the Dify API.

Builds authenticated requests, sends them over httpx, and exposes
responses either buffered or as a lazily decoded event stream.
"""
from __future__ import annotations

from dify_lib_python.apps import App, ChatApp, CompletionApp
from dify_lib_python.client import (
    AudioStreamResponse,
    ChatResult,
    ChatStreamResponse,
    DifyClient,
    DifyClientBuilder,
    StreamResponse,
)
from dify_lib_python.config import ClientConfig
from dify_lib_python.errors import (
    ApiError,
    DecodeError,
    DifyLibError,
    RequestBuildError,
    StreamConsumedError,
    StreamDecodeError,
    TransportError,
)
from dify_lib_python.transport import (
    HttpTransport,
    LoggingMiddleware,
    Middleware,
    NamedParts,
    Request,
    Response,
    SinglePath,
    StreamSession,
    UploadFile,
)
from dify_lib_python.types.events import StreamEvent

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    # Apps
    "App",
    "AudioStreamResponse",
    "ChatApp",
    "ChatResult",
    "ChatStreamResponse",
    # Config
    "ClientConfig",
    "CompletionApp",
    "DecodeError",
    # Client
    "DifyClient",
    "DifyClientBuilder",
    # Errors
    "DifyLibError",
    # Transport
    "HttpTransport",
    "LoggingMiddleware",
    "Middleware",
    "NamedParts",
    "Request",
    "RequestBuildError",
    "Response",
    "SinglePath",
    "StreamConsumedError",
    "StreamDecodeError",
    # Types
    "StreamEvent",
    "StreamResponse",
    "StreamSession",
    "TransportError",
    "UploadFile",
    # Version
    "__version__",
]
