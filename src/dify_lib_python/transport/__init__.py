"""
Transport layer - HTTP client for API communication.

Provides httpx-based transport with:
- Bearer authentication and default headers
- JSON and multipart request bodies
- Middleware chain
- Buffered responses and stream sessions
"""

from dify_lib_python.transport.auth import bearer_header, resolve_api_key
from dify_lib_python.transport.http import HttpTransport
from dify_lib_python.transport.middleware import (
    FunctionMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewareChain,
)
from dify_lib_python.transport.request import (
    FileInput,
    JsonBody,
    MultipartBody,
    MultipartPart,
    NamedParts,
    Request,
    SinglePath,
    UploadFile,
    resolve_upload_parts,
)
from dify_lib_python.transport.response import Response
from dify_lib_python.transport.session import StreamSession

__all__ = [
    "FileInput",
    "FunctionMiddleware",
    "HttpTransport",
    "JsonBody",
    "LoggingMiddleware",
    "Middleware",
    "MiddlewareChain",
    "MultipartBody",
    "MultipartPart",
    "NamedParts",
    "Request",
    "Response",
    "SinglePath",
    "StreamSession",
    "UploadFile",
    "bearer_header",
    "resolve_api_key",
    "resolve_upload_parts",
]
