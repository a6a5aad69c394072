"""
Client layer - User-facing API.

This module provides:
- DifyClient: Entry point creating apps per API key
- DifyClientBuilder: Fluent configuration
- Stream responses for chat, completion and speech streams
"""

from dify_lib_python.client.builder import DifyClientBuilder
from dify_lib_python.client.core import DifyClient
from dify_lib_python.client.response import ChatResult
from dify_lib_python.client.stream import (
    AudioStreamResponse,
    ChatStreamResponse,
    StreamResponse,
)

__all__ = [
    "AudioStreamResponse",
    "ChatResult",
    "ChatStreamResponse",
    "DifyClient",
    "DifyClientBuilder",
    "StreamResponse",
]
