"""
Pipeline layer - stream decoding.

- Decoder: abstract bytes -> events operator
- SSEDecoder: Server-Sent Events implementation
"""

from dify_lib_python.pipeline.base import Decoder
from dify_lib_python.pipeline.decode import SSEDecoder

__all__ = [
    "Decoder",
    "SSEDecoder",
]
