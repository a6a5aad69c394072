"""
Type definitions for dify-lib-python.
"""

from dify_lib_python.types.events import StreamEvent

__all__ = ["StreamEvent"]
