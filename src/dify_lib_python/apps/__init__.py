"""
App layer - operation methods for each service app type.
"""

from dify_lib_python.apps.base import App
from dify_lib_python.apps.chat import ChatApp
from dify_lib_python.apps.completion import CompletionApp

__all__ = [
    "App",
    "ChatApp",
    "CompletionApp",
]
