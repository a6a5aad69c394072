"""
Telemetry module for dify-lib-python.

Provides structured logging with sensitive data masking.
"""

from dify_lib_python.telemetry.logger import (
    DifyLogger,
    JsonFormatter,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    get_logger,
)

__all__ = [
    "DifyLogger",
    "JsonFormatter",
    "LogLevel",
    "SensitiveDataMasker",
    "TextFormatter",
    "get_logger",
]
