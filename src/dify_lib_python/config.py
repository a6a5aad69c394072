"""
Client configuration.

A ClientConfig is resolved once by the host application and handed to
every transport. It is frozen: requests in flight never observe a change.
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dify_lib_python.transport.middleware import MiddlewareLike

DEFAULT_BASE_URI = "https://api.dify.ai/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ClientConfig:
    """Resolved configuration bundle for a transport.

    Attributes:
        base_uri: Base URI every request path is appended to
        api_key: App API key sent as a bearer token
        default_headers: Headers sent with every request
        middleware: Middleware in registration order
        timeout: Default request timeout in seconds (None disables it)
        connect_timeout: Connection timeout in seconds
    """

    base_uri: str = DEFAULT_BASE_URI
    api_key: str | None = None
    default_headers: Mapping[str, str] = field(default_factory=dict)
    middleware: tuple[MiddlewareLike, ...] = ()
    timeout: float | None = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_uri", self.base_uri.rstrip("/"))
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )
        object.__setattr__(self, "middleware", tuple(self.middleware))

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config from ``DIFY_*`` environment variables.

        Reads ``DIFY_BASE_URI``, ``DIFY_API_KEY`` and ``DIFY_TIMEOUT_SECS``.
        Keyword overrides win over the environment.
        """
        values: dict[str, Any] = {}
        if base_uri := os.getenv("DIFY_BASE_URI"):
            values["base_uri"] = base_uri
        if api_key := os.getenv("DIFY_API_KEY"):
            values["api_key"] = api_key
        if env_timeout := os.getenv("DIFY_TIMEOUT_SECS"):
            with suppress(ValueError):
                values["timeout"] = float(env_timeout)
        values.update(overrides)
        return cls(**values)

    def with_api_key(self, api_key: str) -> ClientConfig:
        """Return a copy bound to another app's API key."""
        return replace(self, api_key=api_key)
