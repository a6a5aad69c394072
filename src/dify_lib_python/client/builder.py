"""
Builder for fluent client construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dify_lib_python.config import DEFAULT_BASE_URI, DEFAULT_TIMEOUT, ClientConfig

if TYPE_CHECKING:
    import httpx

    from dify_lib_python.client.core import DifyClient
    from dify_lib_python.transport.middleware import MiddlewareLike


class DifyClientBuilder:
    """Builder for creating DifyClient instances.

    Settings accumulate on the builder; ``build()`` freezes them into a
    ClientConfig, so later builder calls never affect a built client.

    Example:
        >>> client = (
        ...     DifyClientBuilder()
        ...     .base_uri("https://dify.example.com/v1")
        ...     .headers({"X-Tenant": "acme"})
        ...     .timeout(60)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._base_uri: str = DEFAULT_BASE_URI
        self._api_key: str | None = None
        self._headers: dict[str, str] = {}
        self._middleware: list[MiddlewareLike] = []
        self._timeout: float | None = DEFAULT_TIMEOUT
        self._transport: httpx.AsyncBaseTransport | None = None

    def base_uri(self, uri: str) -> DifyClientBuilder:
        """Set the service base URI (e.g. a self-hosted ``/v1`` endpoint)."""
        self._base_uri = uri
        return self

    def api_key(self, key: str) -> DifyClientBuilder:
        """Set the default app API key."""
        self._api_key = key
        return self

    def header(self, name: str, value: str) -> DifyClientBuilder:
        """Add one default header."""
        self._headers[name] = value
        return self

    def headers(self, headers: dict[str, str]) -> DifyClientBuilder:
        """Merge default headers; later values win."""
        self._headers.update(headers)
        return self

    def middleware(self, middleware: MiddlewareLike) -> DifyClientBuilder:
        """Register a middleware; the first registered is the outermost."""
        self._middleware.append(middleware)
        return self

    def timeout(self, seconds: float | None) -> DifyClientBuilder:
        """Set the default request timeout (None disables it)."""
        self._timeout = seconds
        return self

    def transport(self, transport: httpx.AsyncBaseTransport) -> DifyClientBuilder:
        """Use a custom httpx transport (e.g. for testing)."""
        self._transport = transport
        return self

    def build_config(self) -> ClientConfig:
        return ClientConfig(
            base_uri=self._base_uri,
            api_key=self._api_key,
            default_headers=dict(self._headers),
            middleware=tuple(self._middleware),
            timeout=self._timeout,
        )

    def build(self) -> DifyClient:
        """Build the DifyClient instance."""
        from dify_lib_python.client.core import DifyClient

        return DifyClient(self.build_config(), transport=self._transport)

    def __repr__(self) -> str:
        fields: dict[str, Any] = {
            "base_uri": self._base_uri,
            "headers": sorted(self._headers),
            "middleware": len(self._middleware),
        }
        return f"DifyClientBuilder({fields})"
