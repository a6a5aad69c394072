"""Core DifyClient implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dify_lib_python.config import ClientConfig
from dify_lib_python.transport import HttpTransport
from dify_lib_python.transport.auth import resolve_api_key

if TYPE_CHECKING:
    import httpx

    from dify_lib_python.apps import App, ChatApp, CompletionApp
    from dify_lib_python.client.builder import DifyClientBuilder


class DifyClient:
    """Entry point handing out apps bound to their API keys.

    The configuration is resolved once and shared by every transport the
    client creates. There is no process-wide instance: construct one client
    and pass it where it is needed.

    Example:
        >>> client = DifyClient(ClientConfig(base_uri="https://dify.example.com/v1"))
        >>> chat = client.chat("app-...")
        >>> response = await chat.send_message("user-1", "Hello")
        >>> await client.close()

        >>> client = (
        ...     DifyClient.builder()
        ...     .base_uri("https://dify.example.com/v1")
        ...     .header("X-Tenant", "acme")
        ...     .middleware(LoggingMiddleware())
        ...     .build()
        ... )
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Resolved configuration (default: ClientConfig.from_env())
            transport: Optional httpx transport shared by all app transports
        """
        self._config = config or ClientConfig.from_env()
        self._http_transport = transport
        self._transports: dict[str, HttpTransport] = {}

    @classmethod
    def builder(cls) -> DifyClientBuilder:
        """Get a builder for fluent configuration."""
        from dify_lib_python.client.builder import DifyClientBuilder

        return DifyClientBuilder()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def transport(self, api_key: str | None = None) -> HttpTransport:
        """Get the transport for one app key, creating it on first use.

        Apps sharing a key share one transport. A transport closed through
        one of its apps reopens its connection pool on the next request.

        Args:
            api_key: App API key (default: the configured key)

        Raises:
            ValueError: If no API key is available
        """
        key = resolve_api_key(api_key or self._config.api_key)
        if not key:
            raise ValueError("API key required (DIFY_API_KEY)")

        transport = self._transports.get(key)
        if transport is None:
            config = self._config.with_api_key(key)
            transport = HttpTransport(config, transport=self._http_transport)
            self._transports[key] = transport
        return transport

    def app(self, api_key: str | None = None) -> App:
        """Create an app exposing only the shared operations."""
        from dify_lib_python.apps import App

        return App(self.transport(api_key))

    def chat(self, api_key: str | None = None) -> ChatApp:
        """Create a chat app."""
        from dify_lib_python.apps import ChatApp

        return ChatApp(self.transport(api_key))

    def completion(self, api_key: str | None = None) -> CompletionApp:
        """Create a completion app."""
        from dify_lib_python.apps import CompletionApp

        return CompletionApp(self.transport(api_key))

    async def close(self) -> None:
        """Close every transport created by this client."""
        transports, self._transports = self._transports, {}
        for transport in transports.values():
            await transport.close()

    async def __aenter__(self) -> DifyClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
