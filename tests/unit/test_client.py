"""Tests for client module."""

from __future__ import annotations

import os
from unittest.mock import patch

import httpx
import pytest

from dify_lib_python import DifyClient, DifyClientBuilder
from dify_lib_python.apps import App, ChatApp, CompletionApp
from dify_lib_python.config import ClientConfig
from dify_lib_python.transport import LoggingMiddleware


def echo_auth(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"authorization": request.headers["authorization"]})


class TestDifyClient:
    """Tests for DifyClient."""

    @pytest.mark.asyncio
    async def test_apps_bound_to_their_keys(self) -> None:
        """Test each app sends its own API key."""
        client = DifyClient(
            ClientConfig(base_uri="https://dify.test/v1"),
            transport=httpx.MockTransport(echo_auth),
        )

        chat = client.chat("app-chat")
        completion = client.completion("app-completion")

        assert isinstance(chat, ChatApp)
        assert isinstance(completion, CompletionApp)
        assert (await chat.parameters()).json() == {"authorization": "Bearer app-chat"}
        assert (await completion.parameters()).json() == {
            "authorization": "Bearer app-completion"
        }
        await client.close()

    @pytest.mark.asyncio
    async def test_default_key(self) -> None:
        async with DifyClient(
            ClientConfig(api_key="app-default"),
            transport=httpx.MockTransport(echo_auth),
        ) as client:
            app = client.app()

            assert isinstance(app, App)
            assert (await app.meta()).json() == {"authorization": "Bearer app-default"}

    def test_missing_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            client = DifyClient(ClientConfig())
            with pytest.raises(ValueError):
                client.chat()

    def test_config_from_env(self) -> None:
        """Test the default configuration is read from the environment."""
        with patch.dict(
            os.environ, {"DIFY_BASE_URI": "https://self-hosted.test/v1", "DIFY_API_KEY": "app-e"}
        ):
            client = DifyClient()

        assert client.config.base_uri == "https://self-hosted.test/v1"
        assert client.config.api_key == "app-e"

    @pytest.mark.asyncio
    async def test_close_releases_transports(self) -> None:
        client = DifyClient(
            ClientConfig(api_key="app-1"), transport=httpx.MockTransport(echo_auth)
        )
        chat = client.chat()
        await chat.parameters()
        assert chat.transport._client is not None

        await client.close()

        assert chat.transport._client is None


    def test_one_transport_per_key(self) -> None:
        """Test apps sharing a key share one transport."""
        client = DifyClient(ClientConfig(api_key="app-1"))

        chat = client.chat("app-1")

        assert client.chat("app-1").transport is chat.transport
        assert client.completion("app-1").transport is chat.transport
        assert client.app().transport is chat.transport
        assert client.chat("app-2").transport is not chat.transport
        assert len(client._transports) == 2

    @pytest.mark.asyncio
    async def test_transports_do_not_accumulate(self) -> None:
        """Test creating and closing apps in a loop keeps one transport."""
        client = DifyClient(
            ClientConfig(api_key="app-1"), transport=httpx.MockTransport(echo_auth)
        )

        for _ in range(50):
            app = client.chat("app-1")
            await app.parameters()
            await app.transport.close()

        assert len(client._transports) == 1
        assert (await client.chat("app-1").meta()).json() == {"authorization": "Bearer app-1"}
        await client.close()
        assert client._transports == {}

    def test_app_api_key(self) -> None:
        """Test an app exposes the key it authenticates with."""
        with patch.dict(os.environ, {"DIFY_API_KEY": "app-env"}):
            client = DifyClient(ClientConfig())

            assert client.chat("app-chat").api_key == "app-chat"
            assert client.completion().api_key == "app-env"


class TestDifyClientBuilder:
    """Tests for DifyClientBuilder."""

    def test_build_config(self) -> None:
        """Test builder settings land in the client configuration."""
        logging_middleware = LoggingMiddleware()
        client = (
            DifyClient.builder()
            .base_uri("https://dify.example.com/v1/")
            .api_key("app-1")
            .header("X-Tenant", "acme")
            .headers({"X-Env": "test"})
            .middleware(logging_middleware)
            .timeout(60)
            .build()
        )

        config = client.config
        assert config.base_uri == "https://dify.example.com/v1"
        assert config.api_key == "app-1"
        assert dict(config.default_headers) == {"X-Tenant": "acme", "X-Env": "test"}
        assert config.middleware == (logging_middleware,)
        assert config.timeout == 60

    def test_builder_changes_do_not_leak(self) -> None:
        builder = DifyClientBuilder().header("X-A", "1")
        client = builder.build()

        builder.header("X-B", "2")

        assert dict(client.config.default_headers) == {"X-A": "1"}

    @pytest.mark.asyncio
    async def test_builder_transport(self) -> None:
        """Test a custom transport receives the configured headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        client = (
            DifyClientBuilder()
            .base_uri("https://dify.test/v1")
            .header("X-Tenant", "acme")
            .transport(httpx.MockTransport(handler))
            .build()
        )

        async with client:
            await client.chat("app-1").conversations("u1")

        assert seen[0].headers["x-tenant"] == "acme"
        assert str(seen[0].url) == "https://dify.test/v1/conversations?user=u1&limit=20"
