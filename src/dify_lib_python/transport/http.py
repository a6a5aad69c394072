"""HTTP transport using httpx for async requests.

Provides:
- Bearer authentication and default headers
- JSON and streamed multipart request bodies
- Onion-ordered middleware
- Buffered responses and owned stream sessions
- Error mapping to TransportError / ApiError
"""

from __future__ import annotations

import json as json_module
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any, overload

import httpx

from dify_lib_python.errors import ApiError, RequestBuildError, TransportError
from dify_lib_python.telemetry import get_logger
from dify_lib_python.transport.auth import bearer_header, resolve_api_key
from dify_lib_python.transport.middleware import MiddlewareChain
from dify_lib_python.transport.request import JsonBody, MultipartBody
from dify_lib_python.transport.response import Response
from dify_lib_python.transport.session import StreamSession

if TYPE_CHECKING:
    from typing import Literal

    from dify_lib_python.config import ClientConfig
    from dify_lib_python.pipeline.base import Decoder
    from dify_lib_python.transport.request import Request

logger = get_logger("dify_lib_python.transport")

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import PackageNotFoundError, version

            _UA_VERSION = version("dify-lib-python")
        except PackageNotFoundError:
            _UA_VERSION = "0.0.0"
    return _UA_VERSION


class HttpTransport:
    """HTTP transport for the service API.

    Sends one request at a time per call and materializes either a
    buffered Response or a StreamSession. The configuration is read once
    at construction.

    Example:
        >>> transport = HttpTransport(ClientConfig(api_key="app-..."))
        >>> response = await transport.send(Request.get("/parameters", {"user": "u1"}))
        >>> session = await transport.send(
        ...     Request.post_json("/chat-messages", payload), streaming=True
        ... )
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            config: Resolved client configuration
            transport: Optional httpx transport (e.g. httpx.MockTransport)

        Raises:
            ValueError: If no API key is configured or found in DIFY_API_KEY
        """
        api_key = resolve_api_key(config.api_key)
        if not api_key:
            raise ValueError("API key required (DIFY_API_KEY)")

        self._config = config
        self._api_key = api_key
        self._base_url = config.base_uri
        self._chain = MiddlewareChain(config.middleware)
        self._http_transport = transport

        # Client instance (lazy initialization)
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def api_key(self) -> str:
        return self._api_key

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(
                    self._config.timeout,
                    connect=self._config.connect_timeout,
                ),
                transport=self._http_transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, request: Request, streaming: bool) -> httpx.Headers:
        headers = httpx.Headers(dict(self._config.default_headers))
        headers["User-Agent"] = f"dify-lib-python/{_get_ua_version()}"
        headers["Accept"] = "text/event-stream" if streaming else "application/json"
        headers.update(request.headers)

        if isinstance(request.body, JsonBody) and "content-type" not in headers:
            headers["Content-Type"] = "application/json"
        elif isinstance(request.body, MultipartBody) and "content-type" in headers:
            # httpx must generate the boundary parameter itself
            del headers["content-type"]

        # Always the configured key, whatever the caller passed
        headers.update(bearer_header(self._api_key))
        return headers

    def _build_request(
        self, request: Request, streaming: bool, files: ExitStack
    ) -> httpx.Request:
        kwargs: dict[str, Any] = {}
        body = request.body
        if isinstance(body, JsonBody):
            try:
                encoded = json_module.dumps(body.value, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                raise RequestBuildError(
                    f"Request body is not JSON serializable: {e}",
                    field="body",
                    cause=e,
                ) from e
            kwargs["content"] = encoded.encode("utf-8")
        elif isinstance(body, MultipartBody):
            for part in body.file_parts:
                part.check_readable()
            data: dict[str, Any] = {}
            upload: list[tuple[str, tuple[str | None, Any, str]]] = []
            for part in body.parts:
                if part.is_file:
                    handle = files.enter_context(part.open())
                    upload.append((part.name, (part.filename, handle, part.guess_content_type())))
                else:
                    data.setdefault(part.name, []).append(part.content)
            kwargs["data"] = {k: v[0] if len(v) == 1 else v for k, v in data.items()}
            kwargs["files"] = upload

        extra: dict[str, Any] = {}
        if request.timeout is not None:
            extra["timeout"] = request.timeout

        return self._get_client().build_request(
            method=request.method,
            url=request.path,
            headers=self._build_headers(request, streaming),
            params=request.params,
            **kwargs,
            **extra,
        )

    @overload
    async def send(
        self,
        request: Request,
        streaming: Literal[False] = ...,
        *,
        decoder: Decoder | None = ...,
    ) -> Response: ...

    @overload
    async def send(
        self,
        request: Request,
        streaming: Literal[True],
        *,
        decoder: Decoder | None = ...,
    ) -> StreamSession: ...

    async def send(
        self,
        request: Request,
        streaming: bool = False,
        *,
        decoder: Decoder | None = None,
    ) -> Response | StreamSession:
        """Send one request.

        Args:
            request: The request to send
            streaming: Return an open StreamSession instead of a buffered Response
            decoder: Decoder for the stream session (default: SSEDecoder)

        Returns:
            Response, or StreamSession when streaming

        Raises:
            RequestBuildError: On invalid input, before any network call
            TransportError: On network/connection errors
            ApiError: On HTTP status >= 400
        """
        url = f"{self._base_url}{request.path}"

        with ExitStack() as files:
            http_request = self._build_request(request, streaming, files)

            async def dispatch(req: httpx.Request) -> httpx.Response:
                return await self._get_client().send(req, stream=streaming)

            logger.debug("Sending request", method=request.method, url=url, streaming=streaming)
            try:
                response = await self._chain.execute(http_request, dispatch)
            except httpx.TimeoutException as e:
                raise TransportError(f"Request timed out: {e}", url=url, cause=e) from e
            except httpx.ConnectError as e:
                raise TransportError(f"Connection failed: {e}", url=url, cause=e) from e
            except httpx.HTTPError as e:
                raise TransportError(f"HTTP error: {e}", url=url, cause=e) from e

        _bind_request(response, http_request)
        logger.debug("Response received", url=url, status_code=response.status_code)

        if response.status_code >= 400:
            raise await self._api_error(response, url)

        if streaming:
            return StreamSession(response, decoder)

        try:
            await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to read response: {e}", url=url, cause=e) from e
        return Response.from_httpx(response)

    async def _api_error(self, response: httpx.Response, url: str) -> ApiError:
        """Read the error body, release the connection and build the error."""
        try:
            raw = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to read error body: {e}", url=url, cause=e) from e
        finally:
            await response.aclose()

        body: Any = raw.decode("utf-8", errors="replace")
        try:
            body = json_module.loads(body)
        except json_module.JSONDecodeError:
            pass

        return ApiError.from_response(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
        )

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def _bind_request(response: httpx.Response, request: httpx.Request) -> None:
    """Attach the request to responses built by short-circuiting middleware."""
    try:
        response.request
    except RuntimeError:
        response.request = request
