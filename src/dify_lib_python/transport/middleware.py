"""
Middleware system for outgoing requests.

Middleware wrap each other in registration order (onion ordering): the
first registered sees the request first and the response last. Any
middleware may short-circuit by returning its own response without
calling ``next``.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

import httpx

from dify_lib_python.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    Handler = Callable[[httpx.Request], Awaitable[httpx.Response]]
    MiddlewareFunc = Callable[[httpx.Request, Handler], Awaitable[httpx.Response]]
    MiddlewareLike = Union["Middleware", MiddlewareFunc]

logger = get_logger("dify_lib_python.middleware")


class Middleware(ABC):
    """Base class for middleware.

    Example:
        >>> class HeaderMiddleware(Middleware):
        ...     async def process(self, request, next):
        ...         request.headers["X-Trace"] = "abc"
        ...         return await next(request)
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def process(self, request: httpx.Request, next: Handler) -> httpx.Response:
        """Process a request, usually by awaiting ``next(request)``.

        Args:
            request: Outgoing request
            next: The rest of the chain

        Returns:
            The response
        """
        raise NotImplementedError


class FunctionMiddleware(Middleware):
    """Middleware created from an async function.

    Example:
        >>> async def add_trace(request, next):
        ...     request.headers["X-Trace"] = "abc"
        ...     return await next(request)
        >>>
        >>> middleware = FunctionMiddleware("trace", add_trace)
    """

    def __init__(self, name: str, func: MiddlewareFunc) -> None:
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    async def process(self, request: httpx.Request, next: Handler) -> httpx.Response:
        return await self._func(request, next)


class LoggingMiddleware(Middleware):
    """Logs each exchange with its latency at debug level."""

    async def process(self, request: httpx.Request, next: Handler) -> httpx.Response:
        start = time.perf_counter()
        response = await next(request)
        logger.debug(
            "HTTP exchange",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response


def as_middleware(item: MiddlewareLike) -> Middleware:
    """Wrap a plain async callable as FunctionMiddleware."""
    if isinstance(item, Middleware):
        return item
    if callable(item):
        return FunctionMiddleware(getattr(item, "__name__", type(item).__name__), item)
    raise TypeError(f"Not a middleware: {item!r}")


class MiddlewareChain:
    """Immutable chain of middleware.

    Example:
        >>> chain = MiddlewareChain([LoggingMiddleware(), add_trace])
        >>> response = await chain.execute(request, send)
    """

    def __init__(self, middleware: Sequence[MiddlewareLike] = ()) -> None:
        self._middleware: tuple[Middleware, ...] = tuple(as_middleware(m) for m in middleware)

    async def execute(self, request: httpx.Request, handler: Handler) -> httpx.Response:
        """Run the request through every middleware and then ``handler``.

        Args:
            request: Outgoing request
            handler: Innermost handler performing the network call

        Returns:
            The response produced by the chain
        """
        chain = handler
        for middleware in reversed(self._middleware):
            chain = self._create_next(middleware, chain)
        return await chain(request)

    @staticmethod
    def _create_next(middleware: Middleware, next_handler: Handler) -> Handler:
        async def handler(request: httpx.Request) -> httpx.Response:
            return await middleware.process(request, next_handler)

        return handler

    @property
    def middleware_names(self) -> list[str]:
        return [m.name for m in self._middleware]

    def __len__(self) -> int:
        return len(self._middleware)
