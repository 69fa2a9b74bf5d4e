"""Async HTTP transport backed by httpx.

HttpxTransport owns an ``httpx.AsyncClient`` and executes each request as
an asyncio task on the running event loop. The completion callback runs
on that loop once the response (or error) is known.

Example:
    >>> from integrator.models.request import Request
    >>> from integrator.transport.httpx_transport import HttpxTransport
    >>>
    >>> async with HttpxTransport() as transport:
    ...     transport.execute(Request(url="https://example.com/api/users"), on_complete)
    >>>
    >>> # Testing without a network
    >>> mock = httpx.MockTransport(lambda request: httpx.Response(200, json={"id": 1}))
    >>> async with HttpxTransport(transport=mock) as transport:
    ...     ...
"""

import asyncio
import os
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from integrator.models.constants import (
    DEFAULT_POOL_CONNECTIONS,
    DEFAULT_POOL_MAXSIZE,
    DEFAULT_POOL_TIMEOUT,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_LOGGED_ERROR_CHARS,
)
from integrator.models.request import Request
from integrator.models.response import ResponseMetadata
from integrator.observability import get_logger, get_metrics
from integrator.transport.base import Transport, TransportCallback
from integrator.utils.sanitization import sanitize_url

logger = get_logger(__name__)

ENV_TIMEOUT = "INTEGRATOR_TIMEOUT"
ENV_MAX_THREADS = "INTEGRATOR_MAX_THREADS"


def _default_timeout() -> float:
    raw = os.environ.get(ENV_TIMEOUT)
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_TIMEOUT} must be a number of seconds, got: {raw!r}") from e


def _default_max_threads() -> int:
    raw = os.environ.get(ENV_MAX_THREADS)
    if raw is None or not raw.strip():
        # Same default as concurrent.futures.ThreadPoolExecutor
        return min(32, (os.cpu_count() or 1) + 4)
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_MAX_THREADS} must be an integer, got: {raw!r}") from e


@dataclass
class TransportConfig:
    """Configuration shared by the bundled httpx transports.

    Attributes:
        timeout: Default request timeout in seconds (env: INTEGRATOR_TIMEOUT, default: 30)
        pool_connections: Max keep-alive connections kept in the pool
        pool_maxsize: Max total connections in the pool
        pool_timeout: Seconds to wait for a connection from the pool
        http2: Enable HTTP/2 (real network clients only)
        follow_redirects: Follow 3xx redirects
        raise_for_status: Report 4xx/5xx responses as ``httpx.HTTPStatusError``
            instead of passing their body through
        max_threads: Worker threads for ThreadedTransport
            (env: INTEGRATOR_MAX_THREADS, default: min(32, cpu_count + 4))
    """

    timeout: float = field(default_factory=_default_timeout)
    pool_connections: int = DEFAULT_POOL_CONNECTIONS
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE
    pool_timeout: float = DEFAULT_POOL_TIMEOUT
    http2: bool = False
    follow_redirects: bool = True
    raise_for_status: bool = False
    max_threads: int = field(default_factory=_default_max_threads)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.pool_maxsize < 1 or self.pool_connections < 0:
            raise ValueError("pool sizes must be positive")
        if self.max_threads < 1:
            raise ValueError(f"max_threads must be >= 1, got {self.max_threads}")

    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_keepalive_connections=self.pool_connections,
            max_connections=self.pool_maxsize,
        )

    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, pool=self.pool_timeout)


def metadata_from_response(response: httpx.Response) -> ResponseMetadata:
    """Build the response descriptor handed to transport callbacks."""
    return ResponseMetadata(
        status_code=response.status_code,
        headers=dict(response.headers.items()),
        url=str(response.url),
        http_version=response.http_version,
    )


def request_kwargs(request: Request) -> dict[str, Any]:
    """Translate a Request into keyword arguments for ``httpx.Client.request``."""
    kwargs: dict[str, Any] = {
        "method": request.method.value,
        "url": request.url,
        "headers": request.effective_headers(),
    }
    if request.body is not None:
        kwargs["content"] = request.body
    if request.timeout is not None:
        kwargs["timeout"] = request.timeout
    return kwargs


def status_error(response: httpx.Response) -> httpx.HTTPStatusError | None:
    """Return the HTTPStatusError for a 4xx/5xx response, else None."""
    if not response.is_error:
        return None
    return httpx.HTTPStatusError(
        f"HTTP {response.status_code} from {sanitize_url(str(response.url))}",
        request=response.request,
        response=response,
    )


def record_transport_result(
    request: Request, start_time: float, response: httpx.Response | None, error: BaseException | None
) -> None:
    """Log and count one finished transport request."""
    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
    url = sanitize_url(request.url)
    if error is not None:
        get_metrics().increment_counter(
            "integrator_transport_requests_total", {"status": "error"}
        )
        logger.warning(
            "integrator.transport.error",
            url=url,
            method=request.method.value,
            error=str(error)[:MAX_LOGGED_ERROR_CHARS],
            error_type=type(error).__name__,
            duration_ms=duration_ms,
        )
        return
    get_metrics().increment_counter("integrator_transport_requests_total", {"status": "success"})
    logger.debug(
        "integrator.transport.response",
        url=url,
        method=request.method.value,
        status_code=response.status_code if response is not None else None,
        body_size=len(response.content) if response is not None else 0,
        duration_ms=duration_ms,
    )


class HttpxTransport(Transport):
    """Asyncio transport using ``httpx.AsyncClient``.

    Must be used as an async context manager (or closed with ``aclose()``);
    ``execute`` must be called from a running event loop.

    Attributes:
        config: Transport configuration
        is_open: Whether the underlying client is open
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Transport configuration (default: TransportConfig())
            transport: Optional custom httpx transport (for testing), e.g.
                ``httpx.MockTransport``. HTTP/2 is not applied to custom transports.
        """
        self.config = config or TransportConfig()
        self._custom_transport = transport
        self._client: httpx.AsyncClient | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> None:
        """Create the underlying client. Idempotent."""
        if self._client is not None:
            return
        if self._custom_transport is not None:
            self._client = httpx.AsyncClient(
                transport=self._custom_transport,
                timeout=self.config.httpx_timeout(),
                limits=self.config.limits(),
                follow_redirects=self.config.follow_redirects,
            )
        else:
            self._client = httpx.AsyncClient(
                timeout=self.config.httpx_timeout(),
                limits=self.config.limits(),
                follow_redirects=self.config.follow_redirects,
                http2=self.config.http2,
            )

    async def aclose(self) -> None:
        """Wait for in-flight requests, then close the client."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxTransport":
        self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.aclose()

    def execute(self, request: Request, on_complete: TransportCallback) -> None:
        """Schedule ``request`` on the running event loop.

        Raises:
            RuntimeError: If the transport is not open or no event loop is running
        """
        if self._client is None:
            raise RuntimeError("Transport not open. Use 'async with' context.")
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._perform(self._client, request, on_complete))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # raised by the completion callback, not by the transfer
            logger.error(
                "integrator.transport.callback_error",
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=exc,
            )

    async def _perform(
        self, client: httpx.AsyncClient, request: Request, on_complete: TransportCallback
    ) -> None:
        start_time = time.perf_counter()
        logger.debug(
            "integrator.transport.request",
            url=sanitize_url(request.url),
            method=request.method.value,
            headers=request.effective_headers(),
        )
        try:
            response = await client.request(**request_kwargs(request))
        except Exception as e:
            # request building errors (e.g. UnicodeEncodeError, httpx.InvalidURL) count too
            record_transport_result(request, start_time, None, e)
            on_complete(None, None, e)
            return

        metadata = metadata_from_response(response)
        error = status_error(response) if self.config.raise_for_status else None
        record_transport_result(request, start_time, response, error)
        if error is not None:
            on_complete(None, metadata, error)
            return
        on_complete(response.content, metadata, None)


__all__ = [
    "HttpxTransport",
    "TransportConfig",
    "metadata_from_response",
    "request_kwargs",
    "status_error",
]
