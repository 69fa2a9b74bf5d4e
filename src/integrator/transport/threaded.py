"""Thread-pool transport backed by a blocking ``httpx.Client``.

Useful from synchronous code: ``execute`` submits the transfer to a
bounded worker pool and returns immediately; the completion callback runs
on a worker thread. When every worker is busy the request is not queued:
the callback receives a ``TransportBusyError`` right away.

Example:
    >>> with ThreadedTransport(TransportConfig(max_threads=4)) as transport:
    ...     transport.execute(Request(url="https://example.com/api/users"), on_complete)
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import httpx

from integrator.errors import TransportBusyError
from integrator.models.request import Request
from integrator.observability import get_logger
from integrator.transport.base import Transport, TransportCallback
from integrator.transport.httpx_transport import (
    TransportConfig,
    metadata_from_response,
    record_transport_result,
    request_kwargs,
    status_error,
)
from integrator.utils.sanitization import sanitize_url

logger = get_logger(__name__)


class ThreadedTransport(Transport):
    """Transport running blocking httpx calls on a bounded thread pool.

    Attributes:
        config: Transport configuration (``max_threads`` sizes the pool)
        active: Number of requests currently running
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Transport configuration (default: TransportConfig())
            transport: Optional custom httpx transport (for testing), e.g.
                ``httpx.MockTransport``
        """
        self.config = config or TransportConfig()
        self._custom_transport = transport
        self._client: httpx.Client | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._active = 0

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> None:
        """Create the client and worker pool. Idempotent."""
        if self._client is not None:
            return
        kwargs: dict[str, Any] = {
            "timeout": self.config.httpx_timeout(),
            "limits": self.config.limits(),
            "follow_redirects": self.config.follow_redirects,
        }
        if self._custom_transport is not None:
            self._client = httpx.Client(transport=self._custom_transport, **kwargs)
        else:
            self._client = httpx.Client(http2=self.config.http2, **kwargs)
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_threads,
            thread_name_prefix="integrator-transport",
        )
        logger.info("integrator.transport.pool_created", max_threads=self.config.max_threads)

    def close(self) -> None:
        """Wait for running requests, then release the pool and client."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("integrator.transport.pool_shutdown", max_threads=self.config.max_threads)

    def __enter__(self) -> "ThreadedTransport":
        self.open()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def execute(self, request: Request, on_complete: TransportCallback) -> None:
        """Submit ``request`` to the worker pool.

        Raises:
            RuntimeError: If the transport is not open
        """
        client, executor = self._client, self._executor
        if client is None or executor is None:
            raise RuntimeError("Transport not open. Use 'with' context.")

        with self._lock:
            busy = self._active >= self.config.max_threads
            if not busy:
                self._active += 1
            active = self._active
        if busy:
            logger.warning(
                "integrator.transport.busy",
                url=sanitize_url(request.url),
                max_threads=self.config.max_threads,
                active_threads=active,
            )
            on_complete(
                None,
                None,
                TransportBusyError(max_threads=self.config.max_threads, active_threads=active),
            )
            return

        try:
            future = executor.submit(self._perform, client, request, on_complete)
        except RuntimeError:
            self._release(None)
            raise
        future.add_done_callback(self._release)

    def _release(self, future: "Future[None] | None") -> None:
        with self._lock:
            self._active -= 1
        if future is None or future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "integrator.transport.callback_error",
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=exc,
            )

    def _perform(self, client: httpx.Client, request: Request, on_complete: TransportCallback) -> None:
        start_time = time.perf_counter()
        logger.debug(
            "integrator.transport.request",
            url=sanitize_url(request.url),
            method=request.method.value,
            headers=request.effective_headers(),
            thread=threading.current_thread().name,
        )
        try:
            response = client.request(**request_kwargs(request))
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


__all__ = ["ThreadedTransport"]
