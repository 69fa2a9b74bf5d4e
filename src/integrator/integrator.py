"""Decode-and-dispatch over a pluggable transport.

The Integrator hands a request to a Transport, classifies what comes back
and decodes response bytes into a caller-specified type. Every call ends
with exactly one ``IntegrationOutcome`` delivered to the caller's callback:

- transport error       -> ``Failure(TransportFailure)``, no decode attempted
- no bytes, no error    -> ``Failure(NoDataFailure)``, no decode attempted
- bytes, decode fails   -> ``Failure(DecodeFailure)``
- bytes, decode works   -> ``Success(value)``

A value is never fabricated from missing data, and failures are never
raised past the callback.

Example:
    >>> from pydantic import BaseModel
    >>> class User(BaseModel):
    ...     id: int
    ...     name: str
    ...     email: str
    >>>
    >>> async with HttpxTransport() as transport:
    ...     integrator = Integrator(transport, Request(url="https://example.com/api/users/1"))
    ...     outcome = await integrator.integrate_async(User)
    ...     if outcome.is_success:
    ...         print(outcome.value.name)
"""

import asyncio
import threading
import time
from typing import Any, Callable, Generic, TypeVar

from integrator.decoding import Decoder, resolve_decoder
from integrator.errors import DecodeFailure, NoDataFailure, TransportFailure
from integrator.models.constants import MAX_LOGGED_ERROR_CHARS
from integrator.models.outcome import (
    Failure,
    IntegrationOutcome,
    RawBytes,
    RawEmpty,
    RawError,
    RawOutcome,
    Success,
    classify_raw,
)
from integrator.models.request import Request
from integrator.models.response import ResponseMetadata
from integrator.observability import get_logger, get_metrics
from integrator.transport.base import Transport
from integrator.utils.sanitization import sanitize_url

logger = get_logger(__name__)

U = TypeVar("U")

OutcomeCallback = Callable[[IntegrationOutcome[U]], None]


def decode_outcome(raw: RawOutcome, decoder: Decoder[U]) -> IntegrationOutcome[U]:
    """Turn a raw transport outcome into an integration outcome.

    The decoder only ever sees non-empty bytes.
    """
    if isinstance(raw, RawError):
        return Failure(TransportFailure(raw.error, metadata=raw.metadata))
    if isinstance(raw, RawEmpty):
        return Failure(NoDataFailure(metadata=raw.metadata))
    if not isinstance(raw, RawBytes):
        raise TypeError(f"Unknown raw outcome: {raw!r}")
    try:
        value = decoder.decode(raw.data)
    except Exception as e:
        return Failure(DecodeFailure(e, target=decoder.name, body_size=len(raw.data)))
    return Success(value)


class _Delivery(Generic[U]):
    """Completion handler for one ``integrate`` call.

    Thread-safe; forwards at most one outcome to the caller.

    Attributes:
        callback_error: Exception raised by the caller's ``on_complete``, if any
    """

    def __init__(
        self,
        request: Request,
        decoder: Decoder[U],
        on_complete: OutcomeCallback[U],
    ) -> None:
        self._request = request
        self._decoder = decoder
        self._on_complete = on_complete
        self._lock = threading.Lock()
        self._delivered = False
        self._start_time = time.perf_counter()
        self.callback_error: BaseException | None = None

    def __call__(
        self,
        data: bytes | None,
        metadata: ResponseMetadata | None,
        error: BaseException | None,
    ) -> None:
        with self._lock:
            duplicate = self._delivered
            self._delivered = True
        if duplicate:
            get_metrics().increment_counter("integrator_duplicate_deliveries_total")
            logger.warning(
                "integrator.duplicate_delivery",
                url=sanitize_url(self._request.url),
                target=self._decoder.name,
            )
            return

        outcome = decode_outcome(classify_raw(data, metadata, error), self._decoder)
        self._record(outcome)
        try:
            self._on_complete(outcome)
        except BaseException as e:
            self.callback_error = e
            raise

    def _record(self, outcome: IntegrationOutcome[U]) -> None:
        duration_seconds = time.perf_counter() - self._start_time
        label = "success" if outcome.is_success else "failure"
        metrics = get_metrics()
        metrics.increment_counter("integrator_integrations_total", {"outcome": label})
        metrics.observe_histogram(
            "integrator_integration_duration_seconds", duration_seconds, {"outcome": label}
        )
        url = sanitize_url(self._request.url)
        duration_ms = round(duration_seconds * 1000, 2)
        if isinstance(outcome, Failure):
            metrics.increment_counter("integrator_failures_total", {"kind": outcome.kind})
            logger.warning(
                "integrator.integrate.failure",
                url=url,
                target=self._decoder.name,
                kind=outcome.kind,
                code=outcome.error.code,
                error=outcome.error.message[:MAX_LOGGED_ERROR_CHARS],
                duration_ms=duration_ms,
            )
            return
        logger.info(
            "integrator.integrate.success",
            url=url,
            target=self._decoder.name,
            duration_ms=duration_ms,
        )


class Integrator:
    """Executes requests through a Transport and delivers typed outcomes.

    The integrator holds no per-call state: one instance may serve any
    number of concurrent ``integrate`` calls.

    Attributes:
        transport: Transport performing the byte transfer
        request: Default request, used when a call does not pass its own
    """

    def __init__(self, transport: Transport, request: Request | None = None) -> None:
        """Initialize the integrator.

        Args:
            transport: Transport performing the byte transfer
            request: Default request. A request passed to ``integrate``
                takes precedence over it.
        """
        if transport is None:
            raise ValueError("transport cannot be None")
        self.transport = transport
        self.request = request

    def _resolve_request(self, request: Request | None) -> Request:
        resolved = request if request is not None else self.request
        if resolved is None:
            raise ValueError(
                "No request to execute: pass one to integrate() or to the Integrator constructor"
            )
        return resolved

    def integrate(
        self,
        target: Any,
        on_complete: OutcomeCallback[U],
        *,
        request: Request | None = None,
    ) -> None:
        """Execute a request and deliver one typed outcome to ``on_complete``.

        Returns before the outcome is known. ``on_complete`` runs on the
        transport's execution context, exactly once.

        Args:
            target: Type to decode the response body into (see
                ``integrator.decoding.resolve_decoder``), or a Decoder
            on_complete: Receives ``Success(value)`` or ``Failure(error)``
            request: Request to execute; defaults to the constructor's request

        Raises:
            ValueError: If no request is available
            TypeError: If no decoder can be built for ``target``
            Exception: Whatever ``on_complete`` raises when the transport
                delivers inside ``execute``
        """
        resolved = self._resolve_request(request)
        decoder: Decoder[U] = resolve_decoder(target)
        delivery = _Delivery(resolved, decoder, on_complete)

        logger.info(
            "integrator.integrate.start",
            url=sanitize_url(resolved.url),
            method=resolved.method.value,
            target=decoder.name,
        )
        try:
            self.transport.execute(resolved, delivery)
        except Exception as e:
            # raised by on_complete during an inline delivery: the caller's own error
            if e is delivery.callback_error:
                raise
            logger.warning(
                "integrator.transport.execute_failed",
                url=sanitize_url(resolved.url),
                error=str(e)[:MAX_LOGGED_ERROR_CHARS],
                error_type=type(e).__name__,
            )
            delivery(None, None, e)

    async def integrate_async(
        self,
        target: Any,
        *,
        request: Request | None = None,
    ) -> IntegrationOutcome[Any]:
        """Awaitable form of ``integrate``.

        The outcome is handed back to the calling event loop, whichever
        thread the transport delivers on.

        Raises:
            ValueError: If no request is available
            TypeError: If no decoder can be built for ``target``
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[IntegrationOutcome[Any]] = loop.create_future()

        def _resolve(outcome: IntegrationOutcome[Any]) -> None:
            if not future.done():
                future.set_result(outcome)

        def _on_complete(outcome: IntegrationOutcome[Any]) -> None:
            loop.call_soon_threadsafe(_resolve, outcome)

        self.integrate(target, _on_complete, request=request)
        return await future


__all__ = ["Integrator", "OutcomeCallback", "decode_outcome"]
