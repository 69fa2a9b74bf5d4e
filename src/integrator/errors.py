"""Integrator Error Taxonomy.

This module defines the error hierarchy for the integrator, providing
structured errors with specific error codes and context information.

The three ``IntegrationError`` kinds are never raised past the integrator:
they are carried inside ``Failure`` outcomes and delivered through the
completion callback. Callers branch on them, or call ``outcome.unwrap()``
to re-raise.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from integrator.models.response import ResponseMetadata


class IntegratorError(Exception):
    """Base exception for all integrator errors.

    Attributes:
        code: Error code following the integrator:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class IntegrationError(IntegratorError):
    """Base class for the failure kinds carried by ``Failure`` outcomes."""

    kind: str = "integration"


class TransportFailure(IntegrationError):
    """The transport reported an error (DNS, connection refused, timeout, TLS...).

    No decode is attempted once the transport has failed.

    Attributes:
        underlying: The original transport error
        metadata: Response descriptor, when the transport produced one
    """

    kind = "transport"

    def __init__(
        self,
        underlying: BaseException,
        metadata: ResponseMetadata | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Transport failed: {type(underlying).__name__}: {underlying}"
        extra: dict[str, Any] = {"error_type": type(underlying).__name__}
        if metadata is not None and metadata.status_code is not None:
            extra["status_code"] = metadata.status_code
        super().__init__(
            code="integrator:transport/failure",
            message=message,
            details={**extra, **(details or {})},
        )
        self.underlying = underlying
        self.metadata = metadata


class NoDataFailure(IntegrationError):
    """The transport completed without error but produced no bytes.

    Distinct from ``TransportFailure``: the call succeeded, there is
    simply nothing to decode.
    """

    kind = "no_data"

    def __init__(
        self,
        metadata: ResponseMetadata | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if metadata is not None and metadata.status_code is not None:
            extra["status_code"] = metadata.status_code
        super().__init__(
            code="integrator:response/no_data",
            message="Transport returned no data",
            details={**extra, **(details or {})},
        )
        self.metadata = metadata


class DecodeFailure(IntegrationError):
    """Bytes were received but could not be decoded into the requested type.

    Attributes:
        underlying: The decoder's exception
        target: Name of the requested type
        body_size: Number of bytes that failed to decode
    """

    kind = "decode"

    def __init__(
        self,
        underlying: Exception,
        target: str,
        body_size: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Failed to decode {body_size} bytes into {target}: {underlying}"
        super().__init__(
            code="integrator:decode/failed",
            message=message,
            details={
                "target": target,
                "body_size": body_size,
                "error_type": type(underlying).__name__,
                **(details or {}),
            },
        )
        self.underlying = underlying
        self.target = target
        self.body_size = body_size


class TransportBusyError(IntegratorError):
    """Raised when a bounded transport pool cannot accept another request.

    Reaches integrator callers wrapped in ``TransportFailure``.

    Attributes:
        max_threads: Maximum number of worker threads
        active_threads: Worker threads busy at rejection time
    """

    def __init__(
        self,
        max_threads: int,
        active_threads: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Transport pool exhausted: {active_threads}/{max_threads} threads in use"
        super().__init__(
            code="integrator:transport/busy",
            message=message,
            details={
                "max_threads": max_threads,
                "active_threads": active_threads,
                **(details or {}),
            },
        )
        self.max_threads = max_threads
        self.active_threads = active_threads
