"""Typed HTTP request/response integration.

Send a request through a pluggable transport, decode the response body
into a caller-specified type and receive exactly one outcome.

Example:
    >>> from integrator import HttpxTransport, Integrator, Request
    >>>
    >>> async with HttpxTransport() as transport:
    ...     integrator = Integrator(transport)
    ...     outcome = await integrator.integrate_async(
    ...         User, request=Request(url="https://example.com/api/users/1")
    ...     )
"""

from integrator.decoding import CallableDecoder, Decoder, PydanticDecoder, resolve_decoder
from integrator.errors import (
    DecodeFailure,
    IntegrationError,
    IntegratorError,
    NoDataFailure,
    TransportBusyError,
    TransportFailure,
)
from integrator.integrator import Integrator
from integrator.models import (
    CachePolicy,
    Failure,
    HTTPMethod,
    IntegrationOutcome,
    Request,
    ResponseMetadata,
    Success,
)
from integrator.transport import (
    HttpxTransport,
    ThreadedTransport,
    Transport,
    TransportConfig,
)

__version__ = "0.1.0"

__all__ = [
    "CachePolicy",
    "CallableDecoder",
    "DecodeFailure",
    "Decoder",
    "Failure",
    "HTTPMethod",
    "HttpxTransport",
    "IntegrationError",
    "IntegrationOutcome",
    "Integrator",
    "IntegratorError",
    "NoDataFailure",
    "PydanticDecoder",
    "Request",
    "ResponseMetadata",
    "Success",
    "ThreadedTransport",
    "Transport",
    "TransportBusyError",
    "TransportConfig",
    "TransportFailure",
    "resolve_decoder",
]
