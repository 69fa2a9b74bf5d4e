"""Transports for the integrator.

A Transport performs the byte transfer for a request and reports
``(data, metadata, error)`` through a callback. Two httpx-backed
implementations are bundled:

- HttpxTransport: asyncio tasks on the running event loop
- ThreadedTransport: blocking calls on a bounded worker pool
"""

from integrator.transport.base import Transport, TransportCallback
from integrator.transport.httpx_transport import HttpxTransport, TransportConfig
from integrator.transport.threaded import ThreadedTransport

__all__ = [
    "HttpxTransport",
    "ThreadedTransport",
    "Transport",
    "TransportCallback",
    "TransportConfig",
]
