"""Transport abstraction.

A transport performs the byte transfer for a ``Request`` and knows nothing
about decoding. ``execute`` returns immediately; the outcome is delivered
later through ``on_complete`` on whatever execution context the transport
uses (an event-loop task, a worker thread...).

The callback receives three independently-nullable values, following the
usual network-transport convention::

    on_complete(data, metadata, error)

Implementations must call ``on_complete`` exactly once per ``execute`` call.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from integrator.models.request import Request
from integrator.models.response import ResponseMetadata

TransportCallback = Callable[
    [Optional[bytes], Optional[ResponseMetadata], Optional[BaseException]], None
]


class Transport(ABC):
    """Executes prepared requests and reports raw outcomes."""

    @abstractmethod
    def execute(self, request: Request, on_complete: TransportCallback) -> None:
        """Start executing ``request``; report the outcome via ``on_complete``.

        Args:
            request: Fully prepared request. Not validated by the transport.
            on_complete: Called exactly once with ``(data, metadata, error)``.
        """


__all__ = ["Transport", "TransportCallback"]
