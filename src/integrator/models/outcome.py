"""Raw transport outcomes and typed integration outcomes.

``RawOutcome`` is what a transport produced before any decoding.
``IntegrationOutcome`` is the single terminal result handed to the caller:
either ``Success`` carrying the decoded value or ``Failure`` carrying a
classified ``IntegrationError``. Never both, never neither.

Example:
    >>> classify_raw(b'{"id": 1}', None, None)
    RawBytes(data=b'{"id": 1}', metadata=None)
    >>> classify_raw(None, None, None)
    RawEmpty(metadata=None)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, NoReturn, TypeVar, Union

from integrator.errors import IntegrationError
from integrator.models.response import ResponseMetadata

U = TypeVar("U")
D = TypeVar("D")


@dataclass(frozen=True)
class RawBytes:
    """The transport delivered a non-empty body."""

    data: bytes
    metadata: ResponseMetadata | None = None


@dataclass(frozen=True)
class RawError:
    """The transport delivered an error."""

    error: BaseException
    metadata: ResponseMetadata | None = None


@dataclass(frozen=True)
class RawEmpty:
    """The transport completed without error and without bytes."""

    metadata: ResponseMetadata | None = None


RawOutcome = Union[RawBytes, RawError, RawEmpty]


def classify_raw(
    data: bytes | None,
    metadata: ResponseMetadata | None,
    error: BaseException | None,
) -> RawOutcome:
    """Map the transport's three independently-nullable outputs to a RawOutcome.

    An error wins whenever present, even alongside bytes. Absent and
    zero-length bodies are both treated as empty.
    """
    if error is not None:
        return RawError(error=error, metadata=metadata)
    if not data:
        return RawEmpty(metadata=metadata)
    return RawBytes(data=bytes(data), metadata=metadata)


@dataclass(frozen=True)
class Success(Generic[U]):
    """A decoded value."""

    value: U
    is_success: ClassVar[bool] = True

    def unwrap(self) -> U:
        """Return the decoded value."""
        return self.value

    def value_or(self, default: D) -> U | D:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A classified failure; see ``integrator.errors``."""

    error: IntegrationError
    is_success: ClassVar[bool] = False

    @property
    def kind(self) -> str:
        """Failure kind: ``transport``, ``no_data`` or ``decode``."""
        return self.error.kind

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error

    def value_or(self, default: D) -> D:
        return default


IntegrationOutcome = Union[Success[U], Failure]
