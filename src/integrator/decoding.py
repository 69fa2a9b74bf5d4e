"""Decodable capability: turning response bytes into typed values.

A target passed to ``Integrator.integrate`` is resolved to a ``Decoder``:

- an object that already implements ``Decoder`` is used as is;
- a class exposing a ``from_bytes(data)`` classmethod decodes itself;
- anything pydantic can validate from JSON (models, dataclasses, TypedDicts,
  ``list[User]``...) is decoded with a ``pydantic.TypeAdapter``.

Decoders raise on malformed input; the integrator turns whatever they raise
into a ``DecodeFailure``.

Example:
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class User:
    ...     id: int
    ...     name: str
    >>> resolve_decoder(User).decode(b'{"id": 1, "name": "Ann"}')
    User(id=1, name='Ann')
"""

from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import PydanticUserError, TypeAdapter

U = TypeVar("U")
U_co = TypeVar("U_co", covariant=True)


@runtime_checkable
class Decoder(Protocol[U_co]):
    """Structured conversion from a byte sequence into a typed instance."""

    name: str

    def decode(self, data: bytes) -> U_co: ...


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


class PydanticDecoder(Generic[U]):
    """Decode JSON bytes into any type pydantic can validate."""

    def __init__(self, target: Any, *, strict: bool | None = None) -> None:
        self.name = _type_name(target)
        self._strict = strict
        self._adapter: TypeAdapter[U] = TypeAdapter(target)

    def decode(self, data: bytes) -> U:
        return self._adapter.validate_json(data, strict=self._strict)

    def __repr__(self) -> str:
        return f"PydanticDecoder({self.name})"


class CallableDecoder(Generic[U]):
    """Wrap a plain ``bytes -> U`` function as a Decoder."""

    def __init__(self, func: Callable[[bytes], U], name: str | None = None) -> None:
        self.name = name or _type_name(func)
        self._func = func

    def decode(self, data: bytes) -> U:
        return self._func(data)

    def __repr__(self) -> str:
        return f"CallableDecoder({self.name})"


def _has_from_bytes(target: Any) -> bool:
    # int.from_bytes and friends decode binary integers, not response bodies
    if getattr(target, "__module__", None) == "builtins":
        return False
    return callable(getattr(target, "from_bytes", None))


def resolve_decoder(target: Any) -> Decoder[Any]:
    """Return a Decoder for ``target``.

    Args:
        target: A Decoder instance, a class with ``from_bytes``, or any type
            supported by ``pydantic.TypeAdapter``.

    Returns:
        Decoder producing instances of ``target``.

    Raises:
        TypeError: If no decoder can be built for ``target``.
    """
    if target is None:
        raise TypeError("Decode target cannot be None")
    if not isinstance(target, type) and isinstance(target, Decoder):
        return target
    if isinstance(target, type) and _has_from_bytes(target):
        return CallableDecoder(target.from_bytes, name=target.__name__)
    try:
        return PydanticDecoder(target)
    except PydanticUserError as e:
        raise TypeError(f"Cannot decode response bytes into {target!r}: {e}") from e


__all__ = [
    "CallableDecoder",
    "Decoder",
    "PydanticDecoder",
    "resolve_decoder",
]
