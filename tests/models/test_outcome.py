"""Tests for raw and integration outcome types."""

import httpx
import pytest

from integrator.errors import NoDataFailure, TransportFailure
from integrator.models.outcome import (
    Failure,
    RawBytes,
    RawEmpty,
    RawError,
    Success,
    classify_raw,
)
from integrator.models.response import ResponseMetadata


class TestClassifyRaw:
    """Tests for mapping (data, metadata, error) onto RawOutcome."""

    def test_bytes(self) -> None:
        metadata = ResponseMetadata(status_code=200)
        raw = classify_raw(b'{"id": 1}', metadata, None)

        assert raw == RawBytes(data=b'{"id": 1}', metadata=metadata)

    def test_error(self) -> None:
        error = httpx.ConnectError("refused")
        raw = classify_raw(None, None, error)

        assert isinstance(raw, RawError)
        assert raw.error is error

    def test_error_wins_over_bytes(self) -> None:
        error = httpx.ReadTimeout("slow")
        raw = classify_raw(b"partial", ResponseMetadata(status_code=200), error)

        assert isinstance(raw, RawError)
        assert raw.error is error
        assert raw.metadata is not None

    def test_no_bytes_no_error_is_empty(self) -> None:
        assert classify_raw(None, None, None) == RawEmpty(metadata=None)

    def test_zero_length_bytes_is_empty(self) -> None:
        metadata = ResponseMetadata(status_code=204)

        assert classify_raw(b"", metadata, None) == RawEmpty(metadata=metadata)

    def test_bytearray_normalized_to_bytes(self) -> None:
        raw = classify_raw(bytearray(b"[]"), None, None)

        assert isinstance(raw, RawBytes)
        assert type(raw.data) is bytes


class TestSuccess:
    def test_success(self) -> None:
        outcome = Success(42)

        assert outcome.is_success
        assert outcome.unwrap() == 42
        assert outcome.value_or(0) == 42

    def test_equality(self) -> None:
        assert Success({"id": 1}) == Success({"id": 1})
        assert Success(1) != Success(2)


class TestFailure:
    def test_failure(self) -> None:
        error = NoDataFailure()
        outcome = Failure(error)

        assert not outcome.is_success
        assert outcome.kind == "no_data"
        assert outcome.value_or("fallback") == "fallback"

    def test_unwrap_raises_carried_error(self) -> None:
        error = TransportFailure(RuntimeError("boom"))

        with pytest.raises(TransportFailure) as exc_info:
            Failure(error).unwrap()
        assert exc_info.value is error
