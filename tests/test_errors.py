"""Tests for the integrator error taxonomy."""

import httpx

from integrator.errors import (
    DecodeFailure,
    IntegrationError,
    IntegratorError,
    NoDataFailure,
    TransportBusyError,
    TransportFailure,
)
from integrator.models.response import ResponseMetadata


class TestIntegratorError:
    """Test IntegratorError base class."""

    def test_basic_error_creation(self) -> None:
        error = IntegratorError(code="integrator:test/error", message="Test error message")

        assert error.code == "integrator:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_to_dict(self) -> None:
        error = IntegratorError("integrator:test/error", "msg", {"value": 42})

        assert error.to_dict() == {
            "code": "integrator:test/error",
            "message": "msg",
            "details": {"value": 42},
        }

    def test_error_details_not_shared(self) -> None:
        error1 = IntegratorError("code", "msg")
        error2 = IntegratorError("code", "msg")
        error1.details["key"] = "value"

        assert error2.details == {}


class TestTransportFailure:
    """Test TransportFailure class."""

    def test_wraps_underlying_error(self) -> None:
        underlying = httpx.ConnectError("connection refused")
        error = TransportFailure(underlying)

        assert error.code == "integrator:transport/failure"
        assert error.kind == "transport"
        assert error.underlying is underlying
        assert error.metadata is None
        assert error.details["error_type"] == "ConnectError"
        assert "connection refused" in str(error)

    def test_includes_status_code_from_metadata(self) -> None:
        metadata = ResponseMetadata(status_code=503)
        error = TransportFailure(RuntimeError("boom"), metadata=metadata)

        assert error.metadata is metadata
        assert error.details["status_code"] == 503

    def test_inheritance(self) -> None:
        error = TransportFailure(RuntimeError("boom"))

        assert isinstance(error, IntegrationError)
        assert isinstance(error, IntegratorError)
        assert isinstance(error, Exception)


class TestNoDataFailure:
    """Test NoDataFailure class."""

    def test_no_data_failure(self) -> None:
        error = NoDataFailure()

        assert error.code == "integrator:response/no_data"
        assert error.kind == "no_data"
        assert error.message == "Transport returned no data"
        assert error.details == {}

    def test_no_data_failure_with_metadata(self) -> None:
        error = NoDataFailure(metadata=ResponseMetadata(status_code=204))

        assert error.details == {"status_code": 204}
        assert isinstance(error, IntegrationError)


class TestDecodeFailure:
    """Test DecodeFailure class."""

    def test_decode_failure(self) -> None:
        underlying = ValueError("missing field 'email'")
        error = DecodeFailure(underlying, target="User", body_size=12)

        assert error.code == "integrator:decode/failed"
        assert error.kind == "decode"
        assert error.underlying is underlying
        assert error.target == "User"
        assert error.body_size == 12
        assert error.details["target"] == "User"
        assert error.details["body_size"] == 12
        assert error.details["error_type"] == "ValueError"
        assert "Failed to decode 12 bytes into User" in str(error)


class TestTransportBusyError:
    """Test TransportBusyError class."""

    def test_busy_error(self) -> None:
        error = TransportBusyError(max_threads=4, active_threads=4)

        assert error.code == "integrator:transport/busy"
        assert error.max_threads == 4
        assert error.active_threads == 4
        assert "4/4" in str(error)
        assert not isinstance(error, IntegrationError)
