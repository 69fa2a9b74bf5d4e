"""Tests for ThreadedTransport."""

import threading

import httpx
import pytest

from integrator.errors import TransportBusyError, TransportFailure
from integrator.integrator import Integrator
from integrator.models.request import Request
from integrator.models.response import ResponseMetadata
from integrator.testing import RecordingCallback, assert_delivered_once, assert_failure, assert_success
from integrator.transport.httpx_transport import TransportConfig
from integrator.transport.threaded import ThreadedTransport
from tests.factories import ANN, User

USERS_URL = "https://example.com/api/users/1"


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[bytes | None, ResponseMetadata | None, BaseException | None]] = []
        self.thread_names: list[str] = []
        self.done = threading.Event()

    def __call__(
        self,
        data: bytes | None,
        metadata: ResponseMetadata | None,
        error: BaseException | None,
    ) -> None:
        self.calls.append((data, metadata, error))
        self.thread_names.append(threading.current_thread().name)
        self.done.set()


class TestThreadedTransport:
    def test_execute_requires_open_transport(self) -> None:
        transport = ThreadedTransport(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        with pytest.raises(RuntimeError, match="not open"):
            transport.execute(Request(url=USERS_URL), _Recorder())

    def test_delivers_on_worker_thread(self) -> None:
        recorder = _Recorder()
        mock = httpx.MockTransport(lambda r: httpx.Response(200, json=ANN))

        with ThreadedTransport(transport=mock) as transport:
            transport.execute(Request(url=USERS_URL), recorder)
            assert recorder.done.wait(5)

        data, metadata, error = recorder.calls[0]
        assert error is None
        assert data is not None and b'"Ann"' in data
        assert metadata is not None and metadata.status_code == 200
        assert recorder.thread_names[0].startswith("integrator-transport")
        assert transport.active == 0

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        recorder = _Recorder()
        with ThreadedTransport(transport=httpx.MockTransport(handler)) as transport:
            transport.execute(Request(url=USERS_URL), recorder)

        assert isinstance(recorder.calls[0][2], httpx.ConnectError)

    def test_request_build_error_delivered_as_error(self) -> None:
        callback = RecordingCallback()
        mock = httpx.MockTransport(lambda r: httpx.Response(200, json=ANN))
        request = Request(url=USERS_URL, headers={"X-Name": "名前"})

        with ThreadedTransport(transport=mock) as transport:
            Integrator(transport, request).integrate(User, callback)
            assert callback.wait(5)

        error = assert_failure(assert_delivered_once(callback), error_type=TransportFailure)
        assert isinstance(error, TransportFailure)
        assert isinstance(error.underlying, UnicodeEncodeError)
        assert transport.active == 0

    def test_busy_pool_reports_error_immediately(self) -> None:
        release = threading.Event()
        started = threading.Event()

        def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            release.wait(5)
            return httpx.Response(200, json=ANN)

        first, second = _Recorder(), _Recorder()
        config = TransportConfig(max_threads=1)
        with ThreadedTransport(config, transport=httpx.MockTransport(handler)) as transport:
            transport.execute(Request(url=USERS_URL), first)
            assert started.wait(5)

            transport.execute(Request(url=USERS_URL), second)

            # the second call was answered synchronously
            assert len(second.calls) == 1
            error = second.calls[0][2]
            assert isinstance(error, TransportBusyError)
            assert error.details == {"max_threads": 1, "active_threads": 1}
            release.set()

        assert first.calls[0][2] is None

    def test_integrator_over_threaded_transport(self) -> None:
        callback = RecordingCallback()
        mock = httpx.MockTransport(lambda r: httpx.Response(200, json=ANN))

        with ThreadedTransport(transport=mock) as transport:
            Integrator(transport, Request(url=USERS_URL)).integrate(User, callback)
            assert callback.wait(5)

        outcome = assert_delivered_once(callback)
        assert_success(outcome, User(id=1, name="Ann", email="a@x.com"))
        assert callback.threads[0].startswith("integrator-transport")

    def test_closed_transport_becomes_transport_failure(self) -> None:
        callback = RecordingCallback()
        transport = ThreadedTransport(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        Integrator(transport, Request(url=USERS_URL)).integrate(User, callback)

        error = assert_failure(assert_delivered_once(callback), error_type=TransportFailure)
        assert isinstance(error, TransportFailure)
        assert isinstance(error.underlying, RuntimeError)
