"""Pytest fixtures for integrator tests.

Load from a conftest with ``pytest_plugins = ["integrator.testing.fixtures"]``.

Fixtures:
    stub_transport: Fresh StubTransport.
    recording_callback: Fresh RecordingCallback.
    sample_request: GET request to DEFAULT_TEST_URL.
    stub_integrator: Integrator over stub_transport with sample_request as default.
"""

from typing import Iterator

import pytest

from integrator.integrator import Integrator
from integrator.models.request import Request
from integrator.testing.mocks import RecordingCallback, StubTransport

DEFAULT_TEST_URL = "https://example.com/api/users"


@pytest.fixture
def stub_transport() -> Iterator[StubTransport]:
    transport = StubTransport()
    yield transport
    transport.join()


@pytest.fixture
def recording_callback() -> RecordingCallback:
    return RecordingCallback()


@pytest.fixture
def sample_request() -> Request:
    return Request(url=DEFAULT_TEST_URL)


@pytest.fixture
def stub_integrator(stub_transport: StubTransport, sample_request: Request) -> Integrator:
    """Integrator wired to the stub transport, with ``sample_request`` as default."""
    return Integrator(stub_transport, sample_request)
