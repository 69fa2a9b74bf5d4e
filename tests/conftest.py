"""Shared pytest fixtures for integrator tests.

This module provides common fixtures used across multiple test modules,
reducing duplication and keeping test data consistent.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from integrator.observability import reset_metrics
from tests.factories import ANN, ExplodingDecodable, User, json_body

# Load integrator.testing fixtures (stub_transport, recording_callback, sample_request, ...)
pytest_plugins = ["integrator.testing.fixtures"]


@pytest.fixture(autouse=True)
def _reset_metrics() -> Iterator[None]:
    """Start every test from zeroed metrics."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture(autouse=True)
def _reset_exploding_decodable() -> None:
    ExplodingDecodable.attempts = 0


@pytest.fixture
def ann_bytes() -> bytes:
    """JSON body for the user Ann."""
    return json_body(ANN)


@pytest.fixture
def ann() -> User:
    return User(**ANN)
