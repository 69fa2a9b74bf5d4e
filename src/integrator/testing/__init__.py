"""Testing helpers for code built on the integrator.

Example:
    >>> from integrator.testing import StubTransport, RecordingCallback, assert_success
    >>> transport = StubTransport()
    >>> transport.set_json({"id": 1, "name": "Ann", "email": "a@x.com"})
"""

from integrator.testing.assertions import (
    assert_delivered_once,
    assert_failure,
    assert_success,
)
from integrator.testing.mocks import RecordingCallback, StubTransport

__all__ = [
    "RecordingCallback",
    "StubTransport",
    "assert_delivered_once",
    "assert_failure",
    "assert_success",
]
