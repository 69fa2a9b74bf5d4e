"""Data models for the integrator.

This module exports the request description, the response descriptor and
the outcome types exchanged between transports, the integrator and callers.
"""

from integrator.models.base import IntegratorBaseModel
from integrator.models.enums import CachePolicy, HTTPMethod
from integrator.models.outcome import (
    Failure,
    IntegrationOutcome,
    RawBytes,
    RawEmpty,
    RawError,
    RawOutcome,
    Success,
    classify_raw,
)
from integrator.models.request import Request
from integrator.models.response import ResponseMetadata

__all__ = [
    "CachePolicy",
    "Failure",
    "HTTPMethod",
    "IntegrationOutcome",
    "IntegratorBaseModel",
    "RawBytes",
    "RawEmpty",
    "RawError",
    "RawOutcome",
    "Request",
    "ResponseMetadata",
    "Success",
    "classify_raw",
]
