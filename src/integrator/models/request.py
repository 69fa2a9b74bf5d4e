"""Outbound request model.

A ``Request`` is an immutable description of one outbound call. It is
built by the caller and handed to an ``Integrator``; transports read it
and never modify it.
"""

import json
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator

from integrator.models.base import IntegratorBaseModel
from integrator.models.constants import ALLOWED_URL_SCHEMES
from integrator.models.enums import CachePolicy, HTTPMethod


class Request(IntegratorBaseModel):
    """Description of an outbound HTTP call.

    Attributes:
        url: Absolute http(s) URL of the target
        method: HTTP method (default: GET)
        headers: Request headers
        body: Raw request body, if any
        cache_policy: Cache directive, translated to headers by transports
        timeout: Per-request timeout in seconds, overriding the transport default

    Example:
        >>> request = Request(url="https://example.com/api/users")
        >>> request.method
        <HTTPMethod.GET: 'GET'>
        >>> Request.with_json("https://example.com/api/users", {"name": "Ann"}).method
        <HTTPMethod.POST: 'POST'>
    """

    url: str
    method: HTTPMethod = HTTPMethod.GET
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes | None = None
    cache_policy: CachePolicy = CachePolicy.USE_PROTOCOL_CACHE_POLICY
    timeout: float | None = Field(default=None, gt=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Request url must be absolute (e.g. https://example.com), got: {v}")
        if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
            raise ValueError(
                f"Invalid URL scheme: {parsed.scheme}. Only 'http' and 'https' are allowed."
            )
        return v

    @model_validator(mode="after")
    def _validate_body_for_method(self) -> "Request":
        if self.body is not None and not self.method.allows_body():
            raise ValueError(f"{self.method.value} requests cannot carry a body")
        return self

    @classmethod
    def with_json(
        cls,
        url: str,
        payload: Any,
        method: HTTPMethod = HTTPMethod.POST,
        **kwargs: Any,
    ) -> "Request":
        """Build a request whose body is ``payload`` serialized as JSON."""
        headers = {"Content-Type": "application/json", **kwargs.pop("headers", {})}
        return cls(
            url=url,
            method=method,
            headers=headers,
            body=json.dumps(payload).encode("utf-8"),
            **kwargs,
        )

    def effective_headers(self) -> dict[str, str]:
        """Return the headers to send, including any cache directive."""
        headers = dict(self.headers)
        cache_control = self.cache_policy.cache_control()
        if cache_control and not any(k.lower() == "cache-control" for k in headers):
            headers["Cache-Control"] = cache_control
        return headers
