"""Enumerations for integrator requests.

String enums so that values compare equal to their wire form.
"""

from enum import Enum


class HTTPMethod(str, Enum):
    """HTTP request methods accepted by ``Request``."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    def allows_body(self) -> bool:
        """Check if requests with this method may carry a body."""
        return self not in (HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.OPTIONS)


class CachePolicy(str, Enum):
    """Cache directive attached to a request.

    The integrator performs no caching itself; transports translate the
    policy into request headers.

    Example:
        >>> CachePolicy.RELOAD_IGNORING_CACHE.cache_control()
        'no-cache'
        >>> CachePolicy.USE_PROTOCOL_CACHE_POLICY.cache_control() is None
        True
    """

    USE_PROTOCOL_CACHE_POLICY = "use_protocol_cache_policy"
    RELOAD_IGNORING_CACHE = "reload_ignoring_cache"
    RETURN_CACHE_ELSE_LOAD = "return_cache_else_load"

    def cache_control(self) -> str | None:
        """Return the Cache-Control header value for this policy, if any."""
        if self is CachePolicy.RELOAD_IGNORING_CACHE:
            return "no-cache"
        if self is CachePolicy.RETURN_CACHE_ELSE_LOAD:
            return "max-stale"
        return None
