"""Constants for the integrator.

This module defines package-wide defaults used by the transports.
"""

DEFAULT_TIMEOUT_SECONDS = 30.0
"""Default per-request timeout applied by the bundled transports.

The integrator itself imposes no timeout; this value only configures the
httpx clients owned by ``HttpxTransport`` and ``ThreadedTransport``.
"""

# Connection pool defaults
DEFAULT_POOL_CONNECTIONS = 100
DEFAULT_POOL_MAXSIZE = 100
DEFAULT_POOL_TIMEOUT = 5.0

ALLOWED_URL_SCHEMES = frozenset({"http", "https"})

# Error messages are truncated to this length in log events
MAX_LOGGED_ERROR_CHARS = 200
