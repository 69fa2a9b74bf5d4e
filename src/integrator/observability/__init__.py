"""Observability for the integrator: structured logging and metrics.

Example:
    >>> from integrator.observability import get_logger, get_metrics
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("integrator.integrate.start", url="https://example.com/api/users")
    >>>
    >>> get_metrics().increment_counter("integrator_integrations_total", {"outcome": "success"})
"""

from integrator.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)
from integrator.observability.metrics import (
    MetricsCollector,
    get_metrics,
    reset_metrics,
)

__all__ = [
    "MetricsCollector",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_metrics",
    "is_debug_mode",
    "reset_metrics",
    "sanitize_for_logging",
]
