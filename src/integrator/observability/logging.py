"""structlog setup for the integrator.

Log events are dotted names with keyword fields, e.g.
``integrator.integrate.failure`` with ``url``, ``kind`` and ``duration_ms``.
Dict-valued fields (request headers, error details) pass through a
redaction processor before rendering, so transports can log headers as is.

Environment Variables:
    INTEGRATOR_LOG_FORMAT: "json" or "console" (default: console)
    INTEGRATOR_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
    INTEGRATOR_SERVICE_NAME: Bound as ``service`` on every event
    INTEGRATOR_DEBUG: "true"/"1" turns redaction off

Example:
    >>> configure_logging(log_format="json", log_level="DEBUG")
    >>> get_logger("integrator.transport").debug(
    ...     "integrator.transport.request", headers={"Authorization": "Bearer x"}
    ... )
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

ENV_LOG_FORMAT = "INTEGRATOR_LOG_FORMAT"
ENV_LOG_LEVEL = "INTEGRATOR_LOG_LEVEL"
ENV_SERVICE_NAME = "INTEGRATOR_SERVICE_NAME"
ENV_DEBUG = "INTEGRATOR_DEBUG"

LOG_FORMATS = ("console", "json")
REDACTED_PLACEHOLDER = "***REDACTED***"

# matched as case-insensitive substrings of header and field names
_SENSITIVE_KEY_PATTERNS = ("password", "token", "secret", "key", "authorization", "auth", "cookie")

_logging_configured = False


@dataclass(frozen=True)
class LoggingSettings:
    """Resolved logging options.

    Attributes:
        log_format: "console" (colored, for development) or "json"
        log_level: stdlib level name
        service_name: Value bound as ``service`` in every event
    """

    log_format: str = "console"
    log_level: str = "INFO"
    service_name: str = "typed-integrator"

    def __post_init__(self) -> None:
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format} (expected one of {LOG_FORMATS})")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(
        cls,
        log_format: str | None = None,
        log_level: str | None = None,
        service_name: str | None = None,
    ) -> "LoggingSettings":
        """Build settings, preferring explicit arguments over the environment."""
        defaults = cls()
        return cls(
            log_format=(log_format or os.environ.get(ENV_LOG_FORMAT) or defaults.log_format).lower(),
            log_level=(log_level or os.environ.get(ENV_LOG_LEVEL) or defaults.log_level).upper(),
            service_name=service_name or os.environ.get(ENV_SERVICE_NAME) or defaults.service_name,
        )

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)


def is_debug_mode() -> bool:
    """Return True if INTEGRATOR_DEBUG is set to a truthy value (e.g. true, 1)."""
    return os.environ.get(ENV_DEBUG, "").strip().lower() in ("true", "1", "yes", "on")


def _is_sensitive_key(key: str) -> bool:
    lower = key.lower()
    return any(pattern in lower for pattern in _SENSITIVE_KEY_PATTERNS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED_PLACEHOLDER if _is_sensitive_key(str(k)) else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_redact(item) for item in value]
    return value


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values replaced.

    Nested dicts and lists are walked. When INTEGRATOR_DEBUG is on, data
    is returned unchanged.

    Example:
        >>> sanitize_for_logging({"Accept": "application/json", "Authorization": "Bearer x"})
        {'Accept': 'application/json', 'Authorization': '***REDACTED***'}
    """
    if not data:
        return {}
    if is_debug_mode():
        return dict(data)
    return _redact(data)


def redact_sensitive_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog processor applying ``sanitize_for_logging`` to dict-valued fields."""
    for field_name, value in event_dict.items():
        if isinstance(value, dict):
            event_dict[field_name] = sanitize_for_logging(value)
    return event_dict


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_sensitive_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _build_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Arguments left as None fall back to the environment, then to
    ``LoggingSettings`` defaults. Without ``force`` only the first call
    has an effect.

    Raises:
        ValueError: If the format or level is unknown
    """
    global _logging_configured
    if _logging_configured and not force:
        return

    settings = LoggingSettings.from_env(log_format, log_level, service_name)
    processors = _build_processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _build_renderer(settings.log_format),
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(settings.level)

    structlog.contextvars.bind_contextvars(service=settings.service_name)
    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a named logger, configuring defaults on first use."""
    if not _logging_configured:
        configure_logging()
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields (e.g. ``correlation_id``) to every following event in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
