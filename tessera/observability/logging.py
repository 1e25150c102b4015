"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development,
with automatic context binding and secret redaction. Engine components
accept an injected logger and fall back to ``get_null_logger()`` so that
nothing is emitted unless the host asks for it.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, NoReturn, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Sensitive key names (O(1) lookup)
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "pwd",
    "secret",
    "client_secret",
    "token",
    "api_key",
    "apikey",
    "auth",
    "authorization",
    "credential",
    "credentials",
    "private_key",
    "access_token",
    "refresh_token",
    "connection_string",
    "plaintext",
})

# Cipher-marked payloads must never reach the log sink verbatim
CIPHER_PATTERN = re.compile(r"\{cipher\}\S+")


class SecretRedactor:
    """Processor that redacts secrets from log events.

    Uses two-tier approach:
    1. Key-name lookup via frozenset (O(1)) for known sensitive keys
    2. Regex on string values for cipher-marked payloads
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Redact secrets from event dictionary."""
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        """Recursively redact secrets from a dictionary."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = key.lower()

            if key_lower in SENSITIVE_KEYS:
                result[key] = "[REDACTED]"
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, str):
                result[key] = self._redact_string(value)
            elif isinstance(value, list):
                result[key] = self._redact_list(value)
            else:
                result[key] = value

        return result

    def _redact_string(self, value: str) -> str:
        """Mask cipher payloads in a string."""
        return CIPHER_PATTERN.sub("{cipher}[REDACTED]", value)

    def _redact_list(self, items: list[Any]) -> list[Any]:
        """Redact secrets from list items."""
        result: list[Any] = []
        for item in items:
            if isinstance(item, dict):
                result.append(self._redact_dict(item))
            elif isinstance(item, str):
                result.append(self._redact_string(item))
            elif isinstance(item, list):
                result.append(self._redact_list(item))
            else:
                result.append(item)
        return result


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_secrets: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_secrets: Whether to redact secrets and cipher payloads from logs
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_secrets:
        processors.append(SecretRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    level_num = level_map.get(level.upper(), 20)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        A bound structlog logger
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def _drop_event(
    _logger: WrappedLogger,
    _method_name: str,
    _event_dict: EventDict,
) -> NoReturn:
    raise structlog.DropEvent


def get_null_logger() -> structlog.stdlib.BoundLogger:
    """Get a logger that accepts every call and emits nothing."""
    return cast(
        structlog.stdlib.BoundLogger,
        structlog.wrap_logger(structlog.ReturnLogger(), processors=[_drop_event]),
    )
