"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development,
with contextvars binding and redaction of credentials and document bodies.
"""

import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Key names whose values are never written to logs
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "authorization",
    "bearer",
    "token",
    "api_token",
    "api_key",
    "secret",
    "password",
    "credential",
    "credentials",
})

# Key names that carry encoded document content
DOCUMENT_KEYS: frozenset[str] = frozenset({
    "input_data",
    "content",
    "data_url",
})

DATA_URL_PREFIX = "data:"
MAX_VALUE_LENGTH = 512


class SecretRedactor:
    """Processor that masks credentials and shortens document payloads.

    Keys in SENSITIVE_KEYS are replaced outright. Values under
    DOCUMENT_KEYS, and any string that looks like a data URL, are
    reduced to a size marker so a multi-megabyte base64 body never
    reaches the log stream.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            key_lower = key.lower()

            if key_lower in SENSITIVE_KEYS:
                result[key] = "[REDACTED]"
            elif key_lower in DOCUMENT_KEYS:
                result[key] = self._summarize(value)
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = self._redact_list(value)
            elif isinstance(value, str):
                result[key] = self._redact_string(value)
            else:
                result[key] = value

        return result

    def _redact_list(self, items: list[Any]) -> list[Any]:
        result: list[Any] = []
        for item in items:
            if isinstance(item, dict):
                result.append(self._redact_dict(item))
            elif isinstance(item, list):
                result.append(self._redact_list(item))
            elif isinstance(item, str):
                result.append(self._redact_string(item))
            else:
                result.append(item)
        return result

    def _redact_string(self, value: str) -> str:
        if value.startswith(DATA_URL_PREFIX):
            return self._summarize(value)
        if len(value) > MAX_VALUE_LENGTH:
            return f"{value[:MAX_VALUE_LENGTH]}...[{len(value)} chars]"
        return value

    def _summarize(self, value: Any) -> str:
        if isinstance(value, list):
            return f"[{len(value)} document(s)]"
        if isinstance(value, str | bytes):
            return f"[document: {len(value)} chars]"
        return "[document]"


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_secrets: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for production, "console" for development
        redact_secrets: Whether to mask credentials and document bodies
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
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
