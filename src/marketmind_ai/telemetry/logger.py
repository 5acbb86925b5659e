"""Structured logging configuration with request correlation and secret redaction."""

import logging
import re
import sys
from typing import Any

import orjson
import structlog
from structlog.processors import CallsiteParameter

from marketmind_ai.config import get_settings


class SecretRedactor:
    """Redact credentials and contact details from log values."""

    EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")
    API_KEY_PATTERN = re.compile(r"\b(gsk_|sk-|api[_-]?key[\s=:]+)[\w-]{20,}\b", re.IGNORECASE)
    BEARER_PATTERN = re.compile(r"\bBearer\s+[\w.-]+", re.IGNORECASE)
    JWT_PATTERN = re.compile(r"\beyJ[A-Za-z0-9-_]+\.[A-Za-z0-9-_]+\.[A-Za-z0-9-_]+\b")

    @classmethod
    def redact(cls, value: Any) -> Any:
        """Redact secrets from value."""
        if not isinstance(value, str):
            return value

        value = cls.JWT_PATTERN.sub("[JWT_REDACTED]", value)
        value = cls.BEARER_PATTERN.sub("Bearer [TOKEN_REDACTED]", value)
        value = cls.API_KEY_PATTERN.sub("[API_KEY_REDACTED]", value)
        value = cls.EMAIL_PATTERN.sub("[EMAIL_REDACTED]", value)

        return value


def redact_sensitive_data(logger, method_name, event_dict):
    """Redact sensitive data from logs."""
    for key, value in event_dict.items():
        if key in ("timestamp", "level", "logger", "request_id"):
            continue
        if isinstance(value, str):
            event_dict[key] = SecretRedactor.redact(value)
        elif isinstance(value, dict):
            event_dict[key] = {k: SecretRedactor.redact(v) for k, v in value.items()}

    return event_dict


def setup_logging(
    level: str | None = None,
    format: str | None = None,
    redact_secrets: bool = True,
) -> None:
    """Configure structlog on top of the standard library logging module."""
    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    log_format = format or settings.log_format

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_secrets:
        processors.append(redact_sensitive_data)

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
        ]
    )

    if log_format == "json":
        processors.append(
            structlog.processors.JSONRenderer(serializer=lambda obj, **kw: orjson.dumps(obj, default=str).decode())
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level, logging.INFO),
    )

    # Suppress noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
