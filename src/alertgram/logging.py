"""Logging configuration for Alertgram."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from alertgram.config import Settings

REDACTED = "[REDACTED]"

# Loggers that write full request URLs, which carry the bot token
NOISY_LOGGERS = ("httpx", "httpcore")


class SecretRedactor:
    """structlog processor that masks configured secrets in event values."""

    def __init__(self, secrets: list[str]) -> None:
        self._secrets = [secret for secret in secrets if secret]

    def _redact(self, value: Any) -> Any:
        if isinstance(value, str):
            for secret in self._secrets:
                value = value.replace(secret, REDACTED)
            return value
        if isinstance(value, dict):
            return {key: self._redact(item) for key, item in value.items()}
        if isinstance(value, list | tuple):
            return [self._redact(item) for item in value]
        return value

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        for key, value in event_dict.items():
            event_dict[key] = self._redact(value)
        return event_dict


def setup_logging(settings: Settings) -> None:
    """Configure structured logging for the application.

    Bot and webhook tokens are masked in every structlog event, and the
    HTTP client loggers are held at WARNING so request URLs never reach
    the output.
    """
    level = getattr(logging, settings.log_level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer: structlog.typing.Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            SecretRedactor([settings.bot_token, settings.webhook_token]),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
