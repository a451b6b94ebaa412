"""Central logging configuration with credential redaction."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

LOGGER_NAME = "pricesignal"
REDACTED = "***"

_QUERY_SECRET_RE = re.compile(r"(?i)\b(access_key|apikey|api_key)=([^&\s'\"]+)")


def mask_secret(value: str) -> str:
    """Keep the last four characters of long secrets, hide the rest."""
    if len(value) <= 8:
        return REDACTED
    return f"{REDACTED}{value[-4:]}"


class SecretsRedactionFilter(logging.Filter):
    """Rewrite records so configured keys and key-bearing query strings never reach handlers."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self.secrets = tuple(sorted({secret for secret in secrets if secret}, key=len, reverse=True))

    def redact(self, text: str) -> str:
        for secret in self.secrets:
            text = text.replace(secret, mask_secret(secret))
        return _QUERY_SECRET_RE.sub(lambda match: f"{match.group(1)}={REDACTED}", text)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logger(log_level: str = "INFO", secrets: Iterable[str] = ()) -> logging.Logger:
    """Configure and return the package logger.

    Calling again replaces the redaction filter so newly loaded keys are masked.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.propagate = False

    redaction = SecretsRedactionFilter(secrets)
    if not logger.handlers:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        for existing in [item for item in handler.filters if isinstance(item, SecretsRedactionFilter)]:
            handler.removeFilter(existing)
        handler.addFilter(redaction)
    return logger
