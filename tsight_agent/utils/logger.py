"""Logging utilities for TSight Agent.

Every handler formats through ``MaskingFormatter``, so API keys, passwords,
authorization headers and credentials embedded in data source URLs never
reach the console or the log file.
"""

import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Pattern
from ..config.settings import settings

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MASK = "***MASKED***"

# Each pattern keeps group 1 and replaces the secret that follows it
CREDENTIAL_PATTERNS = [
    r'(api[_-]?key["\s:=]+)([a-zA-Z0-9_\-]+)',
    r'(password["\s:=]+)([^\s",]+)',
    r'((?:bearer|basic)\s+)([a-zA-Z0-9_\-\.=+/]+)',
    r'(://[^/\s:@]+:)([^@\s/]+)(?=@)',
]

_compiled_patterns: List[Pattern] = [
    re.compile(pattern, re.IGNORECASE) for pattern in CREDENTIAL_PATTERNS
]


def mask_sensitive_data(text: str, patterns: Optional[List[str]] = None) -> str:
    """Replace credentials in text with a mask.

    Args:
        text: Text potentially containing credentials
        patterns: Alternative patterns; group 1 is kept, the rest of the
            match is masked

    Returns:
        Text with credentials masked (unchanged if masking is disabled)
    """
    if not settings.get("logging.sensitive_data_masking", True):
        return text

    compiled = _compiled_patterns
    if patterns is not None:
        compiled = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    for pattern in compiled:
        text = pattern.sub(lambda m: m.group(1) + MASK, text)
    return text


class MaskingFormatter(logging.Formatter):
    """Formatter that masks credentials in the fully formatted record."""

    def format(self, record: logging.LogRecord) -> str:
        return mask_sensitive_data(super().format(record))


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    formatter = MaskingFormatter(settings.get("logging.format", DEFAULT_FORMAT))

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Create or reconfigure a module logger.

    Args:
        name: Logger name (usually __name__)
        level: Log level name; defaults to ``logging.level`` from settings
        log_file: Extra file destination; defaults to ``logging.log_file``

    Returns:
        Logger writing to stdout (and the file, if any) without propagating
        to the root logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(
        logging,
        str(level or settings.get("logging.level", "INFO")).upper(),
        logging.INFO,
    ))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(log_file or settings.get("logging.log_file")):
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def truncate_query(query: str, limit: int = 500) -> str:
    """Shorten a query for log lines."""
    if len(query) <= limit:
        return query
    return f"{query[:limit]}..."


logger = setup_logger("tsight_agent")
