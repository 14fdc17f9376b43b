"""Utility modules for TSight Agent."""

from .exceptions import *
from .logger import (
    MaskingFormatter,
    logger,
    mask_sensitive_data,
    setup_logger,
    truncate_query,
)
from .retry import retry_with_backoff, RetryConfig

__all__ = [
    # Exceptions
    "TSightAgentError",
    "ConfigurationError",
    "InvalidPatternError",
    "QueryError",
    "QueryConnectionError",
    "QueryExecutionError",
    "TableDiscoveryError",
    "UnsupportedDataSourceError",
    "ServerError",
    "NoTasksAvailableError",
    "RecoverableError",
    "FatalError",
    "RetryExhaustedError",
    "with_query_context",
    # Logger
    "setup_logger",
    "logger",
    "mask_sensitive_data",
    "MaskingFormatter",
    "truncate_query",
    # Retry
    "retry_with_backoff",
    "RetryConfig",
]
