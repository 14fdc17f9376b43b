"""Custom exceptions for TSight Agent."""


class TSightAgentError(Exception):
    """Base exception for all TSight Agent errors."""
    pass


class ConfigurationError(TSightAgentError):
    """Raised when configuration is invalid or missing."""
    pass


class InvalidPatternError(TSightAgentError):
    """Raised when a configured filter regex fails to compile."""

    def __init__(self, pattern: str, dimension: str, error: Exception):
        """Initialize with the offending pattern.

        Args:
            pattern: Raw pattern string from configuration
            dimension: Filter dimension the pattern belongs to
            error: Underlying regex compilation error
        """
        super().__init__(
            f"Invalid {dimension} pattern {pattern!r}: {error}"
        )
        self.pattern = pattern
        self.dimension = dimension
        self.error = error


class QueryError(TSightAgentError):
    """Base exception for data source query errors."""
    pass


class QueryConnectionError(QueryError):
    """Raised when the data source cannot be reached or rejects credentials."""
    pass


class QueryExecutionError(QueryError):
    """Raised when the data source rejects or fails a query."""
    pass


class TableDiscoveryError(QueryExecutionError):
    """Raised when a single table's schema cannot be discovered."""

    def __init__(self, database: str, table: str, message: str):
        super().__init__(f"Failed to discover table {database}.{table}: {message}")
        self.database = database
        self.table = table


class UnsupportedDataSourceError(TSightAgentError):
    """Raised when a data source type has no executor implementation."""
    pass


class ServerError(TSightAgentError):
    """Raised when the TSight server returns an unexpected response."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class NoTasksAvailableError(ServerError):
    """Raised when the task or job queue is empty."""
    pass


class RecoverableError(TSightAgentError):
    """Raised when an error is recoverable through retry."""
    pass


class FatalError(TSightAgentError):
    """Raised when an error is not recoverable (e.g., authentication failure)."""
    pass


class RetryExhaustedError(TSightAgentError):
    """Raised when all retry attempts have been exhausted."""
    pass


def with_query_context(error: QueryError, message: str) -> QueryError:
    """Re-wrap a query error with context, keeping connection errors distinguishable.

    Args:
        error: Original query error
        message: Context to prepend (e.g. the failing database)

    Returns:
        New error of the matching kind; raise it ``from error``
    """
    if isinstance(error, QueryConnectionError):
        return QueryConnectionError(f"{message}: {error}")
    return QueryExecutionError(f"{message}: {error}")
