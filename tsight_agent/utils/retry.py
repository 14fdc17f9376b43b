"""Retry logic with exponential backoff for server API calls."""

import asyncio
import random
from typing import Awaitable, Callable, Any, Type, Tuple, Optional
from functools import wraps
from ..config.settings import settings
from .logger import setup_logger
from .exceptions import RecoverableError, FatalError, RetryExhaustedError

logger = setup_logger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Tuple[Type[Exception], ...] = (RecoverableError,),
        fatal_exceptions: Tuple[Type[Exception], ...] = (FatalError,),
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts, including the first one
            base_delay: Initial delay in seconds
            max_delay: Maximum delay in seconds
            multiplier: Multiplier for exponential backoff
            jitter: Whether to add random jitter to delays
            retryable_exceptions: Exceptions that should trigger retry
            fatal_exceptions: Exceptions that should not be retried
        """
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.jitter = jitter
        self.retryable_exceptions = retryable_exceptions
        self.fatal_exceptions = fatal_exceptions

    @classmethod
    def from_settings(cls, section: str = "retry") -> 'RetryConfig':
        """Create retry config from settings.

        Args:
            section: Configuration section path

        Returns:
            RetryConfig instance
        """
        max_attempts = settings.get(f"{section}.max_attempts", 3)
        base_delay = settings.get(f"{section}.base_delay", 1.0)
        max_delay = settings.get(f"{section}.max_delay", 30.0)
        multiplier = settings.get(f"{section}.multiplier", 2.0)
        jitter = settings.get(f"{section}.jitter", True)

        # Convert to proper types (in case YAML or env loads them as strings)
        try:
            max_attempts = int(max_attempts)
            base_delay = float(base_delay)
            max_delay = float(max_delay)
            multiplier = float(multiplier)
            jitter = bool(jitter) if not isinstance(jitter, bool) else jitter
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to convert retry config values: {e}. Using defaults.")
            return cls()

        return cls(
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            multiplier=multiplier,
            jitter=jitter,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for the given attempt number.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay = min(
            self.base_delay * (self.multiplier ** attempt),
            self.max_delay,
        )

        if self.jitter:
            # Random jitter of +/-25%
            jitter_range = delay * 0.25
            delay += random.uniform(-jitter_range, jitter_range)
            delay = max(0, delay)

        return delay


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable:
    """Decorator to retry a coroutine function with exponential backoff.

    Args:
        config: Retry configuration (read from settings at call time if None)
        on_retry: Optional callback called before each retry with (exception, attempt_number)

    Returns:
        Decorated coroutine function

    Example:
        @retry_with_backoff()
        async def submit():
            ...
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            retry_config = config or RetryConfig.from_settings()

            for attempt in range(retry_config.max_attempts):
                try:
                    return await func(*args, **kwargs)

                except retry_config.fatal_exceptions as e:
                    logger.error(
                        f"Fatal error in {func.__name__}: {str(e)}. "
                        f"Not retrying."
                    )
                    raise

                except retry_config.retryable_exceptions as e:
                    remaining_attempts = retry_config.max_attempts - attempt - 1

                    if remaining_attempts == 0:
                        logger.error(
                            f"All {retry_config.max_attempts} retry attempts exhausted "
                            f"for {func.__name__}"
                        )
                        raise RetryExhaustedError(
                            f"Failed after {retry_config.max_attempts} attempts: {str(e)}"
                        ) from e

                    delay = retry_config.calculate_delay(attempt)
                    logger.warning(
                        f"Attempt {attempt + 1}/{retry_config.max_attempts} failed "
                        f"for {func.__name__}: {str(e)}. "
                        f"Retrying in {delay:.2f}s..."
                    )

                    if on_retry:
                        try:
                            on_retry(e, attempt + 1)
                        except Exception as callback_error:
                            logger.error(
                                f"Error in retry callback: {str(callback_error)}"
                            )

                    await asyncio.sleep(delay)

            raise RetryExhaustedError(
                f"{func.__name__} was not attempted (max_attempts={retry_config.max_attempts})"
            )

        return wrapper

    return decorator
