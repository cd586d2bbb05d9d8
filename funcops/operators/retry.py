"""
Retry operator with exponential backoff.

Re-invokes a function whose failure looks transient (connection drops,
timeouts), waiting longer between each attempt. Permanent failures and
the last failed attempt are re-raised unchanged.
"""

import asyncio
import functools
import inspect
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple, Type

from ..config import get_config
from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from .utils import callable_name

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error category classification"""
    RETRYABLE = "retryable"
    NON_RETRYABLE = "non_retryable"


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 3
    initial_delay: float = 0.1  # seconds
    max_delay: float = 60.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.2  # +/- 20%

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be >= 0")

    @classmethod
    def from_settings(cls) -> "RetryConfig":
        """Build a RetryConfig from FUNCOPS_RETRY_* settings."""
        config = get_config()
        return cls(
            max_attempts=config.retry_max_attempts,
            initial_delay=config.retry_initial_delay,
            max_delay=config.retry_max_delay,
        )


@dataclass
class RetryMetrics:
    """Statistics for one retrying wrapper"""
    total_attempts: int = 0
    successful_attempts: int = 0
    failed_attempts: int = 0
    retry_count: int = 0
    total_retry_delay: float = 0.0  # seconds
    last_error: Optional[str] = None
    last_error_timestamp: Optional[datetime] = None


RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
)

NON_RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
    NotImplementedError,
)

_RETRYABLE_PATTERNS = ("connection", "timeout", "timed out", "unavailable", "temporary", "transient")


def classify_error(exception: Exception) -> ErrorCategory:
    """
    Classify an exception as retryable or non-retryable.

    Exceptions carrying an HTTP-like ``status`` attribute are classified by
    code first, then by type, then by message.
    """
    status_code = getattr(exception, "status", None)
    if isinstance(status_code, int):
        if status_code in {408, 429, 500, 502, 503, 504}:
            return ErrorCategory.RETRYABLE
        if 400 <= status_code < 500:
            return ErrorCategory.NON_RETRYABLE

    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return ErrorCategory.RETRYABLE

    if isinstance(exception, NON_RETRYABLE_EXCEPTIONS):
        return ErrorCategory.NON_RETRYABLE

    error_msg = str(exception).lower()
    if any(pattern in error_msg for pattern in _RETRYABLE_PATTERNS):
        return ErrorCategory.RETRYABLE

    return ErrorCategory.NON_RETRYABLE


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Delay before retry number ``attempt`` (0-indexed).

    initial_delay * exponential_base ** attempt, capped at max_delay, then
    scaled by a random +/- jitter_range factor when jitter is enabled.
    """
    delay = min(config.initial_delay * (config.exponential_base ** attempt), config.max_delay)

    if config.jitter:
        delay *= 1 + random.uniform(-config.jitter_range, config.jitter_range)

    return max(0.0, delay)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    retryable_exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    metrics: Optional[RetryMetrics] = None,
    operator_metrics: Optional[OperatorMetrics] = None,
):
    """
    Decorator for retrying a function with exponential backoff.

    Args:
        config: Retry configuration (default: built from FUNCOPS_RETRY_*)
        retryable_exceptions: Exception types always retried; when given,
            every other exception is treated as permanent. When omitted,
            ``classify_error`` decides.
        on_retry: Callback ``(attempt, exception, delay)`` before each wait
        metrics: RetryMetrics instance to accumulate statistics into
        operator_metrics: Prometheus metrics, defaults to the global ones

    Example:
        @retry_with_backoff(RetryConfig(max_attempts=5))
        def fetch(url):
            return requests.get(url, timeout=5)
    """
    if config is None:
        config = RetryConfig.from_settings()
    if metrics is None:
        metrics = RetryMetrics()
    prom = resolve_metrics(operator_metrics)

    def is_retryable(exc: Exception) -> bool:
        if retryable_exceptions is not None:
            return isinstance(exc, retryable_exceptions)
        return classify_error(exc) == ErrorCategory.RETRYABLE

    def decorator(func):
        name = callable_name(func)

        def on_failure(exc: Exception, attempt: int) -> float:
            """Record a failed attempt; return the delay or re-raise."""
            metrics.last_error = str(exc)
            metrics.last_error_timestamp = datetime.now(timezone.utc)

            if not is_retryable(exc):
                logger.error(
                    "retry_non_retryable_error",
                    function=name,
                    attempt=attempt + 1,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                metrics.failed_attempts += 1
                raise exc

            if attempt == config.max_attempts - 1:
                logger.error(
                    "retry_attempts_exhausted",
                    function=name,
                    max_attempts=config.max_attempts,
                    total_retry_delay=metrics.total_retry_delay,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                metrics.failed_attempts += 1
                raise exc

            delay = calculate_delay(attempt, config)
            metrics.retry_count += 1
            metrics.total_retry_delay += delay
            if prom is not None:
                prom.retries.labels(function=name).inc()

            logger.warning(
                "retry_scheduled",
                function=name,
                attempt=attempt + 1,
                max_attempts=config.max_attempts,
                delay_seconds=round(delay, 3),
                error_type=type(exc).__name__,
            )
            if on_retry:
                on_retry(attempt, exc, delay)
            return delay

        def on_attempt() -> None:
            metrics.total_attempts += 1
            if prom is not None:
                prom.calls.labels(operator="retry_with_backoff", function=name).inc()

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                on_attempt()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    await asyncio.sleep(on_failure(e, attempt))
                else:
                    metrics.successful_attempts += 1
                    return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                on_attempt()
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    time.sleep(on_failure(e, attempt))
                else:
                    metrics.successful_attempts += 1
                    return result

        wrapper = async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper
        wrapper.retry_metrics = metrics
        return wrapper

    return decorator
