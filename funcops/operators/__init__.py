"""Function operators, one module per cross-cutting concern."""

from .compose import all_of, any_of, compose, negate
from .delay import delay_by, throttle
from .memoise import freeze_args, is_memoised, memoise
from .progress import dot_every
from .retry import (
    ErrorCategory,
    RetryConfig,
    RetryMetrics,
    calculate_delay,
    classify_error,
    retry_with_backoff,
)
from .safely import possibly, quietly, safely, transpose_results
from .timing import log_calls, time_it

__all__ = [
    "ErrorCategory",
    "RetryConfig",
    "RetryMetrics",
    "all_of",
    "any_of",
    "calculate_delay",
    "classify_error",
    "compose",
    "delay_by",
    "dot_every",
    "freeze_args",
    "is_memoised",
    "log_calls",
    "memoise",
    "negate",
    "possibly",
    "quietly",
    "retry_with_backoff",
    "safely",
    "throttle",
    "time_it",
    "transpose_results",
]
