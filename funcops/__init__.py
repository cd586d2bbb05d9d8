"""Function operators: functions that take a function and return a modified one.

Each operator wraps a single function with one cross-cutting behavior
(error capture, memoisation, delay, progress reporting, retrying, timing)
and can be freely combined with the others.
"""

from .operators import (
    all_of,
    any_of,
    compose,
    delay_by,
    dot_every,
    is_memoised,
    log_calls,
    memoise,
    negate,
    possibly,
    quietly,
    retry_with_backoff,
    safely,
    throttle,
    time_it,
    transpose_results,
)
from .models import QuietResult, SafeResult

__version__ = "0.1.0"

__all__ = [
    "QuietResult",
    "SafeResult",
    "all_of",
    "any_of",
    "compose",
    "delay_by",
    "dot_every",
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
