"""
Error-capturing function operators.

``safely`` turns exceptions raised by a function into data: every call
returns a SafeResult instead of raising, so a batch of calls can be run to
completion and the failures inspected afterwards.

Example:
    safe_sum = safely(sum)
    outcomes = [safe_sum(x) for x in ([1, 2, 3], "oops")]
    ok_inputs = [x for x, r in zip(inputs, outcomes) if r.ok]
"""

import contextlib
import functools
import inspect
import io
import logging
import warnings
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from ..models import QuietResult, SafeResult
from .utils import callable_name

logger = get_logger(__name__)


def _record_failure(
    name: str, exc: Exception, operator: str, metrics: Optional[OperatorMetrics]
) -> None:
    logger.warning(
        f"{operator}_captured_error",
        function=name,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    if metrics is not None:
        metrics.errors_captured.labels(
            function=name, error_type=type(exc).__name__
        ).inc()


def safely(func: Callable, metrics: Optional[OperatorMetrics] = None) -> Callable[..., SafeResult]:
    """
    Wrap ``func`` so that it never raises.

    Args:
        func: Function to wrap (sync or async)
        metrics: Optional metrics object, defaults to the global one

    Returns:
        Function returning ``SafeResult(result=value, error=None)`` on success
        and ``SafeResult(result=None, error=exc)`` on failure
    """
    metrics = resolve_metrics(metrics)
    name = callable_name(func)

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs) -> SafeResult:
        if metrics is not None:
            metrics.calls.labels(operator="safely", function=name).inc()
        try:
            return SafeResult(result=func(*args, **kwargs))
        except Exception as e:
            _record_failure(name, e, "safely", metrics)
            return SafeResult(error=e)

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs) -> SafeResult:
        if metrics is not None:
            metrics.calls.labels(operator="safely", function=name).inc()
        try:
            return SafeResult(result=await func(*args, **kwargs))
        except Exception as e:
            _record_failure(name, e, "safely", metrics)
            return SafeResult(error=e)

    if inspect.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper


def possibly(
    func: Callable, otherwise: Any = None, metrics: Optional[OperatorMetrics] = None
) -> Callable:
    """
    Wrap ``func`` so that failures return ``otherwise`` instead of raising.

    Args:
        func: Function to wrap
        otherwise: Value returned when ``func`` raises
        metrics: Optional metrics object, defaults to the global one
    """
    metrics = resolve_metrics(metrics)
    name = callable_name(func)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if metrics is not None:
            metrics.calls.labels(operator="possibly", function=name).inc()
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _record_failure(name, e, "possibly", metrics)
            return otherwise

    return wrapper


class _RecordCollector(logging.Handler):
    """Keeps the formatted message of every record it receives."""

    def __init__(self):
        super().__init__()
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def quietly(func: Callable) -> Callable[..., QuietResult]:
    """
    Wrap ``func`` so that its stdout output, warnings and log records are captured.

    Log records are collected from the root logger, so they include structlog
    events routed through stdlib logging by ``configure_logging``. Records
    below the active log level are not seen.

    Exceptions raised by ``func`` propagate unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> QuietResult:
        buffer = io.StringIO()
        collector = _RecordCollector()
        root = logging.getLogger()
        root.addHandler(collector)
        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                with contextlib.redirect_stdout(buffer):
                    result = func(*args, **kwargs)
        finally:
            root.removeHandler(collector)

        return QuietResult(
            result=result,
            output=buffer.getvalue(),
            warnings=[str(w.message) for w in caught],
            logs=collector.messages,
        )

    return wrapper


def transpose_results(results: Iterable[SafeResult]) -> Tuple[List[Any], List[Optional[Exception]]]:
    """
    Split SafeResults into parallel lists of results and errors.

    Positions are preserved, so ``errors[i] is None`` exactly when call ``i``
    succeeded.
    """
    values: List[Any] = []
    errors: List[Optional[Exception]] = []
    for outcome in results:
        values.append(outcome.result)
        errors.append(outcome.error)
    return values, errors
