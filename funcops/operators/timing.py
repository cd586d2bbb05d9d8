"""Operators that observe calls without changing them: timing and call logging."""

import functools
import inspect
import time
from typing import Any, Callable, Optional, TypeVar

from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from .utils import callable_name

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)

_MAX_REPR = 80
_LEVELS = ("debug", "info", "warning", "error", "critical")


def _short_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > _MAX_REPR:
        return text[: _MAX_REPR - 3] + "..."
    return text


def time_it(func: F, metrics: Optional[OperatorMetrics] = None) -> F:
    """Record how long each call takes.

    Durations go to the ``funcops_call_duration_seconds`` histogram and the
    most recent one is kept on ``wrapper.last_duration`` (seconds). Failed
    calls are timed too.
    """
    metrics = resolve_metrics(metrics)
    name = callable_name(func)

    def _observe(wrapper: Any, started: float) -> None:
        wrapper.last_duration = time.perf_counter() - started
        if metrics is not None:
            metrics.calls.labels(operator="time_it", function=name).inc()
            metrics.call_duration.labels(function=name).observe(wrapper.last_duration)

    @functools.wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _observe(sync_wrapper, started)

    @functools.wraps(func)
    async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            _observe(async_wrapper, started)

    wrapper = async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper
    wrapper.last_duration = None
    return wrapper  # type: ignore[return-value]


def log_calls(func: Optional[F] = None, level: str = "info") -> Any:
    """Emit a structured log entry for every call.

    Each entry carries the function name, a shortened repr of the arguments,
    and the duration. Failures are logged at ``error`` and re-raised.

    Args:
        func: Function to wrap; omit to get a decorator
        level: Log method used for successful calls
    """
    if func is None:
        return lambda f: log_calls(f, level=level)

    if level.lower() not in _LEVELS:
        raise ValueError(f"unknown log level: {level}")
    log_method = getattr(logger, level.lower())
    name = getattr(func, "__qualname__", None) or callable_name(func)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        call_args = [_short_repr(a) for a in args]
        call_args.extend(f"{k}={_short_repr(v)}" for k, v in kwargs.items())
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            logger.error(
                "function_call_failed",
                function=name,
                args=call_args,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        log_method(
            "function_called",
            function=name,
            args=call_args,
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
            result=_short_repr(result),
        )
        return result

    return wrapper
