"""
Delay operators for rate-limiting calls to slow or shared resources.

``delay_by`` always sleeps a fixed amount before each call; ``throttle``
only sleeps as long as needed to keep a minimum interval between calls.
"""

import asyncio
import functools
import inspect
import threading
import time
from typing import Callable, Optional

from ..config import get_config
from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from .utils import callable_name

logger = get_logger(__name__)


def _check_seconds(name: str, value: float) -> float:
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return float(value)


def delay_by(
    func: Optional[Callable] = None,
    delay: Optional[float] = None,
    metrics: Optional[OperatorMetrics] = None,
) -> Callable:
    """
    Sleep ``delay`` seconds before every call to ``func``.

    Args:
        func: Function to wrap (sync or async); omit to get a decorator
        delay: Seconds to wait (default: FUNCOPS_DEFAULT_DELAY)
        metrics: Optional metrics object, defaults to the global one

    Returns:
        Function with the same result as ``func``, blocked for ``delay`` first

    Example:
        @delay_by(delay=0.5)
        def fetch(url):
            return requests.get(url)
    """
    if func is None:
        return lambda f: delay_by(f, delay=delay, metrics=metrics)

    seconds = _check_seconds("delay", get_config().default_delay if delay is None else delay)
    metrics = resolve_metrics(metrics)
    name = callable_name(func)

    def _record() -> None:
        if metrics is not None:
            metrics.calls.labels(operator="delay_by", function=name).inc()
            metrics.delay_seconds.labels(function=name).inc(seconds)

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        _record()
        time.sleep(seconds)
        return func(*args, **kwargs)

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        _record()
        await asyncio.sleep(seconds)
        return await func(*args, **kwargs)

    if inspect.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper


def throttle(
    func: Optional[Callable] = None,
    interval: Optional[float] = None,
    metrics: Optional[OperatorMetrics] = None,
) -> Callable:
    """
    Ensure at least ``interval`` seconds pass between the starts of calls.

    The first call runs immediately; later calls only wait for whatever is
    left of the interval since the previous call started.

    Args:
        func: Function to wrap; omit to get a decorator
        interval: Minimum seconds between calls (default: FUNCOPS_DEFAULT_DELAY)
        metrics: Optional metrics object, defaults to the global one
    """
    if func is None:
        return lambda f: throttle(f, interval=interval, metrics=metrics)

    seconds = _check_seconds(
        "interval", get_config().default_delay if interval is None else interval
    )
    metrics = resolve_metrics(metrics)
    name = callable_name(func)
    lock = threading.Lock()
    last_start: Optional[float] = None

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        nonlocal last_start
        with lock:
            if last_start is not None:
                wait = seconds - (time.monotonic() - last_start)
                if wait > 0:
                    logger.debug("throttle_waiting", function=name, wait_seconds=wait)
                    if metrics is not None:
                        metrics.delay_seconds.labels(function=name).inc(wait)
                    time.sleep(wait)
            last_start = time.monotonic()

        if metrics is not None:
            metrics.calls.labels(operator="throttle", function=name).inc()
        return func(*args, **kwargs)

    return wrapper
