"""Progress reporting for long batches of calls."""

import functools
import sys
import threading
from typing import Callable, Optional, TextIO

from ..config import get_config
from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from .utils import callable_name

logger = get_logger(__name__)


def dot_every(
    func: Optional[Callable] = None,
    n: Optional[int] = None,
    marker: Optional[str] = None,
    stream: Optional[TextIO] = None,
    metrics: Optional[OperatorMetrics] = None,
) -> Callable:
    """
    Write a progress marker every ``n`` calls to ``func``.

    The wrapper keeps its own call counter. After N calls exactly N // n
    markers have been written, and every call was forwarded to ``func``
    with its arguments and result untouched. Calls that raise still count.

    Args:
        func: Function to wrap; omit to get a decorator
        n: Calls per marker (default: FUNCOPS_DOT_INTERVAL)
        marker: Text written each time (default: FUNCOPS_DOT_MARKER)
        stream: Where markers go; resolved to sys.stdout at call time if None
        metrics: Optional metrics object, defaults to the global one
    """
    if func is None:
        return lambda f: dot_every(f, n=n, marker=marker, stream=stream, metrics=metrics)

    config = get_config()
    interval = config.dot_interval if n is None else n
    if interval < 1:
        raise ValueError(f"n must be >= 1, got {interval}")
    text = config.dot_marker if marker is None else marker
    metrics = resolve_metrics(metrics)
    name = callable_name(func)

    lock = threading.Lock()
    calls = 0

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        nonlocal calls
        with lock:
            calls += 1
            count = calls

        if count % interval == 0:
            out = stream if stream is not None else sys.stdout
            out.write(text)
            out.flush()
            logger.debug("dot_every_marker", function=name, calls=count)
            if metrics is not None:
                metrics.progress_markers.labels(function=name).inc()

        if metrics is not None:
            metrics.calls.labels(operator="dot_every", function=name).inc()
        return func(*args, **kwargs)

    return wrapper
