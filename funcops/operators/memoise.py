"""Memoisation of pure functions.

``memoise`` caches a function's output keyed by the *value* of its
arguments, so two equal lists hit the same entry even though they are
different objects. The cache is unbounded unless ``max_size`` is set, in
which case the least recently used entry is evicted first.
"""

import functools
import pickle
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional

from ..config import get_config
from ..logging import get_logger
from ..metrics import OperatorMetrics, resolve_metrics
from .utils import callable_name

logger = get_logger(__name__)

_MEMOISED_ATTR = "__memoised__"


class UncacheableArgumentError(TypeError):
    """Raised when an argument can be neither hashed nor pickled."""


class MemoCacheStats:
    """Counters for one memoised function."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.uncacheable = 0

    def reset(self):
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.uncacheable = 0

    def to_dict(self) -> Dict[str, float]:
        lookups = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "uncacheable": self.uncacheable,
            "hit_rate": self.hits / lookups if lookups > 0 else 0.0,
        }


def _freeze(value: Any) -> Hashable:
    """Convert ``value`` into a hashable key that compares by value.

    Containers are tagged with their type so ``[1, 2]`` and ``(1, 2)`` stay
    distinct keys.
    """
    if isinstance(value, (list, tuple)):
        return (type(value).__name__, tuple(_freeze(v) for v in value))
    if isinstance(value, dict):
        return ("dict", frozenset((_freeze(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (set, frozenset)):
        return (type(value).__name__, frozenset(_freeze(v) for v in value))
    try:
        hash(value)
    except TypeError:
        # Arbitrary unhashable object: fall back to its serialised value
        try:
            payload = pickle.dumps(value)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise UncacheableArgumentError(
                f"cannot build a cache key from {type(value).__qualname__}: {e}"
            ) from e
        return ("pickle", type(value).__qualname__, payload)
    return value


def freeze_args(args: tuple, kwargs: dict) -> Hashable:
    """Build the cache key for one call; keyword order does not matter."""
    return (_freeze(args), frozenset((k, _freeze(v)) for k, v in kwargs.items()))


def memoise(
    func: Optional[Callable] = None,
    max_size: Optional[int] = None,
    metrics: Optional[OperatorMetrics] = None,
) -> Callable:
    """
    Cache ``func``'s results by argument value.

    Can be applied directly (``memoise(f)``, ``@memoise``) or with options
    (``@memoise(max_size=128)``).

    Calls whose arguments can be neither hashed nor pickled (dict key
    views, unhashable objects holding locks or open files) are passed
    straight to ``func`` and never cached.

    Args:
        func: Pure function to memoise
        max_size: Max cached entries, None for unbounded
            (default: FUNCOPS_MEMO_MAX_SIZE)
        metrics: Optional metrics object, defaults to the global one

    Returns:
        Memoised function exposing ``forget()`` and ``cache_info()``
    """
    if func is None:
        return lambda f: memoise(f, max_size=max_size, metrics=metrics)

    if max_size is None:
        max_size = get_config().memo_max_size
    if max_size is not None and max_size < 1:
        raise ValueError(f"max_size must be None or >= 1, got {max_size}")

    metrics = resolve_metrics(metrics)
    cache: "OrderedDict[Hashable, Any]" = OrderedDict()
    stats = MemoCacheStats()
    lock = threading.Lock()
    name = callable_name(func)

    def _count(event: str) -> None:
        if metrics is not None:
            metrics.cache_events.labels(function=name, event=event).inc()

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            key = freeze_args(args, kwargs)
        except UncacheableArgumentError as e:
            with lock:
                stats.uncacheable += 1
            _count("uncacheable")
            logger.debug("memoise_uncacheable_args", function=name, reason=str(e))
            return func(*args, **kwargs)

        with lock:
            if key in cache:
                cache.move_to_end(key)
                stats.hits += 1
                _count("hit")
                return cache[key]
            stats.misses += 1
        _count("miss")
        logger.debug("memoise_cache_miss", function=name, cache_size=len(cache))

        # Exceptions propagate and nothing is cached
        result = func(*args, **kwargs)

        with lock:
            cache[key] = result
            cache.move_to_end(key)
            if max_size is not None and len(cache) > max_size:
                cache.popitem(last=False)
                stats.evictions += 1
                _count("eviction")
                logger.debug("memoise_cache_evicted", function=name, cache_size=len(cache))
        return result

    def forget() -> bool:
        """Clear the cache. Returns True if any entry was removed."""
        with lock:
            removed = len(cache)
            cache.clear()
        logger.info("memoise_cache_cleared", function=name, entries_removed=removed)
        return removed > 0

    def cache_info() -> Dict[str, Any]:
        """Return hit/miss statistics and the current cache size."""
        with lock:
            info: Dict[str, Any] = stats.to_dict()
            info["size"] = len(cache)
        info["max_size"] = max_size
        return info

    wrapper.forget = forget
    wrapper.cache_info = cache_info
    setattr(wrapper, _MEMOISED_ATTR, True)
    return wrapper


def is_memoised(func: Callable) -> bool:
    """True when ``func`` was produced by ``memoise``."""
    return getattr(func, _MEMOISED_ATTR, False) is True
