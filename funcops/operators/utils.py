"""Helpers shared by the operator modules."""

import functools
from typing import Any


def callable_name(func: Any) -> str:
    """Best label for ``func`` in logs and metrics.

    Plain functions use ``__name__``; ``functools.partial`` objects use the
    name of the function they wrap, and other callables their class name.
    """
    name = getattr(func, "__name__", None)
    if isinstance(name, str):
        return name
    if isinstance(func, functools.partial):
        return callable_name(func.func)
    return type(func).__name__
