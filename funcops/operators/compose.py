"""Operators that build new functions out of existing ones."""

import functools
from typing import Any, Callable

from .utils import callable_name


def _identity(x: Any) -> Any:
    return x


def compose(*funcs: Callable) -> Callable:
    """
    Pipe the output of each function into the next, left to right.

    ``compose(parse, validate, save)(raw)`` runs ``save(validate(parse(raw)))``.
    Only the first function may take several arguments; the rest receive a
    single value.

    Args:
        *funcs: Functions in the order they run

    Returns:
        The pipeline, or a one-argument identity when no functions are given
    """
    if not funcs:
        return _identity

    head, tail = funcs[0], funcs[1:]

    def pipeline(*args, **kwargs):
        value = head(*args, **kwargs)
        for step in tail:
            value = step(value)
        return value

    pipeline.__name__ = "_then_".join(callable_name(f) for f in funcs)
    return pipeline


def negate(predicate: Callable[..., Any]) -> Callable[..., bool]:
    """Flip the truth value of ``predicate``."""

    @functools.wraps(predicate)
    def negated(*args, **kwargs) -> bool:
        return not predicate(*args, **kwargs)

    return negated


def all_of(*predicates: Callable[..., Any]) -> Callable[..., bool]:
    """
    Combine predicates with logical AND.

    Evaluation stops at the first predicate that fails. With no predicates
    the result is always True.
    """

    def combined(*args, **kwargs) -> bool:
        return all(p(*args, **kwargs) for p in predicates)

    return combined


def any_of(*predicates: Callable[..., Any]) -> Callable[..., bool]:
    """
    Combine predicates with logical OR.

    Evaluation stops at the first predicate that holds. With no predicates
    the result is always False.
    """

    def combined(*args, **kwargs) -> bool:
        return any(p(*args, **kwargs) for p in predicates)

    return combined
