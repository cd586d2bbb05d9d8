"""Value types returned by function operators."""

from .results import QuietResult, SafeResult

__all__ = ["QuietResult", "SafeResult"]
