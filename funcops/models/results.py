"""Pydantic models for values produced by wrapped calls."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SafeResult(BaseModel):
    """Outcome of a call made through ``safely``.

    Exactly one side is meaningful: ``error is None`` means the call
    succeeded and ``result`` holds its value (which may itself be None).
    """

    result: Any = Field(None, description="Return value, None on failure")
    error: Optional[Exception] = Field(None, description="Raised exception, None on success")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def ok(self) -> bool:
        """True when the call returned normally."""
        return self.error is None

    @property
    def error_type(self) -> Optional[str]:
        """Class name of the captured exception, None on success."""
        return type(self.error).__name__ if self.error is not None else None

    @property
    def error_message(self) -> Optional[str]:
        """Message of the captured exception, None on success."""
        return str(self.error) if self.error is not None else None

    def unwrap(self) -> Any:
        """Return the result, re-raising the captured error if there is one."""
        if self.error is not None:
            raise self.error
        return self.result


class QuietResult(BaseModel):
    """Return value of a call made through ``quietly`` plus everything it printed, warned or logged."""

    result: Any = None
    output: str = Field("", description="Text written to stdout during the call")
    warnings: List[str] = Field(default_factory=list, description="Warning messages raised")
    logs: List[str] = Field(default_factory=list, description="Log messages emitted")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
