"""Execution outcome models for the process supervisor."""

from enum import Enum

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """How a supervised command finished."""

    SUCCEEDED = "succeeded"
    FAILED_TO_START = "failed_to_start"
    ERRORED = "errored"
    TIMED_OUT = "timed_out"


class ExecutionResult(BaseModel):
    """Result of one supervised run.

    Attributes:
        outcome: Final outcome
        returncode: Child exit status (negative for signal deaths), None if
            the child never started
        error: Human readable cause for any non-success outcome
        duration_ms: Wall-clock time from start to outcome
    """

    outcome: Outcome
    returncode: int | None = None
    error: str | None = None
    duration_ms: int = Field(default=0, description="Run time in ms")

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED
