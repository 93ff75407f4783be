"""Pydantic data models for glock.

- LockRecord: the owner PID stored in a lock file
- Outcome, ExecutionResult: what happened to the supervised command
"""

from .lock import LockRecord
from .outcome import ExecutionResult, Outcome

__all__ = [
    "ExecutionResult",
    "LockRecord",
    "Outcome",
]
