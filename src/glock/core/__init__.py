"""Core logic for glock.

- liveness: is-this-PID-running probes
- lock_store: lock file creation, stale reclamation and removal
- acquire: fixed-interval acquisition loop
- supervisor: deadline-bounded command execution
- runner: acquire, run, release
"""

from .acquire import LockHandle, acquire
from .liveness import LivenessProber, SignalProber, WindowsProber, default_prober
from .lock_store import LockFileStore
from .runner import run_locked
from .supervisor import run, supervise

__all__ = [
    "LivenessProber",
    "LockFileStore",
    "LockHandle",
    "SignalProber",
    "WindowsProber",
    "acquire",
    "default_prober",
    "run",
    "run_locked",
    "supervise",
]
