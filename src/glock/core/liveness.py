"""Liveness probes for lock owners.

A probe answers one question: is the process with this PID still running?
Only the platform primitive differs, so the lock store takes any object
implementing ``LivenessProber``.
"""

import os
import sys
from typing import Protocol

from ..errors import ProbeFailedError


class LivenessProber(Protocol):
    """Checks whether a process exists."""

    def is_alive(self, pid: int) -> bool:
        """Return True if ``pid`` is running.

        Raises:
            ProbeFailedError: If the answer cannot be determined
        """
        ...


class SignalProber:
    """POSIX probe using signal 0, which performs error checking only."""

    def is_alive(self, pid: int) -> bool:
        try:
            os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists but belongs to another user
            return True
        except OSError as e:
            raise ProbeFailedError(pid, str(e)) from e
        return True


class WindowsProber:
    """Windows probe using ``OpenProcess``."""

    SYNCHRONIZE = 0x100000
    ERROR_ACCESS_DENIED = 5
    ERROR_INVALID_PARAMETER = 87

    def is_alive(self, pid: int) -> bool:
        import ctypes

        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        handle = kernel32.OpenProcess(self.SYNCHRONIZE, False, pid)
        if handle:
            kernel32.CloseHandle(handle)
            return True

        code = kernel32.GetLastError()
        if code == self.ERROR_INVALID_PARAMETER:
            return False
        if code == self.ERROR_ACCESS_DENIED:
            return True
        raise ProbeFailedError(pid, f"OpenProcess failed with error {code}")


def default_prober() -> LivenessProber:
    """Get the probe for the running platform."""
    if sys.platform == "win32":
        return WindowsProber()
    return SignalProber()
