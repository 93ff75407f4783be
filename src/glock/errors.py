"""glock exceptions."""


class GlockError(Exception):
    """Base exception for glock errors."""


class LockError(GlockError):
    """Claiming the lock file failed. The acquisition loop retries these."""


class LockHeldError(LockError):
    """Raised when the lock file belongs to a process that is still running."""

    def __init__(self, path: str, pid: int) -> None:
        super().__init__(f"lockfile {path} in use by another process (PID {pid})")
        self.path = path
        self.pid = pid


class LockCorruptError(LockError):
    """Raised when an existing lock file does not hold a valid PID."""

    def __init__(self, path: str, content: str) -> None:
        super().__init__(f"could not read owner PID from existing lockfile {path}: {content!r}")
        self.path = path
        self.content = content


class ProbeFailedError(LockError):
    """Raised when the owner's liveness cannot be determined."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"failed while probing process {pid}: {reason}")
        self.pid = pid


class LockIOError(LockError):
    """Transient filesystem failure while claiming the lock."""


class LockReleaseError(GlockError):
    """Raised when the lock file could not be removed."""


class AcquisitionTimeoutError(GlockError):
    """Raised when the lock could not be obtained within the wait budget."""

    def __init__(self, path: str, waited: int) -> None:
        super().__init__(f"could not obtain lockfile {path} after waiting {waited}s")
        self.path = path
        self.waited = waited


class ConfigError(GlockError):
    """Raised when the config file cannot be read or is invalid."""
