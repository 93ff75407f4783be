"""Lock file store.

Creates, inspects, reclaims and removes the PID lock file. Exclusivity
comes only from atomic file creation (O_CREAT | O_EXCL); the PID inside
the file is used to detect stale locks left by dead owners.
"""

import contextlib
import logging
import os
from pathlib import Path

from ..constants import LOCK_FILE_MODE
from ..errors import LockHeldError, LockIOError, LockReleaseError
from ..models import LockRecord
from .liveness import LivenessProber, default_prober

logger = logging.getLogger(__name__)


class LockFileStore:
    """Claims and releases lock files on behalf of one owner PID."""

    def __init__(self, prober: LivenessProber | None = None, pid: int | None = None) -> None:
        self.prober = prober or default_prober()
        self.pid = pid if pid is not None else os.getpid()

    def try_claim(self, path: Path) -> None:
        """Claim the lock file at ``path`` for this store's PID.

        If the file already exists and its owner is dead, the stale file is
        removed and creation is attempted once more.

        Args:
            path: Lock file path

        Raises:
            LockHeldError: If a live process owns the lock
            LockCorruptError: If the existing file holds no valid PID
            ProbeFailedError: If the owner's liveness can't be determined
            LockIOError: On transient filesystem failures
        """
        if self._try_atomic_create(path):
            return

        self._reclaim_stale(path)

        if not self._try_atomic_create(path):
            # Another process re-created it between our unlink and create
            raise LockIOError(f"lockfile {path} was re-created while reclaiming it")

    def read_owner(self, path: Path) -> LockRecord | None:
        """Read the owner recorded in a lock file.

        Returns:
            LockRecord, or None if the file doesn't exist

        Raises:
            LockCorruptError: If content isn't a valid PID
            LockIOError: If the file can't be read
        """
        try:
            content = path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LockIOError(f"could not read existing lockfile {path}: {e}") from e
        return LockRecord.parse(content, str(path))

    def release(self, path: Path) -> None:
        """Remove the lock file.

        Raises:
            LockReleaseError: If the file is missing or can't be removed
        """
        try:
            path.unlink()
        except OSError as e:
            raise LockReleaseError(f"could not remove lockfile {path}: {e}") from e

    def _try_atomic_create(self, path: Path) -> bool:
        """Attempt atomic lock file creation.

        Returns:
            True if the lock was created, False if the file already exists

        Raises:
            LockIOError: If creation or the PID write fails
        """
        try:
            fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, LOCK_FILE_MODE)
        except FileExistsError:
            return False
        except OSError as e:
            raise LockIOError(f"could not create lockfile {path}: {e}") from e

        payload = LockRecord(pid=self.pid).render().encode()
        try:
            try:
                os.write(fd, payload)
            finally:
                os.close(fd)
        except OSError as e:
            # Don't leave an empty file behind; it would read as corrupt
            with contextlib.suppress(OSError):
                path.unlink()
            raise LockIOError(f"could not write pid to lockfile {path}: {e}") from e
        return True

    def _reclaim_stale(self, path: Path) -> None:
        """Remove ``path`` if its owner is dead, otherwise raise why not."""
        record = self.read_owner(path)
        if record is None:
            # Released between our create attempt and the read
            raise LockIOError(f"lockfile {path} disappeared while checking its owner")

        if self.prober.is_alive(record.pid):
            raise LockHeldError(str(path), record.pid)

        logger.info(f"removing stale lockfile {path} (PID {record.pid} is not running)")
        try:
            path.unlink()
        except FileNotFoundError:
            # A concurrent reclaimer got there first; fall through to the retry
            logger.debug(f"stale lockfile {path} already removed")
        except OSError as e:
            raise LockIOError(f"could not remove stale lockfile {path}: {e}") from e
