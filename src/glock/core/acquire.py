"""Lock acquisition loop.

Polls the lock store at a fixed interval until the lock is claimed or the
wait budget runs out. There is no backoff and no queueing: whichever
waiter claims the file first wins.
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType

from ..constants import RETRY_INTERVAL, UNBOUNDED
from ..errors import AcquisitionTimeoutError, LockError
from .lock_store import LockFileStore

logger = logging.getLogger(__name__)


class LockHandle:
    """A held lock. Releasing it removes the lock file.

    Use as a context manager so the file is removed on every exit path.
    """

    def __init__(self, store: LockFileStore, path: Path) -> None:
        self.store = store
        self.path = path
        self.released = False

    def release(self) -> None:
        """Remove the lock file. Calling again is a no-op.

        Raises:
            LockReleaseError: If the file couldn't be removed
        """
        if self.released:
            return
        self.released = True
        self.store.release(self.path)

    def __enter__(self) -> "LockHandle":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def acquire(
    path: Path,
    wait: int,
    store: LockFileStore | None = None,
    *,
    interval: float = RETRY_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> LockHandle:
    """Acquire the lock file, retrying until ``wait`` seconds have passed.

    Args:
        path: Lock file path
        wait: Seconds to keep retrying, or UNBOUNDED to retry forever
        store: Lock store to claim through (default: one for this process)
        interval: Seconds to sleep between attempts
        clock: Monotonic time source
        sleep: Sleep function

    Returns:
        Handle for the held lock

    Raises:
        AcquisitionTimeoutError: If the wait budget is exhausted
    """
    store = store or LockFileStore()
    start = clock()

    while True:
        try:
            store.try_claim(path)
            return LockHandle(store, path)
        except LockError as e:
            logger.warning(f"lock file error: {e}")

        if wait != UNBOUNDED and clock() - start >= wait:
            raise AcquisitionTimeoutError(str(path), wait)

        logger.warning(f"waiting {interval:g}s to try again")
        sleep(interval)
