"""Run a command while holding the lock file."""

import logging
import shlex
from collections.abc import Sequence
from pathlib import Path

from ..constants import UNBOUNDED
from ..errors import AcquisitionTimeoutError, LockReleaseError
from ..models import ExecutionResult
from . import supervisor
from .acquire import acquire
from .lock_store import LockFileStore

logger = logging.getLogger(__name__)


def _format_budget(seconds: int) -> str:
    return "none" if seconds == UNBOUNDED else f"{seconds}s"


def _log_result(result: ExecutionResult) -> None:
    if result.succeeded:
        logger.info("successfully ran command")
    else:
        logger.error(f"{result.error} ({result.outcome.value})")


def run_locked(
    lockfile: Path,
    wait: int,
    timeout: int,
    command: Sequence[str],
    store: LockFileStore | None = None,
) -> bool:
    """Acquire ``lockfile``, run ``command`` under ``timeout``, release.

    Args:
        lockfile: Lock file path
        wait: Seconds to wait for the lock, or UNBOUNDED
        timeout: Seconds before the command is killed, or UNBOUNDED
        command: Executable followed by its arguments
        store: Lock store (default: one for this process)

    Returns:
        True only if the lock was obtained and the command succeeded
    """
    logger.info(f"obtaining lockfile: {lockfile}")
    try:
        handle = acquire(lockfile, wait, store)
    except AcquisitionTimeoutError as e:
        logger.error(str(e))
        return False
    logger.info(f"obtained lockfile: {lockfile}")

    try:
        logger.info(f"running command (timeout: {_format_budget(timeout)}): {shlex.join(command)}")
        result = supervisor.run(command, timeout)
        _log_result(result)
    finally:
        try:
            handle.release()
            logger.info(f"released lockfile: {lockfile}")
        except LockReleaseError as e:
            logger.error(str(e))

    return result.succeeded
