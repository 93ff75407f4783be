"""Process supervisor for the protected command.

Runs the command with this process's stdin/stdout/stderr and races its
exit against an optional deadline. If the deadline wins, the child is
killed and reaped.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Sequence

from ..constants import UNBOUNDED
from ..models import ExecutionResult, Outcome

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _exit_result(returncode: int, start: float) -> ExecutionResult:
    """Map a natural exit to SUCCEEDED or ERRORED."""
    if returncode == 0:
        return ExecutionResult(
            outcome=Outcome.SUCCEEDED,
            returncode=0,
            duration_ms=_elapsed_ms(start),
        )
    if returncode < 0:
        error = f"command was terminated by signal {-returncode}"
    else:
        error = f"command exited with status {returncode}"
    return ExecutionResult(
        outcome=Outcome.ERRORED,
        returncode=returncode,
        error=error,
        duration_ms=_elapsed_ms(start),
    )


async def _race(proc: asyncio.subprocess.Process, timeout: float) -> bool:
    """Wait for the child to exit or the deadline to pass.

    Returns:
        True if the child exited first, False if the deadline passed first
    """
    exited = asyncio.create_task(proc.wait(), name="child-exit")
    deadline = asyncio.create_task(asyncio.sleep(timeout), name="deadline")

    done, pending = await asyncio.wait({exited, deadline}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    return exited in done


async def supervise(command: Sequence[str], timeout: int = UNBOUNDED) -> ExecutionResult:
    """Run ``command`` and wait for it, killing it after ``timeout`` seconds.

    Args:
        command: Executable followed by its arguments
        timeout: Seconds before the child is killed, or UNBOUNDED

    Returns:
        ExecutionResult describing the outcome
    """
    start = time.monotonic()
    if not command:
        return ExecutionResult(outcome=Outcome.FAILED_TO_START, error="no command given")

    try:
        # stdin/stdout/stderr default to ours: pass-through
        proc = await asyncio.create_subprocess_exec(*command)
    except OSError as e:
        return ExecutionResult(
            outcome=Outcome.FAILED_TO_START,
            error=f"could not start command: {e}",
            duration_ms=_elapsed_ms(start),
        )
    logger.debug(f"command started with PID {proc.pid}")

    try:
        return await _wait(proc, timeout, start)
    except BaseException:
        # Cancelled or interrupted: the child must be gone before anyone releases the lock
        if proc.returncode is None:
            logger.warning(f"interrupted, killing command (PID {proc.pid})")
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
        raise


async def _wait(proc: asyncio.subprocess.Process, timeout: int, start: float) -> ExecutionResult:
    """Wait for ``proc``, killing it once ``timeout`` passes."""
    if timeout == UNBOUNDED:
        return _exit_result(await proc.wait(), start)

    if await _race(proc, timeout):
        assert proc.returncode is not None
        return _exit_result(proc.returncode, start)

    try:
        proc.kill()
    except ProcessLookupError:
        # Exited in the gap between the deadline firing and the kill
        return _exit_result(await proc.wait(), start)
    except OSError as e:
        return ExecutionResult(
            outcome=Outcome.FAILED_TO_START,
            error=f"could not kill command: {e}",
            duration_ms=_elapsed_ms(start),
        )

    returncode = await proc.wait()
    return ExecutionResult(
        outcome=Outcome.TIMED_OUT,
        returncode=returncode,
        error=f"command took longer than {timeout}s and was killed",
        duration_ms=_elapsed_ms(start),
    )


def run(command: Sequence[str], timeout: int = UNBOUNDED) -> ExecutionResult:
    """Blocking wrapper around ``supervise``."""
    return asyncio.run(supervise(command, timeout))
