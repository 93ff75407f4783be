"""Tests for the lock acquisition loop."""

import logging
import os
import time
from pathlib import Path
from unittest import mock

import pytest

from glock.constants import UNBOUNDED
from glock.core.acquire import LockHandle, acquire
from glock.core.lock_store import LockFileStore
from glock.errors import (
    AcquisitionTimeoutError,
    LockCorruptError,
    LockHeldError,
    LockIOError,
    LockReleaseError,
    ProbeFailedError,
)


class FakeClock:
    """Monotonic clock advanced only by sleeping."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_store(*side_effects: Exception | None) -> mock.Mock:
    """Store whose try_claim raises/returns the given values in order."""
    store = mock.Mock(spec=LockFileStore)
    store.try_claim.side_effect = list(side_effects)
    return store


def held() -> LockHeldError:
    return LockHeldError("/tmp/glockfile", 100)


@pytest.mark.unit
class TestAcquire:
    """Tests for acquire with a fake clock."""

    def test_first_attempt_success_returns_handle(self, lock_path: Path) -> None:
        clock = FakeClock()
        store = make_store(None)

        handle = acquire(lock_path, 10, store, clock=clock, sleep=clock.sleep)

        assert isinstance(handle, LockHandle)
        assert handle.path == lock_path
        assert clock.sleeps == []

    def test_retries_every_second_until_success(self, lock_path: Path) -> None:
        clock = FakeClock()
        store = make_store(held(), held(), None)

        acquire(lock_path, 10, store, clock=clock, sleep=clock.sleep)

        assert store.try_claim.call_count == 3
        assert clock.sleeps == [1.0, 1.0]

    def test_times_out_after_wait_budget(self, lock_path: Path) -> None:
        """Attempts at t=0,1,2,3 then give up: no backoff, fixed interval."""
        clock = FakeClock()
        store = make_store(*[held()] * 10)

        with pytest.raises(AcquisitionTimeoutError) as exc_info:
            acquire(lock_path, 3, store, clock=clock, sleep=clock.sleep)

        assert exc_info.value.waited == 3
        assert store.try_claim.call_count == 4
        assert clock.sleeps == [1.0, 1.0, 1.0]

    def test_zero_wait_makes_single_attempt(self, lock_path: Path) -> None:
        clock = FakeClock()
        store = make_store(held())

        with pytest.raises(AcquisitionTimeoutError, match="after waiting 0s"):
            acquire(lock_path, 0, store, clock=clock, sleep=clock.sleep)

        assert store.try_claim.call_count == 1
        assert clock.sleeps == []

    def test_unbounded_wait_never_times_out(self, lock_path: Path) -> None:
        clock = FakeClock()
        store = make_store(*[held()] * 500, None)

        acquire(lock_path, UNBOUNDED, store, clock=clock, sleep=clock.sleep)

        assert store.try_claim.call_count == 501
        assert clock.sleeps == [1.0] * 500

    @pytest.mark.parametrize(
        "error",
        [
            LockCorruptError("/tmp/glockfile", "junk"),
            ProbeFailedError(100, "EINVAL"),
            LockIOError("disappeared"),
        ],
    )
    def test_every_lock_error_is_retried(self, lock_path: Path, error: Exception) -> None:
        clock = FakeClock()
        store = make_store(error, None)

        acquire(lock_path, 5, store, clock=clock, sleep=clock.sleep)

        assert store.try_claim.call_count == 2

    def test_failed_attempts_are_logged(
        self, lock_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Contention is visible to whoever watches the output."""
        caplog.set_level(logging.DEBUG, logger="glock")
        clock = FakeClock()
        store = make_store(held(), None)

        acquire(lock_path, 5, store, clock=clock, sleep=clock.sleep)

        messages = [r.getMessage() for r in caplog.records]
        assert any("lock file error" in m and "in use" in m for m in messages)
        assert any("waiting 1s to try again" in m for m in messages)

    def test_unexpected_errors_propagate(self, lock_path: Path) -> None:
        clock = FakeClock()
        store = make_store(RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            acquire(lock_path, 5, store, clock=clock, sleep=clock.sleep)


@pytest.mark.unit
class TestAcquireWithFiles:
    """acquire against real lock files."""

    def test_acquires_free_lock(self, lock_path: Path) -> None:
        handle = acquire(lock_path, 0)
        assert lock_path.read_text() == f"{os.getpid()}\n"
        handle.release()

    def test_stale_lock_reclaimed_without_waiting(self, lock_path: Path, dead_pid: int) -> None:
        """A dead owner's lock is taken over on the first attempt."""
        lock_path.write_text(f"{dead_pid}\n")
        sleep = mock.Mock()

        acquire(lock_path, 10, sleep=sleep)

        sleep.assert_not_called()
        assert lock_path.read_text() == f"{os.getpid()}\n"

    def test_corrupt_lock_times_out_and_is_kept(self, lock_path: Path) -> None:
        lock_path.write_text("corrupt\n")
        clock = FakeClock()

        with pytest.raises(AcquisitionTimeoutError):
            acquire(lock_path, 2, clock=clock, sleep=clock.sleep)

        assert lock_path.read_text() == "corrupt\n"

    @pytest.mark.slow
    def test_unbounded_wait_polls_about_once_per_second(
        self, lock_path: Path, live_pid: int
    ) -> None:
        """With a permanently held lock, attempts are ~1s apart, not a busy loop."""
        lock_path.write_text(f"{live_pid}\n")
        attempts: list[float] = []

        class StopWaiting(Exception):
            pass

        def sleep(seconds: float) -> None:
            attempts.append(time.monotonic())
            if len(attempts) >= 3:
                raise StopWaiting
            time.sleep(seconds)

        start = time.monotonic()
        with pytest.raises(StopWaiting):
            acquire(lock_path, UNBOUNDED, sleep=sleep)
        elapsed = time.monotonic() - start

        assert len(attempts) == 3
        assert elapsed < 2.5
        gaps = [b - a for a, b in zip(attempts, attempts[1:], strict=False)]
        assert all(0.9 <= gap < 1.5 for gap in gaps)


@pytest.mark.unit
class TestLockHandle:
    """Tests for LockHandle."""

    def test_context_manager_releases(self, lock_path: Path) -> None:
        with acquire(lock_path, 0):
            assert lock_path.exists()
        assert not lock_path.exists()

    def test_context_manager_releases_on_error(self, lock_path: Path) -> None:
        with pytest.raises(ValueError), acquire(lock_path, 0):
            raise ValueError("command blew up")
        assert not lock_path.exists()

    def test_release_is_idempotent(self, lock_path: Path) -> None:
        handle = acquire(lock_path, 0)
        handle.release()
        handle.release()
        assert handle.released is True

    def test_release_failure_is_raised_once(self, lock_path: Path) -> None:
        handle = acquire(lock_path, 0)
        lock_path.unlink()
        with pytest.raises(LockReleaseError):
            handle.release()
        handle.release()
