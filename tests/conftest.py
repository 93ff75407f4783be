"""Shared test fixtures for glock tests."""

import logging
import subprocess
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_glock_logger() -> Generator[None, None, None]:
    """Drop handlers the CLI attached to the glock logger during a test."""
    yield
    logger = logging.getLogger("glock")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    """Path for a lock file that doesn't exist yet."""
    return tmp_path / "glock.lock"


@pytest.fixture
def dead_pid() -> int:
    """PID of a process that has exited and been reaped."""
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    return proc.pid


@pytest.fixture
def live_pid() -> Generator[int, None, None]:
    """PID of a running process other than the test process."""
    proc = subprocess.Popen(["sleep", "60"])
    try:
        yield proc.pid
    finally:
        proc.kill()
        proc.wait()
