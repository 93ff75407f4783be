"""glock CLI: run a command while holding a PID lock file."""

import logging
from pathlib import Path

import typer
from rich.console import Console

from glock import __version__

from .config import GlockConfig, load_config, write_config_template
from .constants import UNBOUNDED
from .core import LockFileStore, run_locked
from .errors import ConfigError, LockError
from .logging import configure_logging

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"glock {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="glock",
    help="Run a command while holding a lock file, killing it after a timeout.",
    add_completion=False,
)


def _resolve(
    config: GlockConfig,
    lockfile: Path | None,
    wait: int | None,
    timeout: int | None,
) -> tuple[Path, int, int]:
    """Apply CLI overrides on top of config values."""
    return (
        lockfile if lockfile is not None else config.lock.path,
        wait if wait is not None else config.lock.wait,
        timeout if timeout is not None else config.run.timeout,
    )


def _show_status(console: Console, lockfile: Path) -> None:
    """Print who holds the lock file, if anyone."""
    store = LockFileStore()
    try:
        record = store.read_owner(lockfile)
    except LockError as e:
        logger.error(str(e))
        raise typer.Exit(1) from None

    if record is None:
        console.print(f"{lockfile}: [green]free[/green]")
        return
    try:
        alive = store.prober.is_alive(record.pid)
    except LockError as e:
        logger.error(str(e))
        raise typer.Exit(1) from None
    if alive:
        console.print(f"{lockfile}: [yellow]held[/yellow] by PID {record.pid}")
    else:
        console.print(f"{lockfile}: [yellow]stale[/yellow] (PID {record.pid} is not running)")


@app.command(context_settings={"allow_interspersed_args": False})
def main(
    ctx: typer.Context,
    command: list[str] | None = typer.Argument(
        None,
        help="Command to run, followed by its arguments",
        show_default=False,
    ),
    timeout: int | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds to wait for the command to exit before killing it "
        "(-1 = wait forever) [default: 60]",
        show_default=False,
    ),
    lockfile: Path | None = typer.Option(
        None,
        "--lockfile",
        "-l",
        help="Lock file to acquire before running the command [default: /tmp/glockfile]",
        show_default=False,
    ),
    wait: int | None = typer.Option(
        None,
        "--wait",
        "-w",
        help="Seconds to wait for the lock file, retrying every second "
        "(-1 = retry forever) [default: 10]",
        show_default=False,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML config file with default settings",
    ),
    write_config: Path | None = typer.Option(
        None,
        "--write-config",
        help="Write a config template to this path and exit",
    ),
    status: bool = typer.Option(
        False,
        "--status",
        help="Show who holds the lock file and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Run COMMAND while holding a lock file, killing it after a timeout."""
    console = configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)

    if write_config is not None:
        path = write_config_template(write_config)
        console.print(f"[green]Created config template:[/green] {path}")
        raise typer.Exit()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error(str(e))
        raise typer.Exit(1) from None

    lock_path, wait_s, timeout_s = _resolve(config, lockfile, wait, timeout)

    if status:
        _show_status(console, lock_path)
        raise typer.Exit()

    for name, value in (("--wait", wait_s), ("--timeout", timeout_s)):
        if value < UNBOUNDED:
            logger.error(f"{name} must be -1 or a non-negative number of seconds, got {value}")
            raise typer.Exit(1)

    if not command:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    if not run_locked(lock_path, wait_s, timeout_s, command):
        raise typer.Exit(1)
