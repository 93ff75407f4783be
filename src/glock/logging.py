"""Logging configuration for glock CLI."""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler

from .constants import LOG_TAG


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


class _BelowLevel(logging.Filter):
    """Pass only records below a level."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


class _TaggedHandler(RichHandler):
    """RichHandler that prints each record as one unpadded, unwrapped line.

    The default handler lays records out in a table sized to the terminal,
    which pads short lines and folds long ones without the tag.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.console.print(self.render_message(record, message), soft_wrap=True)
        except Exception:
            self.handleError(record)


def _make_handler(console: Console, verbose: bool) -> RichHandler:
    handler = _TaggedHandler(console=console, show_time=False, show_level=False)
    fmt = f"{LOG_TAG}: %(message)s"
    if verbose:
        fmt = f"{LOG_TAG}: [%(name)s] %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
) -> Console:
    """Configure the glock logger based on CLI options.

    Status lines go to stdout, warnings and errors to stderr, both
    prefixed with the tool name.

    Args:
        verbosity: Number of -v flags (0=normal, 1+=debug)
        quiet: Suppress non-error output (takes precedence over verbosity)
        no_color: Disable colored output

    Returns:
        Console used for stdout output
    """
    if quiet:
        level = LogLevel.QUIET
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    out_console = Console(no_color=no_color)
    err_console = Console(stderr=True, no_color=no_color)

    verbose = level == LogLevel.VERBOSE
    out_handler = _make_handler(out_console, verbose)
    out_handler.addFilter(_BelowLevel(logging.WARNING))
    err_handler = _make_handler(err_console, verbose)
    err_handler.setLevel(logging.WARNING)

    # Handlers live on the glock logger; repeated calls replace them
    logger = logging.getLogger("glock")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(out_handler)
    logger.addHandler(err_handler)
    logger.setLevel(level)

    return out_console
