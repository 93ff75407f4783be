"""glock: run a command under a PID lock file with a deadline."""

__version__ = "0.1.0"
