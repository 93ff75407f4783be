"""Constants for glock CLI."""

# Sentinel for "no limit" on --wait and --timeout
UNBOUNDED = -1

DEFAULT_LOCKFILE = "/tmp/glockfile"
DEFAULT_WAIT = 10  # seconds to wait for the lock file
DEFAULT_TIMEOUT = 60  # seconds before the command is killed

# Fixed polling interval between lock attempts (seconds)
RETRY_INTERVAL = 1.0

LOCK_FILE_MODE = 0o600

# Prefix on every status/error line
LOG_TAG = "glock"
