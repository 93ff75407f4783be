"""Configuration management for glock."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import DEFAULT_LOCKFILE, DEFAULT_TIMEOUT, DEFAULT_WAIT, UNBOUNDED
from .errors import ConfigError


class LockConfig(BaseModel):
    """Configuration for lock acquisition."""

    path: Path = Field(default=Path(DEFAULT_LOCKFILE), description="Lock file path")
    wait: int = Field(
        default=DEFAULT_WAIT,
        ge=UNBOUNDED,
        description="Seconds to wait for the lock file (-1 = forever)",
    )


class RunConfig(BaseModel):
    """Configuration for the supervised command."""

    timeout: int = Field(
        default=DEFAULT_TIMEOUT,
        ge=UNBOUNDED,
        description="Seconds before the command is killed (-1 = never)",
    )


class GlockConfig(BaseModel):
    """Root configuration for glock."""

    lock: LockConfig = Field(default_factory=LockConfig)
    run: RunConfig = Field(default_factory=RunConfig)


def load_config(config_path: Path | None = None) -> GlockConfig:
    """Load config from a TOML file.

    Args:
        config_path: Path to config file, or None for built-in defaults

    Returns:
        Loaded configuration

    Raises:
        ConfigError: If the file can't be read or fails validation
    """
    if config_path is None:
        return GlockConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"could not read config {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {config_path}: {e}") from e
    try:
        return GlockConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e


def write_config_template(config_path: Path) -> Path:
    """Write default config template.

    Args:
        config_path: Where to write the file

    Returns:
        Path to the written config file
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    template = {
        "lock": {"path": DEFAULT_LOCKFILE, "wait": DEFAULT_WAIT},
        # Use -1 to wait for the command forever
        "run": {"timeout": DEFAULT_TIMEOUT},
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
