"""Configuration models and loading for anycli."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from anycli.tools.discovery import (
    BUILD_MAX_DEPTH,
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_DEPTH,
    DEFAULT_PROGRESS_INTERVAL,
)
from anycli.tools.process import DEFAULT_TIMEOUT


class DiscoveryConfig(BaseModel):
    """How the help tree of the wrapped command is discovered."""

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)  # Interactive serve
    build_depth: int = Field(default=BUILD_MAX_DEPTH, ge=0)  # Cache build
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    help_args: list[str] = Field(default_factory=lambda: ["--help"])
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)  # Seconds per help call
    progress_interval: int = Field(default=DEFAULT_PROGRESS_INTERVAL, ge=1)

    @field_validator("help_args")
    @classmethod
    def validate_help_args(cls, v: list[str]) -> list[str]:
        """Ensure there is something to ask for help with."""
        if not v:
            raise ValueError("At least one help argument is required")
        return v


class ServerConfig(BaseModel):
    """How tools are exposed to clients."""

    name: str | None = None  # Defaults to "<command>-cli-wrapper"
    version: str = "1.0.0"
    execute_tool: bool = True  # Register the free-text "execute" tool
    call_timeout: float = Field(default=60.0, gt=0)  # Seconds per tool call

    def server_name(self, command: str) -> str:
        """Get the advertised server name for a command."""
        return self.name or f"{command}-cli-wrapper"


class AnycliConfig(BaseModel):
    """Complete configuration."""

    command: str | None = None
    cache_file: str | None = None
    cache_dir: str | None = None  # Where relative cache files live (default: cwd)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str | None) -> str | None:
        """Ensure command is not blank."""
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Command cannot be empty")
        return v.strip()


def load_config(path: Path) -> AnycliConfig:
    """Load and validate a TOML configuration file.

    Args:
        path: Path to the TOML config file

    Returns:
        Validated AnycliConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        tomllib.TOMLDecodeError: If TOML is malformed
        pydantic.ValidationError: If config doesn't match schema
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return AnycliConfig.model_validate(data)


def get_default_config_dir() -> Path:
    """Get the default configuration directory (~/.config/anycli)."""
    return Path.home() / ".config" / "anycli"


def get_default_config_path() -> Path:
    """Get the path of the default config file."""
    return get_default_config_dir() / "config.toml"


def load_default_config() -> AnycliConfig:
    """Load the default config file if it exists, otherwise defaults."""
    path = get_default_config_path()
    if path.exists():
        return load_config(path)
    return AnycliConfig()
