"""
Chouten CLI Configuration Management.

Handles loading and validating configuration from various sources:
- Default values
- Configuration file (TOML)
- Environment variables
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

from chouten_cli import __version__
from chouten_cli.cli.error_handler import ConfigurationError


# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "chouten"
DEFAULT_CONFIG_FILE = "config.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ValidationError:
    """Validation error for configuration."""
    field: str
    message: str
    severity: str  # "error" or "warning"

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.field}: {self.message}"


@dataclass
class HttpConfig:
    """Configuration for requests made on behalf of plugins."""

    # None waits forever, like the plugin's own view of a blocking call
    timeout: Optional[float] = None

    follow_redirects: bool = True
    user_agent: str = f"chouten/{__version__}"

    # TLS certificate verification
    verify: bool = True


@dataclass
class RuntimeConfig:
    """Configuration for the embedded JavaScript runtime."""

    # Upper bound on promise jobs drained per invocation (0 = unbounded)
    max_pending_jobs: int = 0

    # Echo plugin console.* calls to stderr
    console_output: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    file: Optional[Path] = None


@dataclass
class ChoutenConfig:
    """Main configuration container for Chouten CLI."""

    config_dir: Path = DEFAULT_CONFIG_DIR

    # Sub-configurations
    http: HttpConfig = field(default_factory=HttpConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(
    config_path: Optional[Path] = None,
    env_prefix: str = "CHOUTEN_"
) -> ChoutenConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file
    3. Default values

    Args:
        config_path: Path to config file (default: ~/.config/chouten/config.toml)
        env_prefix: Prefix for environment variables

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If the file or an environment value is malformed
    """
    config = ChoutenConfig()

    # Determine config file path
    if config_path is None:
        env_config_dir = os.environ.get(f"{env_prefix}CONFIG_DIR")
        if env_config_dir:
            config.config_dir = Path(env_config_dir)
        config_path = config.config_dir / DEFAULT_CONFIG_FILE

    if config_path.exists():
        config = _load_from_file(config_path, config)

    # Override with environment variables
    config = _load_from_env(config, env_prefix)

    return config


def _load_from_file(path: Path, config: ChoutenConfig) -> ChoutenConfig:
    """Load configuration from a TOML file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(
            f"Could not load config file: {e}",
            details={"path": str(path)},
        ) from e

    for section in ("http", "runtime", "logging"):
        values = data.get(section, {})
        if not isinstance(values, dict):
            raise ConfigurationError(
                f"Section [{section}] must be a table",
                details={"path": str(path)},
            )
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    if isinstance(config.logging.file, str):
        config.logging.file = Path(config.logging.file)

    return config


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _load_from_env(config: ChoutenConfig, prefix: str) -> ChoutenConfig:
    """Load configuration from environment variables."""

    # HTTP settings
    if env_val := os.environ.get(f"{prefix}HTTP_TIMEOUT"):
        try:
            config.http.timeout = float(env_val)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid number for {prefix}HTTP_TIMEOUT: {env_val!r}"
            ) from e
    if env_val := os.environ.get(f"{prefix}FOLLOW_REDIRECTS"):
        config.http.follow_redirects = _parse_bool(f"{prefix}FOLLOW_REDIRECTS", env_val)
    if env_val := os.environ.get(f"{prefix}USER_AGENT"):
        config.http.user_agent = env_val
    if env_val := os.environ.get(f"{prefix}VERIFY_TLS"):
        config.http.verify = _parse_bool(f"{prefix}VERIFY_TLS", env_val)

    # Runtime settings
    if env_val := os.environ.get(f"{prefix}MAX_PENDING_JOBS"):
        try:
            config.runtime.max_pending_jobs = int(env_val)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid integer for {prefix}MAX_PENDING_JOBS: {env_val!r}"
            ) from e
    if env_val := os.environ.get(f"{prefix}CONSOLE_OUTPUT"):
        config.runtime.console_output = _parse_bool(f"{prefix}CONSOLE_OUTPUT", env_val)

    # Logging settings
    if env_val := os.environ.get(f"{prefix}LOG_LEVEL"):
        config.logging.level = env_val.upper()
    if env_val := os.environ.get(f"{prefix}LOG_FILE"):
        config.logging.file = Path(env_val)

    return config


def validate_config(config: ChoutenConfig) -> list[ValidationError]:
    """
    Validate configuration values.

    Returns:
        List of validation errors and warnings
    """
    errors: list[ValidationError] = []

    timeout = config.http.timeout
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            errors.append(ValidationError(
                field="http.timeout",
                message="Must be a number of seconds",
                severity="error",
            ))
        elif timeout <= 0:
            errors.append(ValidationError(
                field="http.timeout",
                message="Must be greater than zero",
                severity="error",
            ))

    if not isinstance(config.http.user_agent, str) or not config.http.user_agent:
        errors.append(ValidationError(
            field="http.user_agent",
            message="Must be a non-empty string",
            severity="error",
        ))

    for name, value in (
        ("http.follow_redirects", config.http.follow_redirects),
        ("http.verify", config.http.verify),
        ("runtime.console_output", config.runtime.console_output),
    ):
        if not isinstance(value, bool):
            errors.append(ValidationError(
                field=name,
                message="Must be true or false",
                severity="error",
            ))

    if config.http.verify is False:
        errors.append(ValidationError(
            field="http.verify",
            message="TLS certificate verification is disabled",
            severity="warning",
        ))

    jobs = config.runtime.max_pending_jobs
    if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 0:
        errors.append(ValidationError(
            field="runtime.max_pending_jobs",
            message="Must be a non-negative integer",
            severity="error",
        ))

    if str(config.logging.level).upper() not in LOG_LEVELS:
        errors.append(ValidationError(
            field="logging.level",
            message=f"Must be one of {', '.join(LOG_LEVELS)}",
            severity="error",
        ))

    if config.logging.file is not None and not isinstance(config.logging.file, Path):
        errors.append(ValidationError(
            field="logging.file",
            message="Must be a file path",
            severity="error",
        ))

    return errors


def ensure_valid(config: ChoutenConfig) -> list[ValidationError]:
    """
    Raise on validation errors and return the remaining warnings.

    Raises:
        ConfigurationError: If any entry has "error" severity
    """
    issues = validate_config(config)
    failures = [issue for issue in issues if issue.severity == "error"]
    if failures:
        raise ConfigurationError(
            "Invalid configuration",
            details={issue.field: issue.message for issue in failures},
        )
    return [issue for issue in issues if issue.severity == "warning"]


def config_to_dict(config: ChoutenConfig) -> dict[str, Any]:
    """Convert configuration to a dictionary with string paths."""
    def convert(value: Any) -> Any:
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, dict):
            return {k: convert(v) for k, v in value.items()}
        return value

    return convert(asdict(config))
