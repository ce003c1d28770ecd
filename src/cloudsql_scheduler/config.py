"""Configuration management for Cloud SQL Scheduler.

Provides environment-specific configuration loading and validation
for the Pub/Sub driven start/stop function and its CLI.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ALLOWED_ENVIRONMENTS = ["dev", "staging", "prod"]
ALLOWED_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class SchedulerConfig(BaseModel):
    """Main configuration class for Cloud SQL Scheduler."""

    # Environment
    environment: str = Field("dev", description="Deployment environment")
    default_project: str | None = Field(
        None, description="Project used when a request does not name one"
    )

    # Admin API
    api_version: str = Field("v1beta4", description="Cloud SQL Admin API version")
    request_timeout_seconds: float | None = Field(
        None, description="HTTP timeout for Admin API calls (transport default when unset)"
    )

    # Dispatch behaviour
    strict_decode: bool = Field(True, description="Reject payloads that are not valid JSON")
    dry_run: bool = Field(False, description="Log intended patches without calling the API")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    structured_logging: bool = Field(True, description="Emit JSON log lines for Cloud Logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment values."""
        if v not in ALLOWED_ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {ALLOWED_ENVIRONMENTS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level values."""
        if v.upper() not in ALLOWED_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {ALLOWED_LOG_LEVELS}")
        return v.upper()

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        """Load configuration from environment variables."""
        config_data: dict[str, Any] = {
            "environment": os.environ.get("ENVIRONMENT", "dev"),
            "default_project": os.environ.get("GOOGLE_CLOUD_PROJECT")
            or os.environ.get("GCP_PROJECT"),
            "api_version": os.environ.get("SQLADMIN_API_VERSION", "v1beta4"),
            "strict_decode": _env_flag("STRICT_DECODE", "true"),
            "dry_run": _env_flag("DRY_RUN", "false"),
            "log_level": os.environ.get("LOG_LEVEL", "INFO"),
            "structured_logging": _env_flag("STRUCTURED_LOGGING", "true"),
        }

        timeout = os.environ.get("REQUEST_TIMEOUT_SECONDS")
        if timeout:
            config_data["request_timeout_seconds"] = timeout

        return _build(config_data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SchedulerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            SchedulerConfig instance loaded from the file
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Try to infer environment from filename if not provided
        if "environment" not in data:
            stem = config_path.stem.lower()
            if stem in ALLOWED_ENVIRONMENTS:
                data["environment"] = stem
            else:
                data["environment"] = os.environ.get("ENVIRONMENT", "dev")

        return _build({**get_default_config(data["environment"]), **data})


def _build(data: dict[str, Any]) -> SchedulerConfig:
    try:
        return SchedulerConfig(**data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        key = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ConfigurationError(f"Invalid configuration: {e}", config_key=key) from e


def load_config(environment: str, config_path: Path | None = None) -> SchedulerConfig:
    """Load configuration for the specified environment.

    Args:
        environment: Target environment (dev/staging/prod)
        config_path: Optional custom config file path

    Returns:
        Loaded configuration object

    Raises:
        ConfigurationError: If the config file is missing or invalid
    """
    if config_path is None:
        # Use default config path
        config_dir = Path(__file__).parent.parent.parent / "config"
        config_path = config_dir / f"{environment}.yml"

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    config_data = {**get_default_config(environment), **config_data, "environment": environment}

    # Fall back to the ambient project when the file does not pin one
    if not config_data.get("default_project"):
        config_data["default_project"] = os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv(
            "GCP_PROJECT"
        )

    return _build(config_data)


def get_default_config(environment: str) -> dict[str, Any]:
    """Get default configuration for an environment.

    Values from the environment's YAML file take precedence over these.

    Args:
        environment: Target environment

    Returns:
        Default configuration dictionary
    """
    base_config: dict[str, Any] = {
        "environment": environment,
        "api_version": "v1beta4",
        "strict_decode": True,
        "structured_logging": True,
    }

    # Environment-specific overrides
    if environment == "prod":
        base_config["log_level"] = "INFO"
        base_config["dry_run"] = False
    elif environment == "dev":
        base_config["log_level"] = "DEBUG"
        base_config["structured_logging"] = False
        base_config["dry_run"] = True

    return base_config
