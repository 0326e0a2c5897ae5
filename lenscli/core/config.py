"""
Configuration Management.

Loads secrets from the environment (optionally config/.env) and settings
from config/settings/*.yaml.

Config root resolution:
    1. $LENSES_CLI_HOME
    2. nearest ancestor of the working directory holding a .project_root marker
    3. ~/.lenses-cli

Secrets (env, LENSES_ prefix):
    LENSES_TOKEN, LENSES_USER, LENSES_PASSWORD, LENSES_HOST

Settings (YAML):
    application.yaml   - App identity, remote host and timeout, output format
    logging.yaml       - Logging configuration
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lenscli.core.config_schema import ApplicationSchema, LoggingSchema

HOME_ENV_VAR = "LENSES_CLI_HOME"
DEFAULT_HOME = Path("~/.lenses-cli")


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def find_config_root() -> Path:
    """
    Resolve the directory holding config/.

    Never fails: falls back to ~/.lenses-cli when neither the environment
    variable nor a .project_root marker is present.
    """
    env_home = os.environ.get(HOME_ENV_VAR)
    if env_home:
        return Path(env_home).expanduser()
    try:
        return find_project_root()
    except RuntimeError:
        return DEFAULT_HOME.expanduser()


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    config_path = find_config_root() / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from the environment. Only credentials and host overrides."""

    token: str | None = None
    user: str | None = None
    password: str | None = None
    host: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="LENSES_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Missing files fall back to defaults."""
    try:
        raw = load_yaml_config(filename)
    except FileNotFoundError:
        raw = {}
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Wrong types or unknown fields raise a clear error immediately.

    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from the config root."""
    env_path = find_config_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_remote_base_url() -> tuple[str, float]:
    """
    Get the control plane base URL and timeout.

    LENSES_HOST overrides remote.host from application.yaml.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    remote = get_app_config().application.remote
    host = get_settings().host or remote.host
    return host.rstrip("/"), float(remote.timeout)
