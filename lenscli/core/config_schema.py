"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has wrong types or unknown fields, a clear ValidationError is raised at
startup instead of a cryptic KeyError deep in a command.

Every field has a default so a missing file still yields a usable config.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class RemoteSchema(_StrictBase):
    host: str = "http://localhost:9991"
    timeout: float = 30.0


class OutputSchema(_StrictBase):
    format: Literal["table", "json"] = "table"


class ApplicationSchema(_StrictBase):
    name: str = "lenscli"
    version: str = "0.4.0"
    description: str = "Command-line client for the Kafka control plane"
    remote: RemoteSchema = Field(default_factory=RemoteSchema)
    output: OutputSchema = Field(default_factory=OutputSchema)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool = True


class FileHandlerSchema(_StrictBase):
    enabled: bool = False
    path: str = "logs/lenscli.jsonl"
    max_bytes: int = 10485760
    backup_count: int = 5


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema = Field(default_factory=ConsoleHandlerSchema)
    file: FileHandlerSchema = Field(default_factory=FileHandlerSchema)


class LoggingSchema(_StrictBase):
    level: str = "WARNING"
    format: Literal["console", "json"] = "console"
    handlers: HandlersSchema = Field(default_factory=HandlersSchema)
