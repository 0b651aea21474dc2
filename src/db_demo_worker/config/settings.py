"""Configuration settings using Pydantic for validation."""

from typing import Any, Optional, Set
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import dotenv_values
import yaml
import os
import re

from ..models import DatabaseKind


class ReadinessConfig(BaseModel):
    """Startup readiness probe configuration."""
    max_attempts: int = Field(default=30, ge=1, description="Maximum connection attempts before giving up")
    delay_seconds: float = Field(default=2.0, ge=0, description="Delay between connection attempts")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")
    output: str = Field(default="stdout", description="Log output destination")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        if v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError("Level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v.upper()

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        if v.lower() not in ['json', 'text']:
            raise ValueError("Format must be 'json' or 'text'")
        return v.lower()


class WorkerSettings(BaseSettings):
    """Main worker settings, read once at process start."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="db-demo-worker", description="Service name")

    # Backend selection
    db_type: DatabaseKind = Field(default=DatabaseKind.POSTGRES, description="Backend: postgres, mysql or mongo")
    db_connection_string: Optional[str] = Field(default=None, description="Backend-specific connection string")

    # Polling
    poll_interval_seconds: float = Field(default=10.0, gt=0, description="Delay between inserts")

    # Component configurations
    readiness: ReadinessConfig = Field(default_factory=ReadinessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('db_type', mode='before')
    @classmethod
    def parse_db_type(cls, v):
        # Unrecognised values fall back to postgres instead of failing validation
        return DatabaseKind.parse(v)

    @property
    def has_connection_string(self) -> bool:
        return bool(self.db_connection_string and self.db_connection_string.strip())


def substitute_env_vars(obj: Any) -> Any:
    """
    Expand ``${VAR}`` and ``${VAR:-default}`` in YAML values.

    Raises:
        ValueError: If a ``${VAR}`` without default is not set
    """
    if isinstance(obj, dict):
        return {key: substitute_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [substitute_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        def replace_env_var(match):
            var_expr = match.group(1)

            if ':-' in var_expr:
                var_name, default_value = var_expr.split(':-', 1)
                return os.getenv(var_name.strip(), default_value)

            var_name = var_expr.strip()
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable '{var_name}' is not set")
            return value

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    return obj


def _environment_keys() -> Set[str]:
    """Lower-cased variable names visible to WorkerSettings: process env plus the .env file."""
    keys = {key.lower() for key in os.environ}
    env_file = WorkerSettings.model_config.get("env_file")
    if env_file and os.path.exists(env_file):
        encoding = WorkerSettings.model_config.get("env_file_encoding")
        keys.update(key.lower() for key in dotenv_values(env_file, encoding=encoding))
    return keys


def load_settings(config_file: Optional[str] = None) -> WorkerSettings:
    """
    Load settings from an optional YAML file and the environment.

    Variables from the process environment or ``.env`` win over file values.

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If config file doesn't exist
    """
    if config_file and os.path.exists(config_file):
        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        config_data = substitute_env_vars(raw_config)

        # Init kwargs beat env sources in pydantic-settings
        env_keys = _environment_keys()
        overridden = {
            name for name in WorkerSettings.model_fields
            if any(key == name or key.startswith(f"{name}__") for key in env_keys)
        }
        config_data = {k: v for k, v in config_data.items() if k not in overridden}

        return WorkerSettings(**config_data)

    elif config_file:
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    return WorkerSettings()
