"""
Configuration management for Ding Relay.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > .env file > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 5050

DEFAULT_SUPPORTED_EVENTS = [
    "character_message",
    "user_message",
]


class Settings(BaseSettings):
    """
    Ding Relay configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/production.yaml: Production overrides
        - config/development.yaml: Development overrides
        - config/test.yaml: Test overrides
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
        populate_by_name=True,
    )

    # Application
    APP_NAME: str = "Message Ding Relay"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(
        default=DEFAULT_PORT,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("port", "MESSAGE_DING_PORT"),
    )

    # Allowed event vocabulary (append-only)
    supported_events: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_EVENTS)
    )

    # Liveness
    heartbeat_enabled: bool = Field(
        default=True,
        description="Push periodic heartbeat frames to every connection",
    )
    heartbeat_interval: float = Field(default=30, gt=0, le=300)

    # Fan-out
    send_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds a single recipient write may take before it is dropped",
    )
    max_total_connections: int = Field(
        default=0,
        ge=0,
        description="Maximum concurrent connections (0 = unlimited)",
    )

    # Submission validation
    max_message_size: int = Field(
        default=65_536,  # 64KB
        ge=1024,
        description="Maximum submission size in bytes",
    )

    # Graceful Shutdown
    shutdown_timeout: int = Field(
        default=30,
        ge=1,
        description="Maximum seconds to wait for graceful shutdown",
    )
    shutdown_grace_period: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait after the shutdown notice before closing",
    )

    # Logging
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)
    log_verbose: int = Field(default=1, ge=0, le=3)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("supported_events")
    @classmethod
    def validate_supported_events(cls, v: List[str]) -> List[str]:
        """Reject empty names and drop duplicates while keeping order."""
        seen = []
        for name in v:
            if not isinstance(name, str) or not name.strip():
                raise ValueError("Event kinds must be non-empty strings")
            if name not in seen:
                seen.append(name)
        if not seen:
            raise ValueError("At least one supported event is required")
        return seen


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    # Service root is 4 levels up (config -> dingrelay -> src -> service)
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = project_root / "config"

    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.development", "test.yaml"),
    }

    # Load .env file FIRST (before Settings initialization)
    default_env_file, default_config_file = env_map.get(
        environment, (".env.production", "production.yaml")
    )
    if env_file is None:
        env_file = default_env_file
    if config_file is None:
        config_file = default_config_file

    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged_config = {}

    default_config_path = config_dir / "default.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    # Environment-specific config overrides defaults
    env_config_path = config_dir / config_file
    if env_config_path.exists():
        with open(env_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                for key, value in loaded.items():
                    merged_config[key] = value

    # Environment variables, including ones loaded from .env, win over YAML
    merged_config = {
        key: value for key, value in merged_config.items() if key not in os.environ
    }

    # MESSAGE_DING_PORT wins over YAML
    env_port = os.getenv("MESSAGE_DING_PORT")
    if env_port:
        merged_config["port"] = env_port

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
