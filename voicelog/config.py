"""
Configuration for VoiceLog.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class PersistenceConfig(BaseModel):
    """Persistence gateway configuration."""

    backend: str = "sqlite"
    db_path: str = "data/voicelog.db"


class TranscriptionConfig(BaseModel):
    """Speech-to-text provider configuration."""

    provider: str = "openai"
    model: str = "whisper-1"
    api_key: str | None = None
    base_url: str | None = None
    language: str | None = None
    timeout: float = 120.0


class StoreConfig(BaseModel):
    """Client-side note cache configuration."""

    # eager: re-fetch on every change event; lazy: re-fetch on next read
    refresh_mode: Literal["eager", "lazy"] = "eager"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            VOICELOG_PERSISTENCE_BACKEND: Persistence backend (sqlite)
            VOICELOG_DB_PATH: SQLite database path
            VOICELOG_TRANSCRIPTION_PROVIDER: Transcription provider (openai)
            VOICELOG_TRANSCRIPTION_MODEL: Transcription model name
            VOICELOG_TRANSCRIPTION_API_KEY: Transcription API key
            VOICELOG_TRANSCRIPTION_BASE_URL: Custom API base URL
            VOICELOG_TRANSCRIPTION_LANGUAGE: Language hint (e.g. "en")
            VOICELOG_STORE_REFRESH_MODE: eager or lazy
            VOICELOG_LOG_LEVEL: Log level
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            if value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            persistence=PersistenceConfig(
                backend=get_env("VOICELOG_PERSISTENCE_BACKEND", "sqlite"),
                db_path=get_env("VOICELOG_DB_PATH", "data/voicelog.db"),
            ),
            transcription=TranscriptionConfig(
                provider=get_env("VOICELOG_TRANSCRIPTION_PROVIDER", "openai"),
                model=get_env("VOICELOG_TRANSCRIPTION_MODEL", "whisper-1"),
                api_key=get_env("VOICELOG_TRANSCRIPTION_API_KEY"),
                base_url=get_env("VOICELOG_TRANSCRIPTION_BASE_URL"),
                language=get_env("VOICELOG_TRANSCRIPTION_LANGUAGE"),
                timeout=get_env("VOICELOG_TRANSCRIPTION_TIMEOUT", 120.0),
            ),
            store=StoreConfig(
                refresh_mode=get_env("VOICELOG_STORE_REFRESH_MODE", "eager"),
            ),
            logging=LoggingConfig(
                level=get_env("VOICELOG_LOG_LEVEL", "INFO"),
                log_to_file=get_env("VOICELOG_LOG_TO_FILE", True),
                log_dir=get_env("VOICELOG_LOG_DIR", "logs"),
                file_rotation=get_env("VOICELOG_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("VOICELOG_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("VOICELOG_LOG_COMPRESSION", "zip"),
                serialize=get_env("VOICELOG_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Apply env overrides (non-default sections only)
        default = cls()
        if env_config.persistence != default.persistence:
            final_dict["persistence"] = env_config.persistence.model_dump()
        if env_config.transcription != default.transcription:
            final_dict["transcription"] = env_config.transcription.model_dump()
        if env_config.store != default.store:
            final_dict["store"] = env_config.store.model_dump()
        if env_config.logging != default.logging:
            final_dict["logging"] = env_config.logging.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
