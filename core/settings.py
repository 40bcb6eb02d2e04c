from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from core.exceptions import ConfigurationError

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class StorageSettings(BaseModel):
    backend: Literal["s3", "local"] = "s3"
    bucket: str | None = None
    region: str | None = None
    endpoint_url: str | None = None
    local_root: Path = Path("data/uploads")
    public_base_url: str = "http://localhost:3000"

    @field_validator("bucket", "region", "endpoint_url", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class DatabaseSettings(BaseModel):
    uri: str | None = None
    database: str | None = None
    collection: str = "objects"

    @field_validator("uri", "database", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def url(self) -> str:
        if not self.uri:
            raise ConfigurationError(
                "MONGO_URI is required for database connectivity",
                {"setting": "MONGO_URI"},
            )
        return self.uri

    @property
    def database_name(self) -> str:
        if self.database:
            return self.database
        # mongodb://host/<name>?options
        path = urlparse(self.uri or "").path.lstrip("/")
        return path or "objects"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    file: Path | None = None

    @field_validator("file", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None, environ: dict[str, str] | None = None) -> "Settings":
        """Load settings from an optional YAML file, then apply environment overrides.

        Args:
            path: Optional path to a configuration file. If not provided, uses
                the OBJECTS_CONFIG environment variable or config/default.yaml.
                A missing default file is not an error.
            environ: Environment mapping; defaults to ``os.environ``.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If an explicitly requested file does not exist.
            ConfigurationError: If configuration is invalid.
        """
        env = os.environ if environ is None else environ
        explicit = path or (Path(env["OBJECTS_CONFIG"]) if env.get("OBJECTS_CONFIG") else None)
        config_path = explicit or Path("config/default.yaml")

        payload: dict[str, Any] = {}
        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as fp:
                payload = yaml.safe_load(fp) or {}
        elif explicit is not None:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        _apply_env(payload, env)
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


# (section, field) <- environment variable
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "MONGO_URI": ("database", "uri"),
    "MONGO_DATABASE": ("database", "database"),
    "MONGO_COLLECTION": ("database", "collection"),
    "STORAGE_BACKEND": ("storage", "backend"),
    "S3_BUCKET": ("storage", "bucket"),
    "AWS_REGION": ("storage", "region"),
    "S3_ENDPOINT_URL": ("storage", "endpoint_url"),
    "LOCAL_STORAGE_ROOT": ("storage", "local_root"),
    "PUBLIC_BASE_URL": ("storage", "public_base_url"),
    "LOG_LEVEL": ("logging", "level"),
    "JSON_LOGGING": ("logging", "json_format"),
    "LOG_FILE": ("logging", "file"),
}


def _apply_env(payload: dict[str, Any], env: Any) -> None:
    for name, (section, field) in _ENV_OVERRIDES.items():
        value = env.get(name)
        if value is None:
            continue
        section_payload = payload.get(section) or {}
        section_payload[field] = value
        payload[section] = section_payload


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "StorageSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "get_settings",
]
