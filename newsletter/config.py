"""Layered application configuration using Pydantic Settings.

Settings are resolved from three layers, later layers overriding earlier
ones key by key:

1. ``configuration/base.yaml``
2. ``configuration/<environment>.yaml``, where the environment comes from
   ``APP_ENVIRONMENT`` (``local`` when unset)
3. environment variables such as ``APP_APPLICATION__PORT=8001``
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)
from sqlalchemy.engine import URL

from newsletter.domain.exceptions import ConfigError
from newsletter.domain.value_objects import SubscriberEmail

ENVIRONMENT_VARIABLE = "APP_ENVIRONMENT"
ENV_PREFIX = "APP_"
ENV_NESTED_DELIMITER = "__"

DEFAULT_CONFIGURATION_DIRECTORY = Path("configuration")
BASE_DOCUMENT = "base.yaml"

Port = Annotated[int, Field(ge=0, le=65535)]


class Environment(str, Enum):
    """Runtime environment selecting the overlay document."""

    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, raw: str) -> Environment:
        """Match ``raw`` case-insensitively against the known environments."""
        try:
            return cls(raw.lower())
        except ValueError:
            accepted = " or ".join(f"`{member.value}`" for member in cls)
            raise ConfigError(
                f"{raw} is not a supported environment. Use either {accepted}.",
                source=ENVIRONMENT_VARIABLE,
            ) from None

    @classmethod
    def from_env(cls) -> Environment:
        raw = os.environ.get(ENVIRONMENT_VARIABLE)
        if raw is None:
            return cls.LOCAL
        return cls.parse(raw)


class DatabaseSettings(BaseModel):
    """PostgreSQL connection parameters."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr
    port: Port
    host: str
    database_name: str
    require_ssl: bool = False

    def connection_url(self, include_database: bool = True) -> URL:
        """
        Build the SQLAlchemy connection URL.

        Args:
            include_database: Whether to target ``database_name``; without it
                the URL connects to the server's default database, which is
                what creating a fresh database requires.
        """
        return URL.create(
            "postgresql+psycopg2",
            username=self.username,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.database_name if include_database else None,
            query={"sslmode": "require" if self.require_ssl else "prefer"},
        )


class ApplicationSettings(BaseModel):
    """HTTP server parameters."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: Port
    base_url: str
    log_level: str = "INFO"


class EmailClientSettings(BaseModel):
    """Email provider parameters."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    sender_email: str
    authorization_token: SecretStr

    def sender(self) -> SubscriberEmail:
        """
        Parse the configured sender address.

        Raises:
            InvalidSubscriberEmailError: If ``sender_email`` is not valid
        """
        return SubscriberEmail.parse(self.sender_email)


class Settings(BaseSettings):
    """Application settings merged from YAML documents and the environment."""

    database: DatabaseSettings
    application: ApplicationSettings
    email_client: EmailClientSettings

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # The merged YAML tree arrives as init kwargs; the environment wins.
        return env_settings, init_settings


def resolve_configuration(configuration_directory: Path | None = None) -> Settings:
    """
    Resolve the application settings.

    Args:
        configuration_directory: Directory holding ``base.yaml`` and the
            environment documents. Defaults to ``./configuration``.

    Returns:
        Fully validated, immutable settings

    Raises:
        ConfigError: If a document is missing or unreadable, the environment
            is unknown, or the merged values do not type-check
    """
    directory = configuration_directory or DEFAULT_CONFIGURATION_DIRECTORY

    base = _load_document(directory / BASE_DOCUMENT, label="base document")
    environment = Environment.from_env()
    overlay = _load_document(
        directory / f"{environment.value}.yaml",
        label=f"{environment.value} document",
    )

    try:
        return Settings(**_deep_merge(base, overlay))
    except ValidationError as e:
        raise ConfigError(_describe_validation_error(e), source="settings") from e
    except SettingsError as e:
        raise ConfigError(str(e), source="environment") from e


def _load_document(path: Path, label: str) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Missing {label}: {path}", source=label)

    try:
        with path.open(encoding="utf-8") as handle:
            document = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read {label} {path}: {e}", source=label) from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(
            f"The {label} {path} must contain a mapping of settings",
            source=label,
        )
    return document


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _describe_validation_error(error: ValidationError) -> str:
    errors = error.errors()
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    message = f"Invalid configuration value for `{location}`: {first['msg']}"
    if len(errors) > 1:
        message += f" ({len(errors)} errors in total)"
    return message
