"""Service configuration: YAML file, environment and ``.env`` sources."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ntask.contracts.common import ConfigurationError
from ntask.io.fileops import read_text_safe

DEFAULT_CONFIG_NAME = "ntask.yaml"
DEFAULT_API_BASE = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"


class Locale(BaseModel):
    """Display tokens used for booleans and placeholders."""

    yes: str
    no: str
    untitled: str


LOCALES: dict[str, Locale] = {
    "en": Locale(yes="yes", no="no", untitled="Untitled"),
    "ja": Locale(yes="はい", no="いいえ", untitled="無題"),
}


def get_locale(name: str) -> Locale:
    try:
        return LOCALES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown locale '{name}'. Supported: {', '.join(sorted(LOCALES))}"
        ) from None


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class ServiceConfig(BaseSettings):
    """Settings for one run against the Database Service.

    Values passed to the constructor win over the environment, which wins
    over the ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    api_key: str | None = Field(default=None, validation_alias=_alias("api_key", "NOTION_KEY", "NTASK_API_KEY"))
    database_id: str | None = Field(
        default=None, validation_alias=_alias("database_id", "NOTION_DATABASE_ID", "NTASK_DATABASE_ID"),
    )
    api_base: str = Field(default=DEFAULT_API_BASE, validation_alias=_alias("api_base", "NTASK_API_BASE"))
    api_version: str = Field(default=DEFAULT_API_VERSION, validation_alias=_alias("api_version", "NTASK_API_VERSION"))
    timeout: float = Field(default=30.0, gt=0, validation_alias=_alias("timeout", "NTASK_TIMEOUT"))
    page_size: int = Field(default=100, ge=1, le=100, validation_alias=_alias("page_size", "NTASK_PAGE_SIZE"))
    max_retries: int = Field(default=0, ge=0, validation_alias=_alias("max_retries", "NTASK_MAX_RETRIES"))
    retry_backoff: float = Field(default=0.5, ge=0, validation_alias=_alias("retry_backoff", "NTASK_RETRY_BACKOFF"))
    locale: Literal["en", "ja"] = Field(default="en", validation_alias=_alias("locale", "NTASK_LOCALE"))
    role_keywords: dict[str, list[str]] = Field(
        default_factory=dict, validation_alias=_alias("role_keywords", "NTASK_ROLE_KEYWORDS"),
    )

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                "No API key configured. Set NOTION_KEY or api_key in the config file."
            )
        return self.api_key

    def require_database(self) -> str:
        if not self.database_id:
            raise ConfigurationError(
                "No database configured. Pass --database, set NOTION_DATABASE_ID "
                "or database_id in the config file."
            )
        return self.database_id

    @property
    def display_locale(self) -> Locale:
        return get_locale(self.locale)


def load_config(
    path: str | Path | None = None,
    *,
    env_file: str | Path | None = ".env",
    **overrides: Any,
) -> ServiceConfig:
    """Load configuration from an optional YAML file plus the environment.

    ``overrides`` (typically CLI options) take precedence; ``None`` values
    are ignored so unset options never mask the file or environment.
    """
    data: dict[str, Any] = {}
    if path is None and Path(DEFAULT_CONFIG_NAME).exists():
        path = DEFAULT_CONFIG_NAME
    if path is not None:
        try:
            loaded = yaml.safe_load(read_text_safe(path)) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping.")
        data.update(loaded)

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ServiceConfig(_env_file=env_file, **data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
