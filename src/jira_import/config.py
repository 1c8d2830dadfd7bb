"""Configuration management with pydantic-settings for jira-import.

Loads from (in order of precedence):
1. Environment variables (JIRA_ prefix)
2. .env file in the working directory
3. Default values

The core (client, converter) never reads the environment itself; it takes the
typed configs produced by connection_config() and converter_config().
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .client import ConnectionConfig
from .converter import ConverterConfig, IDGenerator

logger = logging.getLogger("jira_import.config")

__all__ = ["JiraImportConfig", "get_config", "reset_config"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class JiraImportConfig(BaseSettings):
    """Configuration for jira-import.

    Attributes:
        url: Jira instance URL (e.g., https://company.atlassian.net)
        project: Project key used when no JQL is given
        username: Email (Cloud) or username (Server/DC)
        api_token: API token, PAT or password (stored as SecretStr)
        jql: Default JQL query
        state: Status filter for synthesized JQL (open, closed, all)
        id_prefix: Prefix for generated internal issue IDs
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for machines, text for terminals)
    """

    model_config = SettingsConfigDict(
        env_prefix="JIRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,  # Use defaults instead of empty strings
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    url: str = Field(
        default="",
        description="Jira instance URL (e.g., https://company.atlassian.net)",
    )

    project: str = Field(
        default="",
        description="Jira project key (e.g., PROJ)",
    )

    username: str = Field(
        default="",
        description="Email for Jira Cloud, username for Server/DC",
    )

    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="API token (Cloud) or PAT/password (Server/DC)",
    )

    jql: str = Field(
        default="",
        description="JQL query; synthesized from project and state when empty",
    )

    state: Literal["open", "closed", "all"] = Field(
        default="all",
        description="Status filter applied to synthesized JQL",
    )

    id_prefix: str = Field(
        default="jira",
        min_length=1,
        description="Prefix for generated internal issue IDs",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("project")
    @classmethod
    def normalize_project(cls, v: str) -> str:
        """Project keys are upper-case in Jira."""
        return v.strip().upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Expected one of: {', '.join(_LOG_LEVELS)}"
            )
        return level

    def connection_config(self) -> ConnectionConfig:
        """Build the client's ConnectionConfig."""
        return ConnectionConfig(
            url=self.url,
            api_token=self.api_token.get_secret_value(),
            project=self.project,
            username=self.username,
        )

    def converter_config(self, id_generator: IDGenerator | None = None) -> ConverterConfig:
        """Build the converter's ConverterConfig."""
        return ConverterConfig(
            base_url=self.url,
            prefix=self.id_prefix,
            id_generator=id_generator,
        )


@lru_cache(maxsize=1)
def get_config() -> JiraImportConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    config = JiraImportConfig()
    logger.debug(
        "config_loaded",
        extra={"url": config.url, "project": config.project, "state": config.state},
    )
    return config


def reset_config() -> None:
    """Reset configuration singleton for testing."""
    get_config.cache_clear()
