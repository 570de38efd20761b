"""
Project configuration

Reads ``tablesync.json`` from the working directory:

    {
      "version": 1,
      "entities": "school.models:ENTITIES",
      "ordered": false,
      "environments": {
        "dev": {"databaseUrl": "mssql+pyodbc://...", "echo": false}
      }
    }

The database URL can also come from ``TABLESYNC_DATABASE_URL`` or the CLI's
``--url`` option, which take precedence over the file.
"""

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

CONFIG_FILE_NAME = "tablesync.json"
DATABASE_URL_ENV = "TABLESYNC_DATABASE_URL"
DEFAULT_ENVIRONMENT = "dev"


class EnvironmentConfig(BaseModel):
    """Connection settings for one environment"""

    model_config = ConfigDict(populate_by_name=True)

    database_url: str | None = Field(None, alias="databaseUrl")
    echo: bool = False  # SQLAlchemy statement echo
    description: str | None = None


class ProjectConfig(BaseModel):
    """Contents of tablesync.json"""

    model_config = ConfigDict(populate_by_name=True)

    version: int = 1
    entities: str | None = None  # "module:attribute" target
    ordered: bool = False  # sort sync by foreign-key dependencies
    environments: dict[str, EnvironmentConfig] = Field(default_factory=dict)

    def get_environment(self, name: str) -> EnvironmentConfig:
        """Get an environment's settings

        Raises:
            ConfigurationError: If the project defines environments but not this one
        """
        if name in self.environments:
            return self.environments[name]
        if self.environments:
            available = ", ".join(sorted(self.environments))
            raise ConfigurationError(
                f"Environment '{name}' not found in {CONFIG_FILE_NAME}. "
                f"Available environments: {available}"
            )
        return EnvironmentConfig()


def get_config_file_path(workspace: Path) -> Path:
    return workspace / CONFIG_FILE_NAME


def load_config(path: Path | None = None, workspace: Path | None = None) -> ProjectConfig:
    """Load project configuration

    Args:
        path: Explicit config file; must exist
        workspace: Directory searched for tablesync.json when ``path`` is not
            given (default: current directory). A missing file yields defaults.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    if path is None:
        path = get_config_file_path(workspace or Path.cwd())
        if not path.exists():
            return ProjectConfig()
    elif not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as err:
        raise ConfigurationError(f"Cannot read {path}: {err}") from err

    try:
        return ProjectConfig.model_validate(data)
    except PydanticValidationError as err:
        raise ConfigurationError(f"Invalid config file {path}:\n{err}") from err


def resolve_database_url(
    config: ProjectConfig, environment: str = DEFAULT_ENVIRONMENT, override: str | None = None
) -> str:
    """Pick the database URL: explicit override, then environment variable, then config

    Raises:
        ConfigurationError: If no URL is configured anywhere
    """
    if override:
        return override
    from_env = os.environ.get(DATABASE_URL_ENV)
    if from_env:
        return from_env
    url = config.get_environment(environment).database_url
    if not url:
        raise ConfigurationError(
            f"No database URL for environment '{environment}'. Pass --url, set "
            f"{DATABASE_URL_ENV} or add databaseUrl to {CONFIG_FILE_NAME}."
        )
    return url
