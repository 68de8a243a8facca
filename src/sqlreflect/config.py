"""
Configuration management for sqlreflect.

Loads and validates configuration from sqlreflect.toml files and
``SQLREFLECT_*`` environment variables using Pydantic.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILENAME = "sqlreflect.toml"


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(env_prefix="SQLREFLECT_DATABASE_")

    url: str = Field(
        default="postgresql://localhost/postgres",
        description="PostgreSQL connection URL",
    )
    catalog: Optional[str] = Field(
        default=None,
        description="Catalog to reflect (defaults to the connected database)",
    )
    default_schema: str = Field(
        default="public", description="Schema used when a table name has none"
    )
    prepare: Optional[bool] = Field(
        default=None,
        description="Prepare catalog statements server-side (None lets psycopg decide)",
    )


class Settings(BaseSettings):
    """Main configuration for sqlreflect."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def from_toml(cls, path: Path | str) -> Settings:
        """
        Load configuration from TOML file.

        Args:
            path: Path to sqlreflect.toml file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        database = DatabaseConfig(**data.get("database", {}))
        return cls(database=database)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Settings:
        """
        Find and load configuration from sqlreflect.toml.

        Searches for sqlreflect.toml starting from start_dir and walking up
        parent directories. Falls back to environment variables and defaults
        when no file is found.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            Settings instance
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        return cls()
