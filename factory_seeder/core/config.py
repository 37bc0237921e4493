"""Application configuration via Pydantic Settings v2."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

Strategy = Literal["create", "build"]

CONFIG_FILE_NAME = "factory_seeder.yaml"


class EnvironmentOverrides(BaseModel):
    """Per-environment defaults that take precedence over the global ones."""

    default_count: int | None = Field(default=None, ge=1)
    default_strategy: Strategy | None = None


def _default_environments() -> dict[str, EnvironmentOverrides]:
    return {
        "development": EnvironmentOverrides(default_count=10),
        "testing": EnvironmentOverrides(default_count=5),
        "production": EnvironmentOverrides(default_count=1),
    }


class Settings(BaseSettings):
    """Application settings loaded from env vars, .env and factory_seeder.yaml."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=CONFIG_FILE_NAME,
        extra="ignore",
    )

    # Application
    app_name: str = "FactorySeeder"
    app_env: Literal["development", "testing", "staging", "production"] = "development"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./factory_seeder.db"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    verbose: bool = False

    # Web interface
    api_host: str = "localhost"
    api_port: int = 4567

    # Factory discovery
    factory_paths: list[str] = ["tests/factories", "spec/factories", "factories"]
    factory_modules: list[str] = []

    # Custom seeds
    custom_seeds_dir: str = "db/factory_seeds"

    # Generation defaults
    default_count: int = Field(default=1, ge=1)
    default_strategy: Strategy = "create"
    environments: dict[str, EnvironmentOverrides] = Field(default_factory=_default_environments)
    association_conflict_policy: Literal["strip", "raise"] = "strip"
    allow_production: bool = False

    # Redirect-after-post log store
    execution_log_ttl_seconds: int = Field(default=300, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Add the YAML config file as the lowest-priority source."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("factory_paths", "factory_modules")
    @classmethod
    def strip_blank_entries(cls, v: list[str]) -> list[str]:
        """Drop empty entries and duplicates while keeping order."""
        seen: list[str] = []
        for entry in v:
            entry = entry.strip()
            if entry and entry not in seen:
                seen.append(entry)
        return seen

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from an explicit YAML file.

        Values from the file take precedence over environment variables.

        Args:
            path: Path to the YAML file.

        Returns:
            Settings instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file does not contain a mapping.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with config_path.open() as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")

        return cls(**data)

    def environment_settings(self) -> EnvironmentOverrides:
        """Overrides for the current environment (development when unknown)."""
        overrides = self.environments.get(self.app_env)
        if overrides is None:
            overrides = self.environments.get("development", EnvironmentOverrides())
        return overrides

    def default_count_for_environment(self) -> int:
        """Default record count for the current environment."""
        return self.environment_settings().default_count or self.default_count

    def default_strategy_for_environment(self) -> Strategy:
        """Default build strategy for the current environment."""
        return self.environment_settings().default_strategy or self.default_strategy

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the verbose toggle."""
        return "DEBUG" if self.verbose else self.log_level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
