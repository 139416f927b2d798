"""Configuration for nestparse using pydantic-settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParserSettings(BaseSettings):
    """Settings for the parse driver."""

    model_config = SettingsConfigDict(
        env_prefix="NESTPARSE_PARSER_",
    )

    max_depth: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum nesting depth of matched regions (unbounded if not set)",
    )


class RulesSettings(BaseSettings):
    """Settings for loading rules."""

    model_config = SettingsConfigDict(
        env_prefix="NESTPARSE_RULES_",
    )

    rules_file: Optional[Path] = Field(
        default=None,
        description="Path to a YAML rules file",
    )
    ruleset: str = Field(
        default="default",
        description="Name of the ruleset to load from the rules file",
    )


class Settings(BaseSettings):
    """Global settings for nestparse."""

    model_config = SettingsConfigDict(
        env_prefix="NESTPARSE_",
    )

    parser: ParserSettings = Field(default_factory=ParserSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)


# Global settings instance that can be accessed throughout the application
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
