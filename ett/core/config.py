"""
Configuration management for the ETT compliance core.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. The policy durations declared here seed the static
`Configurations` provider whenever no config repository is wired in.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from ett.models.config import Config, ConfigNames, ConfigTypes

DAY_SECONDS = 60 * 60 * 24


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ETT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General application settings
    APP_NAME: str = "ETT Compliance"
    ENVIRONMENT: str = Field("development", pattern=r"^(development|staging|production)$")
    LOG_LEVEL: str = Field("INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    DRY_RUN: bool = False

    # Policy durations, stored in seconds
    STALE_ADMIN_VACANCY_SECONDS: PositiveInt = 30 * DAY_SECONDS
    STALE_CO_SIGNER_VACANCY_SECONDS: PositiveInt = 30 * DAY_SECONDS
    CONSENT_EXPIRATION_SECONDS: PositiveInt = 365 * DAY_SECONDS
    AUTH_IND_INVITATION_EXPIRE_AFTER_SECONDS: PositiveInt = 2 * DAY_SECONDS
    DELETE_EXHIBIT_FORMS_AFTER_SECONDS: PositiveInt = 7 * DAY_SECONDS
    DELETE_DRAFTS_AFTER_SECONDS: PositiveInt = 2 * DAY_SECONDS

    def default_configs(self) -> List[Config]:
        """Render the policy durations as the config records a repository would hold."""

        durations = {
            ConfigNames.STALE_ADMIN_VACANCY: (
                self.STALE_ADMIN_VACANCY_SECONDS,
                "Max time an entity may go without an administrator",
            ),
            ConfigNames.STALE_CO_SIGNER_VACANCY: (
                self.STALE_CO_SIGNER_VACANCY_SECONDS,
                "Max time an entity may go without its two authorized individuals",
            ),
            ConfigNames.CONSENT_EXPIRATION: (
                self.CONSENT_EXPIRATION_SECONDS,
                "Time after consent or renewal when a consent expires",
            ),
            ConfigNames.AUTH_IND_INVITATION_EXPIRE_AFTER: (
                self.AUTH_IND_INVITATION_EXPIRE_AFTER_SECONDS,
                "Time an authorized individual invitation remains usable",
            ),
            ConfigNames.DELETE_EXHIBIT_FORMS_AFTER: (
                self.DELETE_EXHIBIT_FORMS_AFTER_SECONDS,
                "Time exhibit forms are retained",
            ),
            ConfigNames.DELETE_DRAFTS_AFTER: (
                self.DELETE_DRAFTS_AFTER_SECONDS,
                "Time draft forms are retained",
            ),
        }
        return [
            Config(
                name=name,
                value=str(seconds),
                config_type=ConfigTypes.DURATION,
                description=description,
            )
            for name, (seconds, description) in durations.items()
        ]


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()
