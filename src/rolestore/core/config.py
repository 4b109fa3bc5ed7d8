"""Configuration management for RoleStore.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ROLESTORE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "RoleStore"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./rs_data/rolestore.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Role Store Settings
    role_state_name: str = Field(
        default="RangerRole",
        description="Name of the global-state row holding the role version counter",
    )
    service_types_for_all_roles: Annotated[list[str], NoDecode] = Field(
        default=["solr"],
        description="Service types that receive every role regardless of policy references",
    )
    supports_roles_download_by_service: bool = Field(
        default=False,
        description="Track role versions per service instead of one global counter",
    )
    default_page_size: int = 200
    max_page_size: int = 10000

    @field_validator("service_types_for_all_roles", mode="before")
    @classmethod
    def parse_service_types(cls, v: str | list[str]) -> list[str]:
        """Parse service types from comma-separated string or list."""
        if isinstance(v, str):
            return [service_type.strip() for service_type in v.split(",") if service_type.strip()]
        return v

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "Settings":
        """Validate that the default page size fits under the maximum."""
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be at least 1")
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) cannot exceed "
                f"max_page_size ({self.max_page_size})"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    def receives_all_roles(self, service_type: str | None) -> bool:
        """Check whether a service type is on the all-roles allow-list.

        Args:
            service_type: Declared type of the service (e.g., 'solr').

        Returns:
            True if services of this type get every role.
        """
        if not service_type:
            return False
        return any(
            service_type.lower() == allowed.lower()
            for allowed in self.service_types_for_all_roles
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
