"""
Application Configuration

Centralized settings management using Pydantic Settings.
Supports environment variables and .env files.

Secrets and the storage target are optional at load time: each one is
checked with `require()` at the point it is needed, so a missing value only
fails the invocation that reaches it.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from cutout.core.exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ==========================================================================
    # App Settings
    # ==========================================================================
    APP_NAME: str = "Cutout Pipeline"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, PROD

    # ==========================================================================
    # Image Generation (Ideogram)
    # ==========================================================================
    API_KEY: Optional[str] = None
    IDEOGRAM_API_URL: str = "https://api.ideogram.ai/v1/ideogram-v3/generate"
    GENERATION_TIMEOUT_SECONDS: float = 30.0

    # ==========================================================================
    # Background Removal (Freepik)
    # ==========================================================================
    FREEPIK_API_KEY: Optional[str] = None
    FREEPIK_API_URL: str = "https://api.freepik.com/v1/ai/beta/remove-background"
    REMOVAL_TIMEOUT_SECONDS: Optional[float] = None  # None: rely on host deadline

    # ==========================================================================
    # Object Storage (S3)
    # ==========================================================================
    BUCKET_NAME: Optional[str] = None
    FOLDER_NAME: Optional[str] = None
    BUCKET_REGION: Optional[str] = None

    # Image downloads
    DOWNLOAD_TIMEOUT_SECONDS: Optional[float] = None

    # ==========================================================================
    # Logging Settings
    # ==========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = True  # JSON for production, console for development

    # ==========================================================================
    # CORS Settings
    # ==========================================================================
    CORS_ORIGINS: str = "*"

    def require(self, name: str) -> str:
        """
        Return a configuration value that must be present at this point.

        Raises:
            ConfigError: If the value is unset or empty.
        """
        value = getattr(self, name, None)
        if not value:
            raise ConfigError(f"{name} is not set", setting=name)
        return value


# Global settings instance
settings = Settings()
