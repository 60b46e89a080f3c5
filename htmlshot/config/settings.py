"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, Dict, Any
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="htmlshot", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    app_locale: str = Field(default="en_US", description="Locale used for the document language")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")
    default_disk: str = Field(default="local", description="Storage disk used when none is given")
    disks: Dict[str, Path] = Field(
        default_factory=dict, description="Named storage disks mapped to root directories"
    )

    # Template Configuration
    template_path: Path = Field(
        default=Path(__file__).resolve().parent.parent / "templates",
        description="Jinja2 template directory",
    )

    # Rendering Configuration
    default_width: int = Field(default=1920, description="Default viewport width")
    default_height: int = Field(default=1080, description="Default viewport height")
    default_format: str = Field(default="png", description="Default output format")
    download_prefix: str = Field(default="file", description="Prefix for generated download names")
    fetch_timeout: int = Field(default=30, description="URL fetch timeout in seconds")

    # Browser Configuration
    chrome_path: Optional[str] = Field(
        default=None, description="Chrome/Chromium executable path; bundled Chromium if unset"
    )
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("default_format")
    @classmethod
    def lower_default_format(cls, v: str) -> str:
        """Formats are compared lower-cased."""
        return v.lower()

    @field_validator("storage_path")
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def default_disks(self) -> "Settings":
        """Provide the local and public disks under storage_path unless configured."""
        if not self.disks:
            self.disks = {
                "local": self.storage_path / "app",
                "public": self.storage_path / "app" / "public",
            }
        return self

    def disk_config(self) -> Dict[str, Any]:
        """Disk names and roots as plain strings, for logging and health output."""
        return {name: str(root) for name, root in self.disks.items()}

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="HTMLSHOT_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
