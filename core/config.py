"""
Application Configuration
Read once at process entry from EGAMI_* environment variables (or .env)
"""

from functools import lru_cache
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Define settings class, handed to the app at startup
class Settings(BaseSettings):
    # Server binding
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 3333

    # Flat directory holding every stored upload
    DATA_DIRECTORY: Path = Path("/var/lib/egami/data")

    # Shared bearer credential, no default so startup fails without it
    USER_TOKEN: str = Field(min_length=1)

    LOG_LEVEL: str = "INFO"

    # Read environment variables from .env file, if it exists
    # extra='ignore' prevents validation errors from extra env vars
    model_config = SettingsConfigDict(
        env_prefix="EGAMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get settings instance, cached for performance
    """
    return Settings()
