"""
Application configuration management.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultcatch.models.error import RECORD_FIELDS


class Settings(BaseSettings):
    """Fault capture settings loaded from FAULTCATCH_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Action pipeline
    write: bool = True
    display: bool = True
    allowed_caller_addresses: List[str] = []
    included_fields: List[str] = Field(default_factory=lambda: list(RECORD_FIELDS))

    # Log sink
    log_directory: Optional[str] = None

    # Application
    log_level: str = "INFO"
    exit_code: int = 1


# Global settings instance
settings = Settings()
