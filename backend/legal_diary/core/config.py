# legal_diary/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Legal Diary"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str

    # JWT Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # Google Calendar OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = ""
    GOOGLE_API_TIMEOUT_SECONDS: float = 20.0
    # Access tokens expiring within this window are refreshed before use
    GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS: int = 300

    # Fernet key (urlsafe base64, 32 bytes) for OAuth tokens at rest
    TOKEN_ENCRYPTION_KEY: str = ""

    # Court calendar
    CALENDAR_TIMEZONE: str = "Asia/Kolkata"
    CALENDAR_STRICT_YEARS: bool = False
    DEFAULT_HEARING_TIME: str = "10:00"
    HEARING_EVENT_DURATION_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def google_enabled(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET and self.GOOGLE_REDIRECT_URI)


# Create settings instance
settings = Settings()
