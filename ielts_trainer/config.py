"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database (managed Postgres of the backend service)
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = False

    # Auth provider
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    AUTH_TIMEOUT_SECONDS: int = 10
    SITE_URL: Optional[str] = None  # Falls back to the request's base URL
    COOKIE_SECURE: bool = False

    # Redis (round state); empty disables it
    REDIS_URL: Optional[str] = "redis://redis:6379/0"

    # Application
    APP_NAME: str = "IELTS Trainer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Practice
    ROUND_TTL_SECONDS: int = 3600  # 1 hour
    DEFAULT_CATEGORY: str = "mixed"
    DEFAULT_DIFFICULTY: str = "medium"
    FAVORITE_WRITE_RETRIES: int = 1

    # Rate limiting of email links
    LOGIN_LINKS_PER_MINUTE: int = 5
    LOGIN_LINKS_PER_HOUR: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def auth_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


# Global settings instance
settings = Settings()
