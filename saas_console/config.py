"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Note: We use lru_cache on get_settings() to ensure we only load
    configuration once. Tests must set environment variables before
    the application modules are imported, or clear the cache.
    """

    # Database settings
    DATABASE_URL: str = "postgresql://localhost/saas_console"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Security settings
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Redis for public endpoint rate limiting. Empty string disables it.
    REDIS_URL: str = "redis://localhost:6379/0"

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Rate limiting (public share viewers, per client IP)
    PUBLIC_RATE_LIMIT_PER_MINUTE: int = 30
    RATE_LIMIT_BURST: int = 10

    # Platform owner
    SUPER_ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_TEAM_ID: int = 1
    SEED_ADMIN_NAME: str = "Super Admin"
    SEED_ADMIN_PASSWORD: str = "change-me-please"

    # Plans
    DEFAULT_PLAN_SLUG: str = "free"

    # Public share links
    PUBLIC_BASE_URL: str = "http://localhost:5173"
    SHARE_PAGE_PATH: str = "/share/page"
    SHARE_REPORT_PATH: str = "/share/r"
    SHARE_LOG_RETENTION: int = 5

    # IP geolocation for share visit logs. Empty string disables lookups.
    GEOIP_URL: str = "http://ip-api.com/json"
    GEOIP_TIMEOUT: float = 3.0
    GEOIP_LOOPBACK_FALLBACK_IP: str = "202.58.98.130"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only instantiate settings once.
    """
    return Settings()
