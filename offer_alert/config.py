"""Application configuration"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Offer Alert"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # database
    DATABASE_URL: str = "sqlite:///./offer_alert.db"

    # auth
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # offers
    BYPASS_OFFER_LIMITS: bool = False

    # domain sync
    FOLLOWER_PAGE_SIZE: int = 1000
    SYNC_RATE_LIMIT: str = "10/minute"
    RATE_LIMIT_ENABLED: bool = True

    # scheduler
    ENABLE_SCHEDULER: bool = False
    EXPIRY_SWEEP_INTERVAL_HOURS: int = 6

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """設定を取得（プロセス内でキャッシュ）"""
    return Settings()
