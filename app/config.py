from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True  # False renders coloured console lines for local runs

    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/fc_dialer"

    # Redis (optional donation-lookup cache)
    REDIS_URL: str | None = None
    DONATION_CACHE_TTL_S: int = 6 * 60 * 60

    # Access control
    APP_PASSWORD: str | None = None
    SESSION_SECRET: str = "change-me"
    SESSION_COOKIE_NAME: str = "dialer_session"
    SESSION_MAX_AGE_DAYS: int = 30

    # OnePage CRM (contacts, notes, call logging)
    ONEPAGE_USER_ID: str | None = None
    ONEPAGE_API_KEY: str | None = None
    ONEPAGE_BASE_URL: str = "https://app.onepagecrm.com/api/v3"
    ONEPAGE_DONOR_TAG: str = "FCI Donor"

    # Neon CRM (donations)
    NEON_CRM_ORG_ID: str | None = None
    NEON_CRM_API_KEY: str | None = None
    NEON_CRM_BASE_URL: str = "https://api.neoncrm.com/v2"

    CRM_REQUEST_TIMEOUT: float = 15.0
    CRM_MAX_CONCURRENCY: int = 5

    # =================================================================
    # DIALER SETTINGS
    # =================================================================
    DIALER_TIMEZONE: str = "UTC"
    QUEUE_SIZE: int = 30
    QUEUE_INCLUDE_CALL_NOTES: bool = True
    SCORING_TRIBUTE_BONUS_ENABLED: bool = True
    SCORING_NEW_CONTACT_BONUS_ENABLED: bool = True
    DEFAULT_SUGGESTED_ASK: int = 180
    BACKGROUND_TASK_LIMIT: int = 20

    # Gamification
    XP_PER_LEVEL: int = 500
    BOSS_WIN_XP: int = 500
    BOSS_DEFAULT_HP: int = 5

    # Season
    SEASON_START: date = date(2026, 1, 1)
    SEASON_END: date = date(2026, 4, 30)
    SEASON_GOAL: float = 40000.0
    SEASON_TOTAL_WEEKS: int = 17

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 5
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def onepage_configured(self) -> bool:
        return bool(self.ONEPAGE_USER_ID and self.ONEPAGE_API_KEY)

    def neon_configured(self) -> bool:
        return bool(self.NEON_CRM_ORG_ID and self.NEON_CRM_API_KEY)

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            # Shorter timeout so local misconfiguration fails fast
            config.update({"timeout": 15.0})

        return config


settings = Settings()
