from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"

DEFAULT_CONTACT_EMAIL = "support@listingoptimizer.app"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str | None = None
    DB_AUTO_CREATE_SCHEMA: bool = True

    # OpenAI settings
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_EXTRACTION_MODEL: str = "gpt-4o-search-preview"
    OPENAI_EXTRACTION_WEB_SEARCH: bool = True
    OPENAI_MAX_TOKENS: int = 8000
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_TIMEOUT_SECONDS: float | None = None  # None = wait for the AI service indefinitely

    # Daily quota settings
    MAX_OPTIMIZATIONS_PER_DAY: int = 5
    CONTACT_EMAIL: str | None = None

    # Browser client origins
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def contact_email(self) -> str:
        """Contact address shown when the daily limit is reached."""
        if self.CONTACT_EMAIL and self.CONTACT_EMAIL.strip():
            return self.CONTACT_EMAIL.strip()
        return DEFAULT_CONTACT_EMAIL

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
            config.update(
                {
                    "min_size": 1,
                    "max_size": 4,
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
