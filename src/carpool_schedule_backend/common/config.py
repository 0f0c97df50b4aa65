'''
Settings, read once from the environment and `.env`.
'''
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Every field maps to an environment variable of the same name.
    The two database URLs are required; the rest have working defaults.
    """
    # --- Application ---
    APP_NAME: str = "Carpool Schedule Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Schedule-slot validation and capacity engine for group carpool trips."
    TEST_MODE: bool = False

    # --- Database ---
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Scheduling ---
    # IANA zone used when a caller does not say where it is.
    DEFAULT_TIMEZONE: str = "UTC"

    # --- HTTP ---
    BACKEND_CORS_ORIGINS: list[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        """DATABASE_URL_TEST while TEST_MODE is on, DATABASE_URL_PROD otherwise."""
        return self.DATABASE_URL_TEST if self.TEST_MODE else self.DATABASE_URL_PROD


settings = Settings()
