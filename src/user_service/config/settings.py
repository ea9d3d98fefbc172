from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # HTTP server (used by the bundled uvicorn runner only)
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000

    # Database configuration
    POSTGRES_DRIVER: str = "asyncpg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "users"

    # Full URL for non-Postgres engines, e.g. "sqlite+aiosqlite:///./users.db"
    DATABASE_URL_OVERRIDE: str | None = None

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    SQLALCHEMY_POOL_SIZE: int = 5
    SQLALCHEMY_MAX_OVERFLOW: int = 10
    # Seconds to wait for a pooled connection before giving up
    SQLALCHEMY_POOL_TIMEOUT: float = 30.0
    CREATE_TABLES_ON_STARTUP: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/user-service")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        - `DATABASE_URL_OVERRIDE` wins when set (SQLite or any other SQLAlchemy URL).
        - With `TESTING=True` and `TEST_POSTGRES_DB` set, the test database name is used
          so test runs never touch the regular database.
        - Otherwise the URL is assembled from the POSTGRES_* fields.

        Returns:
            str: The SQLAlchemy connection URL.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        db_name = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            db_name = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{db_name}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v):
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs,
        so `LOG_LEVEL=debug` in the environment is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v):
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    model_config = SettingsConfigDict(
        # .env next to the package root (src/user_service/.env)
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Settings are read from the environment once per process.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
