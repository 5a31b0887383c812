from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    PROJECT_NAME: str = "Inventory API"
    API_PREFIX: str = ""

    # Content directory: photos and the JSON record file live here
    CACHE_DIR: str = "./cache"
    RECORD_STORE: Literal["json", "sql"] = "json"
    JSON_DB_FILENAME: str = "inventory.json"

    POSTGRES_SERVER: str = "postgres"
    POSTGRES_USER: str = "inventory"
    POSTGRES_PASSWORD: str = "inventory"
    POSTGRES_DB: str = "inventory"

    DATABASE_URL: str | None = None

    # Logging
    LOG_LEVEL: str = "INFO"
    SQLALCHEMY_LOG_LEVEL: str = "WARNING"
    UVICORN_ACCESS_LOG: bool = False
    REQUEST_LOGS_ENABLED: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def sqlalchemy_database_uri(self) -> str:
        """Build the SQLAlchemy database URI."""
        if self.DATABASE_URL is not None:
            return str(self.DATABASE_URL)
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    @property
    def cache_path(self) -> Path:
        return Path(self.CACHE_DIR).expanduser().resolve()

    @property
    def json_db_path(self) -> Path:
        return self.cache_path / self.JSON_DB_FILENAME


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return cached settings object to avoid re-parsing env vars."""
    return Settings()

# Export a module-level settings instance for easy imports
settings = get_settings()
