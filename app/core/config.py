# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    All values have local-development defaults; override via env vars
    or a `.env` file in the working directory:
      - DATABASE_URL (SQLAlchemy URL, SQLite file by default)
      - IMAGE_DIR (directory where uploaded product images are written)

    Optional:
      - IMAGE_URL_PREFIX (path the image directory is served under)
      - LOG_LEVEL, DB_ECHO
    """

    PROJECT_NAME: str = "Product Catalog"

    # DB config
    DATABASE_URL: str = "sqlite:///./products.db"
    DB_ECHO: bool = False

    # Image storage
    IMAGE_DIR: str = "public/images"
    IMAGE_URL_PREFIX: str = "/images"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
