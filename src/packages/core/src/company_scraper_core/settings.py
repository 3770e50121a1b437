"""Shared settings for the API and the worker."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Scraper settings, read from the environment or a .env file."""

    redis_url: str = "redis://redis:6379/0"
    sqlite_path: str = "/data/scraper.db"
    queue_name: str = "scrape"
    worker_concurrency: int = 20
    request_delay_ms: int = 500
    spacy_model: str = "en_core_web_sm"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
