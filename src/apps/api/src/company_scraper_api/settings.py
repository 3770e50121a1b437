"""API settings."""
from functools import lru_cache

from company_scraper_core.settings import Settings as CoreSettings


class Settings(CoreSettings):
    """Application settings."""

    max_urls_per_job: int = 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
