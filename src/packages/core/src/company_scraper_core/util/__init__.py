"""Utility modules."""
from company_scraper_core.util.ids import generate_id, generate_request_id
from company_scraper_core.util.time import utc_now_iso
from company_scraper_core.util.errors import (
    ScraperError,
    ExtractionError,
    PersistenceError,
    DispatchError,
)

__all__ = [
    "generate_id",
    "generate_request_id",
    "utc_now_iso",
    "ScraperError",
    "ExtractionError",
    "PersistenceError",
    "DispatchError",
]
