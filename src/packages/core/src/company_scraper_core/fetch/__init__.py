"""Page fetching."""
from company_scraper_core.fetch.client import FetchedPage, Fetcher, get_fetcher
from company_scraper_core.fetch.errors import FetchError, FetchErrorKind, classify_error

__all__ = [
    "FetchedPage",
    "Fetcher",
    "get_fetcher",
    "FetchError",
    "FetchErrorKind",
    "classify_error",
]
