"""Error types shared across the scraper."""


class ScraperError(Exception):
    """Base class for scraper errors."""


class ExtractionError(ScraperError):
    """Raised inside the extractor; never escapes it."""


class PersistenceError(ScraperError):
    """A database read or write failed. Tasks let this propagate so the queue retries them."""


class DispatchError(ScraperError):
    """A job could not be fully submitted to the queue."""
