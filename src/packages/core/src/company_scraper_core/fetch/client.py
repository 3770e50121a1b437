"""HTTP fetcher over a shared, bounded connection pool."""
from dataclasses import dataclass
from functools import lru_cache

import httpx
import structlog

from company_scraper_core.fetch.errors import FetchError, classify_error

logger = structlog.get_logger()

FETCH_TIMEOUT = 30.0
MAX_REDIRECTS = 5
MAX_CONNECTIONS = 10
MAX_KEEPALIVE_CONNECTIONS = 5

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@dataclass
class FetchedPage:
    """Markup returned for a URL."""

    url: str
    final_url: str
    status_code: int
    html: str


class Fetcher:
    """Fetches page markup.

    One instance owns one httpx.Client, which is safe to share between
    threads; all concurrent tasks of a process should use the same Fetcher
    so they share its keep-alive pool.
    """

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(
            headers=DEFAULT_HEADERS,
            # Waiting for a free pooled connection is not a fetch timeout.
            timeout=httpx.Timeout(FETCH_TIMEOUT, pool=None),
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            limits=httpx.Limits(
                max_connections=MAX_CONNECTIONS,
                max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            ),
            transport=transport,
        )

    def fetch(self, url: str) -> FetchedPage:
        """Fetch a page, raising FetchError on transport failure or status >= 400."""
        logger.debug("fetch_started", url=url)
        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = classify_error(e)
            logger.warning("fetch_failed", url=url, kind=error.kind.value, error=str(error))
            raise error from e

        if response.status_code >= 400:
            error = FetchError.http_status(response.status_code)
            logger.warning("fetch_failed", url=url, kind=error.kind.value, error=str(error))
            raise error

        html = response.text
        logger.info(
            "fetch_succeeded",
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_length=len(html),
        )
        return FetchedPage(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=html,
        )

    def close(self):
        """Close pooled connections."""
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@lru_cache
def get_fetcher() -> Fetcher:
    """Get the process-wide fetcher (cached)."""
    return Fetcher()
