"""Scrape task run by RQ workers."""
from functools import lru_cache

import structlog

from company_scraper_core.extract import Extractor
from company_scraper_core.fetch import get_fetcher
from company_scraper_core.jobs import get_repository
from company_scraper_core.queue import ScrapeTask
from company_scraper_core.settings import get_settings
from company_scraper_core.worker import TaskExecutor

logger = structlog.get_logger()


@lru_cache
def get_executor() -> TaskExecutor:
    """Per-process executor; every worker thread uses it and its fetcher."""
    settings = get_settings()
    return TaskExecutor(
        repo=get_repository(),
        fetcher=get_fetcher(),
        extractor=Extractor(),
        request_delay_ms=settings.request_delay_ms,
    )


def run_scrape_task(item_id: str, url: str, job_id: str) -> str:
    """Scrape one URL into its item.

    Raising here hands the task back to RQ for a retry.
    """
    status = get_executor().process_item(ScrapeTask(item_id=item_id, url=url, job_id=job_id))
    return status.value
