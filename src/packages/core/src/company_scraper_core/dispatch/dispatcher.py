"""Turn a URL list into a job, its items and one queued task per item."""
from urllib.parse import urlparse

import structlog

from company_scraper_core.jobs import ScrapingRepository
from company_scraper_core.queue.base import (
    DEFAULT_RETRY_POLICY,
    RetryPolicy,
    ScrapeTask,
    TaskQueue,
)
from company_scraper_core.util import DispatchError

logger = structlog.get_logger()


def parse_url_list(text: str) -> list[str]:
    """Parse a newline-separated URL list.

    Blank lines, non-http(s) and relative URLs are dropped, as are
    duplicates. The first occurrence keeps its position.
    """
    seen: set[str] = set()
    urls = []
    for line in text.splitlines():
        url = line.strip()
        if not url or url in seen:
            continue
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            logger.debug("url_skipped", url=url)
            continue
        seen.add(url)
        urls.append(url)
    return urls


def dispatch_job(
    urls: list[str],
    *,
    repo: ScrapingRepository,
    queue: TaskQueue,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> str:
    """Create a job for ``urls`` and enqueue one task per URL.

    Every item is offered to the queue even if an earlier enqueue failed;
    any failure then raises DispatchError. Items already written stay in
    place. Returns the job id.
    """
    if not urls:
        raise DispatchError("No URLs to scrape")

    job = repo.create_job(total_urls=len(urls))
    items = repo.create_items(job.id, list(urls))
    repo.recompute_job_progress(job.id)

    failures = 0
    for item in items:
        task = ScrapeTask(item_id=item.id, url=item.url, job_id=job.id)
        try:
            queue.enqueue(task, policy)
        except Exception as e:
            failures += 1
            logger.error("enqueue_failed", job_id=job.id, item_id=item.id, url=item.url, error=str(e))

    if failures:
        raise DispatchError(f"Failed to enqueue {failures} of {len(items)} tasks for job {job.id}")

    logger.info("job_dispatched", job_id=job.id, total_urls=len(items))
    return job.id
