"""Per-URL task execution: delay, fetch, extract, persist, recompute progress."""
import time

import structlog

from company_scraper_core.extract import Extractor
from company_scraper_core.fetch import FetchError, Fetcher
from company_scraper_core.jobs import ItemStatus, ScrapingRepository
from company_scraper_core.queue.base import ScrapeTask
from company_scraper_core.util import PersistenceError, generate_request_id, utc_now_iso

logger = structlog.get_logger()


class TaskExecutor:
    """Runs one scrape task to a terminal item status.

    Fetch and other item-level errors end as a failed item. Persistence
    errors propagate so the queue redelivers the task; rerunning a task
    refetches the page and overwrites the item's fields.
    """

    def __init__(
        self,
        repo: ScrapingRepository,
        fetcher: Fetcher,
        extractor: Extractor,
        request_delay_ms: int = 500,
        sleep=time.sleep,
    ):
        self.repo = repo
        self.fetcher = fetcher
        self.extractor = extractor
        self.request_delay_ms = request_delay_ms
        self._sleep = sleep

    def process_item(self, task: ScrapeTask) -> ItemStatus:
        """Process one item, then recompute its job's progress on every exit path."""
        log = logger.bind(
            request_id=generate_request_id(),
            item_id=task.item_id,
            job_id=task.job_id,
            url=task.url,
        )
        log.info("item_processing_started")
        try:
            return self._process(task, log)
        finally:
            self.repo.recompute_job_progress(task.job_id)

    def _process(self, task: ScrapeTask, log) -> ItemStatus:
        self.repo.mark_processing(task.item_id)
        try:
            self._apply_rate_limit()
            page = self.fetcher.fetch(task.url)
            data = self.extractor.extract(page.html)
            raw_data = {
                "url": task.url,
                "final_url": page.final_url,
                "html_length": len(page.html),
                "scraped_at": utc_now_iso(),
            }
            self.repo.complete_item(task.item_id, data, raw_data)
        except PersistenceError:
            raise
        except FetchError as e:
            log.warning("item_failed", error=str(e), kind=e.kind.value)
            self.repo.fail_item(task.item_id, str(e))
            return ItemStatus.FAILED
        except Exception as e:
            error = str(e) or e.__class__.__name__
            log.exception("item_failed", error=error)
            self.repo.fail_item(task.item_id, error)
            return ItemStatus.FAILED

        log.info(
            "item_completed",
            company_name=data.company_name,
            contact_count=len(data.contacts or []),
        )
        return ItemStatus.COMPLETED

    def _apply_rate_limit(self):
        if self.request_delay_ms > 0:
            self._sleep(self.request_delay_ms / 1000)
