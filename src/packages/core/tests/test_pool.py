"""Tests for the worker pool and the in-process queue."""
import threading

from company_scraper_core.fetch import FetchError, FetchErrorKind
from company_scraper_core.jobs import ItemStatus, JobStatus
from company_scraper_core.queue import RetryPolicy, ScrapeTask
from company_scraper_core.util import PersistenceError
from company_scraper_core.worker import LocalTaskQueue, WorkerPool

PAGE = '<html><body><h1 class="company-name">Co {n}</h1></body></html>'


def test_mixed_job_completes(repo, make_executor):
    urls = [f"https://site{n}.example" for n in range(10)]
    job = repo.create_job(total_urls=len(urls))
    items = repo.create_items(job.id, urls)
    pages = {
        url: PAGE.format(n=n) if n < 7 else FetchError.http_status(500)
        for n, url in enumerate(urls)
    }
    tasks = [ScrapeTask(item_id=i.id, url=i.url, job_id=job.id) for i in items]

    with WorkerPool(make_executor(pages), concurrency=4) as pool:
        outcomes = pool.run(tasks)

    assert outcomes.count(ItemStatus.COMPLETED) == 7
    assert outcomes.count(ItemStatus.FAILED) == 3
    stored = repo.get_job(job.id)
    assert (stored.processed_urls, stored.failed_urls) == (10, 3)
    assert stored.status == JobStatus.COMPLETED


class FlakyExecutor:
    """Raises PersistenceError for the first ``failures`` calls."""

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0
        self.lock = threading.Lock()

    def process_item(self, task):
        with self.lock:
            self.calls += 1
            if self.calls <= self.failures:
                raise PersistenceError("database is locked")
        return ItemStatus.COMPLETED


def test_retries_with_exponential_backoff():
    slept = []
    executor = FlakyExecutor(failures=2)
    pool = WorkerPool(executor, concurrency=1, sleep=slept.append)
    task = ScrapeTask(item_id="i", url="https://a.example", job_id="j")

    assert pool.submit(task).result() == ItemStatus.COMPLETED
    assert executor.calls == 3
    assert slept == [2.0, 4.0]
    pool.shutdown()


def test_gives_up_after_max_attempts():
    executor = FlakyExecutor(failures=5)
    pool = WorkerPool(executor, concurrency=1, sleep=lambda s: None)
    task = ScrapeTask(item_id="i", url="https://a.example", job_id="j")

    (outcome,) = pool.run([task], RetryPolicy(max_attempts=3))
    assert isinstance(outcome, PersistenceError)
    assert executor.calls == 3
    pool.shutdown()


def test_concurrency_is_bounded():
    active = 0
    peak = 0
    lock = threading.Lock()
    release = threading.Event()

    class SlowExecutor:
        def process_item(self, task):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            release.wait(timeout=0.05)
            with lock:
                active -= 1
            return ItemStatus.COMPLETED

    tasks = [ScrapeTask(item_id=str(n), url="https://a", job_id="j") for n in range(12)]
    with WorkerPool(SlowExecutor(), concurrency=3) as pool:
        pool.run(tasks)
    assert peak <= 3


def test_local_queue_runs_tasks(repo, make_executor):
    job = repo.create_job(total_urls=1)
    (item,) = repo.create_items(job.id, ["https://acme.example"])
    pool = WorkerPool(make_executor({item.url: PAGE.format(n=1)}), concurrency=2)
    queue = LocalTaskQueue(pool)

    handle = queue.enqueue(ScrapeTask(item_id=item.id, url=item.url, job_id=job.id))
    queue.join()

    assert handle == f"local-{item.id}"
    assert repo.get_item(item.id).company_name == "Co 1"
    assert repo.get_job(job.id).status == JobStatus.COMPLETED
    pool.shutdown()


def test_local_queue_forgets_finished_tasks(repo, make_executor):
    urls = [f"https://site{n}.example" for n in range(50)]
    job = repo.create_job(total_urls=len(urls))
    items = repo.create_items(job.id, urls)
    pool = WorkerPool(make_executor({u: PAGE.format(n=n) for n, u in enumerate(urls)}), concurrency=8)
    queue = LocalTaskQueue(pool)

    for item in items:
        queue.enqueue(ScrapeTask(item_id=item.id, url=item.url, job_id=job.id))
    queue.join()

    assert queue.futures == {}
    assert repo.get_job(job.id).status == JobStatus.COMPLETED
    pool.shutdown()
