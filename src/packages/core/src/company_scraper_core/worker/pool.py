"""Bounded thread pool for scrape tasks, and an in-process queue on top of it."""
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor

import structlog
from tenacity import Retrying, stop_after_attempt, wait_exponential

from company_scraper_core.jobs import ItemStatus
from company_scraper_core.queue.base import DEFAULT_RETRY_POLICY, RetryPolicy, ScrapeTask
from company_scraper_core.worker.executor import TaskExecutor

logger = structlog.get_logger()


class WorkerPool:
    """Runs at most ``concurrency`` tasks at once.

    All threads share the executor, and therefore its fetcher's connection
    pool. A task that raises is retried under its RetryPolicy.
    """

    def __init__(self, executor: TaskExecutor, concurrency: int = 20, sleep=time.sleep):
        self.executor = executor
        self.concurrency = concurrency
        self._sleep = sleep
        self._pool = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="scrape-worker"
        )

    def _run_task(self, task: ScrapeTask, policy: RetryPolicy) -> ItemStatus:
        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(multiplier=policy.base_delay, exp_base=2),
            sleep=self._sleep,
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "task_retry_scheduled",
                item_id=task.item_id,
                job_id=task.job_id,
                attempt=state.attempt_number,
                error=str(state.outcome.exception()),
            ),
        )
        for attempt in retrying:
            with attempt:
                return self.executor.process_item(task)

    def submit(self, task: ScrapeTask, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> Future:
        """Schedule a task; the future resolves to its item status."""
        return self._pool.submit(self._run_task, task, policy)

    def run(
        self, tasks: list[ScrapeTask], policy: RetryPolicy = DEFAULT_RETRY_POLICY
    ) -> list[ItemStatus | Exception]:
        """Run tasks to completion; one outcome per task, in input order."""
        futures = [self.submit(task, policy) for task in tasks]
        outcomes = []
        for task, future in zip(tasks, futures):
            error = future.exception()
            if error is not None:
                logger.error("task_gave_up", item_id=task.item_id, job_id=task.job_id, error=str(error))
                outcomes.append(error)
            else:
                outcomes.append(future.result())
        return outcomes

    def shutdown(self, wait: bool = True):
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()


class LocalTaskQueue:
    """In-process queue: tasks go straight to a WorkerPool.

    Used when Redis is unavailable. Tasks are lost if the process exits.
    Only unfinished tasks are tracked; a future is dropped once it is done.
    """

    def __init__(self, pool: WorkerPool):
        self.pool = pool
        self.futures: dict[str, Future] = {}
        self._lock = threading.Lock()

    def enqueue(self, task: ScrapeTask, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> str:
        handle = f"local-{task.item_id}"
        future = self.pool.submit(task, policy)
        with self._lock:
            self.futures[handle] = future
        # Runs at once if the task already finished.
        future.add_done_callback(lambda f: self._forget(handle, f))
        logger.info("task_enqueued_locally", item_id=task.item_id, job_id=task.job_id, url=task.url)
        return handle

    def _forget(self, handle: str, future: Future):
        with self._lock:
            # A re-enqueued item reuses the handle; keep the newer future.
            if self.futures.get(handle) is future:
                del self.futures[handle]

    def join(self):
        """Wait for every submitted task to finish, including ones enqueued meanwhile."""
        while True:
            with self._lock:
                pending = list(self.futures.items())
            if not pending:
                return
            for handle, future in pending:
                future.exception()
                self._forget(handle, future)
