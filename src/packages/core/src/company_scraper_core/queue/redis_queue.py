"""Task queue on Redis via RQ."""
import structlog
from redis import Redis
from rq import Queue, Retry

from company_scraper_core.queue.base import (
    DEFAULT_RETRY_POLICY,
    QueueStatus,
    RetryPolicy,
    ScrapeTask,
)

logger = structlog.get_logger()

# Resolved by the worker process; the core never imports the worker package.
TASK_FUNCTION = "company_scraper_worker.tasks.run_scrape_task"

JOB_TIMEOUT = 600
RESULT_TTL = 3600
FAILURE_TTL = 86400


class RedisTaskQueue:
    """Enqueues scrape tasks for RQ workers.

    Delayed retries need a worker started with the scheduler enabled.
    """

    def __init__(self, connection: Redis, name: str = "scrape"):
        self.queue = Queue(name, connection=connection)

    @classmethod
    def from_url(cls, redis_url: str, name: str = "scrape") -> "RedisTaskQueue":
        return cls(Redis.from_url(redis_url), name=name)

    def ping(self) -> bool:
        """Raises redis.exceptions.ConnectionError if Redis is unreachable."""
        return self.queue.connection.ping()

    def enqueue(self, task: ScrapeTask, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> str:
        # enqueue_call keeps our job_id kwarg apart from RQ's own job_id.
        job = self.queue.enqueue_call(
            TASK_FUNCTION,
            kwargs=task.as_kwargs(),
            timeout=JOB_TIMEOUT,
            result_ttl=RESULT_TTL,
            failure_ttl=FAILURE_TTL,
            retry=Retry(
                max=policy.max_attempts - 1,
                interval=[int(delay) for delay in policy.intervals()],
            ),
            description=f"scrape {task.url}",
            meta={"item_id": task.item_id, "job_id": task.job_id},
        )
        logger.info(
            "task_enqueued",
            item_id=task.item_id,
            job_id=task.job_id,
            url=task.url,
            rq_job_id=job.id,
        )
        return job.id

    def status(self) -> QueueStatus:
        """Counts of waiting, active, completed, failed and delayed tasks."""
        q = self.queue
        return QueueStatus(
            waiting=q.count,
            active=q.started_job_registry.count,
            completed=q.finished_job_registry.count,
            failed=q.failed_job_registry.count,
            delayed=q.scheduled_job_registry.count,
        )
