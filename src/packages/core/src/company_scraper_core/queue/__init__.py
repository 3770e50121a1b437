"""Task queue backends."""
from company_scraper_core.queue.base import (
    DEFAULT_RETRY_POLICY,
    QueueStatus,
    RetryPolicy,
    ScrapeTask,
    TaskQueue,
)
from company_scraper_core.queue.redis_queue import RedisTaskQueue

__all__ = [
    "DEFAULT_RETRY_POLICY",
    "QueueStatus",
    "RetryPolicy",
    "ScrapeTask",
    "TaskQueue",
    "RedisTaskQueue",
]
