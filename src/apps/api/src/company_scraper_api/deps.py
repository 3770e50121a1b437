"""Shared dependencies for routers."""
from functools import lru_cache

import structlog
from redis.exceptions import RedisError

from company_scraper_api.settings import get_settings
from company_scraper_core.extract import Extractor
from company_scraper_core.fetch import get_fetcher
from company_scraper_core.jobs import ScrapingRepository, get_repository
from company_scraper_core.queue import RedisTaskQueue, TaskQueue
from company_scraper_core.worker import LocalTaskQueue, TaskExecutor, WorkerPool

logger = structlog.get_logger()


def get_repo() -> ScrapingRepository:
    return get_repository()


@lru_cache
def get_local_queue() -> LocalTaskQueue:
    """In-process queue used when Redis is unreachable."""
    settings = get_settings()
    executor = TaskExecutor(
        repo=get_repository(),
        fetcher=get_fetcher(),
        extractor=Extractor(),
        request_delay_ms=settings.request_delay_ms,
    )
    return LocalTaskQueue(WorkerPool(executor, concurrency=settings.worker_concurrency))


def get_task_queue() -> TaskQueue:
    """RQ queue if Redis answers, else the in-process fallback."""
    settings = get_settings()
    try:
        queue = RedisTaskQueue.from_url(settings.redis_url, name=settings.queue_name)
        queue.ping()
        return queue
    except RedisError as e:
        logger.warning("redis_unavailable_running_in_process", error=str(e))
        return get_local_queue()
