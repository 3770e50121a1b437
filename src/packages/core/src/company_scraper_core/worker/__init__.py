"""Task execution and the bounded worker pool."""
from company_scraper_core.worker.executor import TaskExecutor
from company_scraper_core.worker.pool import LocalTaskQueue, WorkerPool

__all__ = ["TaskExecutor", "WorkerPool", "LocalTaskQueue"]
