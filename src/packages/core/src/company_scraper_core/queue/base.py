"""Task and retry policy shared by every queue backend."""
from dataclasses import asdict, dataclass
from typing import Protocol


@dataclass(frozen=True)
class ScrapeTask:
    """One URL to scrape for one item of a job."""

    item_id: str
    url: str
    job_id: str

    def as_kwargs(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class RetryPolicy:
    """Delivery attempts and exponential backoff between them."""

    max_attempts: int = 3
    base_delay: float = 2.0

    def intervals(self) -> list[float]:
        """Delay before each retry: base, 2 * base, 4 * base, ..."""
        return [self.base_delay * 2**n for n in range(self.max_attempts - 1)]


DEFAULT_RETRY_POLICY = RetryPolicy()


@dataclass
class QueueStatus:
    """Task counts by state."""

    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    delayed: int = 0


class TaskQueue(Protocol):
    def enqueue(self, task: ScrapeTask, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> str:
        """Submit a task and return its queue handle."""
        ...
