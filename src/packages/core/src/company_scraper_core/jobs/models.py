"""Job and item models."""
from enum import Enum
from typing import Any

from pydantic import BaseModel


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemStatus(str, Enum):
    PENDING = "pending"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_ITEM_STATUSES = frozenset({ItemStatus.COMPLETED, ItemStatus.FAILED})


class Contact(BaseModel):
    """A person found on a company page."""

    name: str
    title: str
    email: str


class CompanyData(BaseModel):
    """Fields extracted from one page. Anything not found stays None."""

    company_name: str | None = None
    website: str | None = None
    industry: str | None = None
    headcount_range: str | None = None
    hq_location: str | None = None
    contacts: list[Contact] | None = None

    def extraction_method(self) -> str:
        """Summarize which fields were filled, e.g. "name+website"."""
        labels = [
            ("name", self.company_name),
            ("website", self.website),
            ("industry", self.industry),
            ("headcount", self.headcount_range),
            ("location", self.hq_location),
        ]
        filled = [label for label, value in labels if value]
        return "+".join(filled) if filled else "none"


class JobProgress(BaseModel):
    """Counters and status derived from a job's item statuses."""

    processed: int
    failed: int
    status: JobStatus


class ScrapingJob(BaseModel):
    """A batch of URLs submitted together."""

    id: str
    status: JobStatus
    total_urls: int
    processed_urls: int = 0
    failed_urls: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class ScrapingItem(BaseModel):
    """One URL of a job and whatever was extracted from it."""

    id: str
    job_id: str
    url: str
    status: ItemStatus
    last_error: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    company_name: str | None = None
    website: str | None = None
    industry: str | None = None
    headcount_range: str | None = None
    hq_location: str | None = None
    contacts: list[Contact] | None = None
    raw_data: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None
