"""Job management module."""
from company_scraper_core.jobs.models import (
    CompanyData,
    Contact,
    ItemStatus,
    JobProgress,
    JobStatus,
    ScrapingItem,
    ScrapingJob,
)
from company_scraper_core.jobs.progress import derive_progress
from company_scraper_core.jobs.repo import ScrapingRepository, get_repository

__all__ = [
    "CompanyData",
    "Contact",
    "ItemStatus",
    "JobProgress",
    "JobStatus",
    "ScrapingItem",
    "ScrapingJob",
    "derive_progress",
    "ScrapingRepository",
    "get_repository",
]
