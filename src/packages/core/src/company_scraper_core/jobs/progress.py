"""Job progress derivation.

Job counters are never incremented. They are recomputed from the current
item statuses every time, so any number of concurrent or repeated calls
converge on the same row.
"""
from collections.abc import Iterable

from company_scraper_core.jobs.models import (
    ItemStatus,
    JobProgress,
    JobStatus,
    TERMINAL_ITEM_STATUSES,
)


def derive_progress(total: int, statuses: Iterable[ItemStatus | str]) -> JobProgress:
    """Derive (processed, failed, status) for a job with ``total`` URLs."""
    processed = 0
    failed = 0
    for raw in statuses:
        status = ItemStatus(raw)
        if status in TERMINAL_ITEM_STATUSES:
            processed += 1
        if status is ItemStatus.FAILED:
            failed += 1

    if total <= 0 or processed < total:
        job_status = JobStatus.PROCESSING
    elif failed == total:
        job_status = JobStatus.FAILED
    else:
        job_status = JobStatus.COMPLETED
    return JobProgress(processed=processed, failed=failed, status=job_status)
