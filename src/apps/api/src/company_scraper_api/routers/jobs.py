"""Scraping job endpoints."""
import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from company_scraper_api.deps import get_repo, get_task_queue
from company_scraper_api.settings import get_settings
from company_scraper_core.dispatch import dispatch_job, parse_url_list
from company_scraper_core.jobs import ScrapingRepository
from company_scraper_core.queue import TaskQueue
from company_scraper_core.util import DispatchError

router = APIRouter(prefix="/scraping-jobs", tags=["scraping-jobs"])
logger = structlog.get_logger()


class ScrapingJobCreate(BaseModel):
    """Request to scrape a list of URLs.

    ``urls`` and ``url_list`` (newline-separated, as in an uploaded text
    file) may be combined.
    """

    urls: list[str] = Field(default_factory=list)
    url_list: str | None = None


@router.post("")
def create_scraping_job(
    body: ScrapingJobCreate,
    repo: ScrapingRepository = Depends(get_repo),
    queue: TaskQueue = Depends(get_task_queue),
):
    """Create a job and queue one task per URL."""
    text = "\n".join(body.urls)
    if body.url_list:
        text = f"{text}\n{body.url_list}"
    urls = parse_url_list(text)
    if not urls:
        raise HTTPException(status_code=400, detail="No valid http(s) URLs provided")

    max_urls = get_settings().max_urls_per_job
    if len(urls) > max_urls:
        raise HTTPException(
            status_code=400,
            detail=f"Too many URLs ({len(urls)}); the limit is {max_urls} per job",
        )

    try:
        job_id = dispatch_job(urls, repo=repo, queue=queue)
    except DispatchError as e:
        logger.error("job_dispatch_failed", error=str(e))
        raise HTTPException(status_code=503, detail=str(e))
    return {"job_id": job_id, "total_urls": len(urls)}


@router.get("")
def list_scraping_jobs(limit: int = 20, repo: ScrapingRepository = Depends(get_repo)):
    """List recent jobs, newest first."""
    return {"jobs": [j.model_dump() for j in repo.list_jobs(limit=limit)]}


@router.get("/{job_id}")
def get_scraping_job(job_id: str, repo: ScrapingRepository = Depends(get_repo)):
    """Get a job with its items."""
    job = repo.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return {
        **job.model_dump(),
        "items": [item.model_dump() for item in repo.list_items(job_id)],
    }


@router.post("/{job_id}/reconcile")
def reconcile_scraping_job(job_id: str, repo: ScrapingRepository = Depends(get_repo)):
    """Recompute a job's counters and status from its items."""
    progress = repo.recompute_job_progress(job_id)
    if progress is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return {"job_id": job_id, **progress.model_dump()}
