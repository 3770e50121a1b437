"""Health check endpoint."""
from fastapi import APIRouter, Depends

from company_scraper_api.deps import get_repo
from company_scraper_core.jobs import ScrapingRepository
from company_scraper_core.util import PersistenceError

router = APIRouter(tags=["health"])


@router.get("/health")
def health(repo: ScrapingRepository = Depends(get_repo)):
    """Liveness plus a database round trip."""
    try:
        repo.list_jobs(limit=1)
    except PersistenceError as e:
        return {"status": "degraded", "database": str(e)}
    return {"status": "ok", "database": "ok"}
