"""Scraping item endpoints."""
from fastapi import APIRouter, Depends

from company_scraper_api.deps import get_repo
from company_scraper_core.jobs import ScrapingRepository

router = APIRouter(prefix="/scraping-items", tags=["scraping-items"])


@router.get("")
def list_scraping_items(limit: int = 100, repo: ScrapingRepository = Depends(get_repo)):
    """List recently created items across all jobs."""
    return {"items": [item.model_dump() for item in repo.list_recent_items(limit=limit)]}
