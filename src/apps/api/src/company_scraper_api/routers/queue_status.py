"""Queue status endpoint."""
from dataclasses import asdict

import structlog
from fastapi import APIRouter, HTTPException
from redis.exceptions import RedisError

from company_scraper_api.settings import get_settings
from company_scraper_core.queue import RedisTaskQueue

router = APIRouter(prefix="/queue", tags=["queue"])
logger = structlog.get_logger()


@router.get("/status")
def queue_status():
    """Task counts on the RQ scrape queue."""
    settings = get_settings()
    try:
        status = RedisTaskQueue.from_url(settings.redis_url, name=settings.queue_name).status()
    except RedisError as e:
        logger.warning("queue_status_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Queue unavailable")
    return {"queue": settings.queue_name, **asdict(status)}
