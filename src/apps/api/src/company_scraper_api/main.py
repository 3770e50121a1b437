"""FastAPI application entrypoint."""
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from company_scraper_api.routers import health, items, jobs, queue_status
from company_scraper_api.settings import get_settings
from company_scraper_core.jobs import get_repository
from company_scraper_core.util.logging import configure_logging

configure_logging(get_settings().log_level)
logger = structlog.get_logger()

app = FastAPI(title="Company Scraper API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(jobs.router, prefix="/api")
app.include_router(items.router, prefix="/api")
app.include_router(queue_status.router, prefix="/api")


@app.on_event("startup")
def startup():
    """Initialize on startup."""
    logger.info("initializing_database")
    get_repository().init_db()
