"""Job and item repository using SQLite."""
import json
import os
import sqlite3
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import structlog

from company_scraper_core.jobs.models import (
    CompanyData,
    ItemStatus,
    JobProgress,
    JobStatus,
    ScrapingItem,
    ScrapingJob,
)
from company_scraper_core.jobs.progress import derive_progress
from company_scraper_core.settings import get_settings
from company_scraper_core.util import PersistenceError, generate_id, utc_now_iso

logger = structlog.get_logger()

SCHEMA = """
CREATE TABLE IF NOT EXISTS scraping_jobs (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL DEFAULT 'pending',
    total_urls INTEGER NOT NULL DEFAULT 0,
    processed_urls INTEGER NOT NULL DEFAULT 0,
    failed_urls INTEGER NOT NULL DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);
CREATE TABLE IF NOT EXISTS scraping_items (
    id TEXT PRIMARY KEY,
    job_id TEXT NOT NULL REFERENCES scraping_jobs(id) ON DELETE CASCADE,
    position INTEGER NOT NULL DEFAULT 0,
    url TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    last_error TEXT,
    started_at TEXT,
    finished_at TEXT,
    company_name TEXT,
    website TEXT,
    industry TEXT,
    headcount_range TEXT,
    hq_location TEXT,
    contacts TEXT,
    raw_data TEXT,
    created_at TEXT,
    updated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_scraping_items_job_id ON scraping_items(job_id);
"""

# Seconds a writer waits on a locked database before giving up.
BUSY_TIMEOUT = 30.0


def _job_from_row(row: sqlite3.Row) -> ScrapingJob:
    return ScrapingJob(
        id=row["id"],
        status=row["status"],
        total_urls=row["total_urls"] or 0,
        processed_urls=row["processed_urls"] or 0,
        failed_urls=row["failed_urls"] or 0,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _item_from_row(row: sqlite3.Row) -> ScrapingItem:
    data = dict(row)
    data.pop("position", None)
    data["contacts"] = json.loads(data["contacts"]) if data["contacts"] else None
    data["raw_data"] = json.loads(data["raw_data"]) if data["raw_data"] else None
    return ScrapingItem(**data)


class ScrapingRepository:
    """Persistence for scraping jobs and their items.

    Every method opens its own connection, so one repository can be shared
    by all worker threads. Any sqlite3 error surfaces as PersistenceError.
    """

    def __init__(self, path: str):
        self.path = path

    @contextmanager
    def get_conn(self):
        """Get a database connection, committing on success."""
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            conn = sqlite3.connect(self.path, timeout=BUSY_TIMEOUT)
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"Cannot open database {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(SCHEMA)
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e
        finally:
            conn.close()

    def init_db(self):
        """Create tables and switch the database to WAL mode."""
        with self.get_conn() as conn:
            conn.execute("PRAGMA journal_mode = WAL")

    def create_job(self, total_urls: int) -> ScrapingJob:
        """Insert a pending job."""
        job_id = generate_id()
        now = utc_now_iso()
        with self.get_conn() as conn:
            conn.execute(
                """
                INSERT INTO scraping_jobs (id, status, total_urls, processed_urls, failed_urls, created_at, updated_at)
                VALUES (?, ?, ?, 0, 0, ?, ?)
                """,
                (job_id, JobStatus.PENDING.value, total_urls, now, now),
            )
        logger.info("job_created", job_id=job_id, total_urls=total_urls)
        return ScrapingJob(
            id=job_id,
            status=JobStatus.PENDING,
            total_urls=total_urls,
            created_at=now,
            updated_at=now,
        )

    def create_items(self, job_id: str, urls: list[str]) -> list[ScrapingItem]:
        """Insert one pending item per URL, in order."""
        now = utc_now_iso()
        items = [
            ScrapingItem(
                id=generate_id(),
                job_id=job_id,
                url=url,
                status=ItemStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            for url in urls
        ]
        with self.get_conn() as conn:
            conn.executemany(
                """
                INSERT INTO scraping_items (id, job_id, position, url, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (item.id, job_id, pos, item.url, ItemStatus.PENDING.value, now, now)
                    for pos, item in enumerate(items)
                ],
            )
        logger.info("items_created", job_id=job_id, count=len(items))
        return items

    def get_job(self, job_id: str) -> ScrapingJob | None:
        """Get a job by ID."""
        with self.get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM scraping_jobs WHERE id = ?", (job_id,)
            ).fetchone()
            return _job_from_row(row) if row else None

    def get_item(self, item_id: str) -> ScrapingItem | None:
        """Get an item by ID."""
        with self.get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM scraping_items WHERE id = ?", (item_id,)
            ).fetchone()
            return _item_from_row(row) if row else None

    def list_items(self, job_id: str) -> list[ScrapingItem]:
        """List the items of a job in submission order."""
        with self.get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM scraping_items WHERE job_id = ? ORDER BY position",
                (job_id,),
            ).fetchall()
            return [_item_from_row(r) for r in rows]

    def list_jobs(self, limit: int = 20) -> list[ScrapingJob]:
        """List recent jobs, newest first."""
        with self.get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM scraping_jobs ORDER BY created_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return [_job_from_row(r) for r in rows]

    def list_recent_items(self, limit: int = 100) -> list[ScrapingItem]:
        """List recent items across all jobs, newest first."""
        with self.get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM scraping_items ORDER BY created_at DESC, position LIMIT ?",
                (limit,),
            ).fetchall()
            return [_item_from_row(r) for r in rows]

    def _update_item(self, item_id: str, fields: dict[str, Any]):
        fields["updated_at"] = utc_now_iso()
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with self.get_conn() as conn:
            cur = conn.execute(
                f"UPDATE scraping_items SET {assignments} WHERE id = ?",
                (*fields.values(), item_id),
            )
            if cur.rowcount == 0:
                logger.warning("item_not_found", item_id=item_id, status=fields.get("status"))

    def mark_processing(self, item_id: str):
        """Move an item to processing and stamp its start time."""
        self._update_item(
            item_id,
            {"status": ItemStatus.PROCESSING.value, "started_at": utc_now_iso()},
        )

    def complete_item(
        self, item_id: str, data: CompanyData, raw_data: dict[str, Any] | None = None
    ):
        """Store extracted fields and mark the item completed."""
        contacts = [c.model_dump() for c in data.contacts] if data.contacts else None
        self._update_item(
            item_id,
            {
                "status": ItemStatus.COMPLETED.value,
                "company_name": data.company_name,
                "website": data.website,
                "industry": data.industry,
                "headcount_range": data.headcount_range,
                "hq_location": data.hq_location,
                "contacts": json.dumps(contacts) if contacts else None,
                "raw_data": json.dumps(raw_data) if raw_data else None,
                "last_error": None,
                "finished_at": utc_now_iso(),
            },
        )

    def fail_item(self, item_id: str, error: str):
        """Mark an item failed with a human-readable error."""
        self._update_item(
            item_id,
            {
                "status": ItemStatus.FAILED.value,
                "last_error": error,
                "finished_at": utc_now_iso(),
            },
        )

    def recompute_job_progress(self, job_id: str) -> JobProgress | None:
        """Recompute a job's counters and status from its item statuses.

        The read and the write happen in one IMMEDIATE transaction, so
        concurrent callers each write a consistent snapshot. Returns None if
        the job does not exist.
        """
        with self.get_conn() as conn:
            conn.execute("BEGIN IMMEDIATE")
            job = conn.execute(
                "SELECT total_urls FROM scraping_jobs WHERE id = ?", (job_id,)
            ).fetchone()
            if job is None:
                logger.warning("job_not_found", job_id=job_id)
                return None
            rows = conn.execute(
                "SELECT status FROM scraping_items WHERE job_id = ?", (job_id,)
            ).fetchall()
            total = job["total_urls"]
            progress = derive_progress(total, [r["status"] for r in rows])
            conn.execute(
                """
                UPDATE scraping_jobs
                SET processed_urls = ?, failed_urls = ?, status = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    progress.processed,
                    progress.failed,
                    progress.status.value,
                    utc_now_iso(),
                    job_id,
                ),
            )
        logger.info(
            "job_progress_updated",
            job_id=job_id,
            processed=progress.processed,
            failed=progress.failed,
            total=total,
            status=progress.status.value,
        )
        return progress


@lru_cache
def get_repository() -> ScrapingRepository:
    """Get the process-wide repository for the configured database."""
    return ScrapingRepository(get_settings().sqlite_path)
