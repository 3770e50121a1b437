"""Tests for per-item task execution."""
import pytest

from company_scraper_core.extract import Extractor
from company_scraper_core.fetch import FetchError, FetchErrorKind
from company_scraper_core.jobs import ItemStatus, JobStatus
from company_scraper_core.queue import ScrapeTask
from company_scraper_core.util import PersistenceError
from company_scraper_core.worker import TaskExecutor

from conftest import FakeFetcher

ACME = '<html><body><h1 class="company-name">Acme Corp</h1></body></html>'


def single_task(repo, url="https://acme.example"):
    job = repo.create_job(total_urls=1)
    (item,) = repo.create_items(job.id, [url])
    return ScrapeTask(item_id=item.id, url=url, job_id=job.id)


def test_successful_item(repo, make_executor):
    task = single_task(repo)
    status = make_executor({task.url: ACME}).process_item(task)

    item = repo.get_item(task.item_id)
    assert status == ItemStatus.COMPLETED
    assert item.status == ItemStatus.COMPLETED
    assert item.company_name == "Acme Corp"
    assert item.website is None
    assert item.raw_data["url"] == task.url
    assert item.raw_data["html_length"] == len(ACME)
    assert "scraped_at" in item.raw_data
    job = repo.get_job(task.job_id)
    assert (job.processed_urls, job.failed_urls, job.status) == (1, 0, JobStatus.COMPLETED)


def test_unreachable_host_fails_item(repo, make_executor):
    task = single_task(repo, "https://no-such-host.invalid")
    pages = {task.url: FetchError.of_kind(FetchErrorKind.DNS_FAILURE)}
    status = make_executor(pages).process_item(task)

    item = repo.get_item(task.item_id)
    assert status == ItemStatus.FAILED
    assert item.last_error == "DNS resolution failed"
    assert item.finished_at is not None
    job = repo.get_job(task.job_id)
    assert job.failed_urls == 1
    assert job.status == JobStatus.FAILED


def test_rerun_overwrites_with_same_result(repo, make_executor):
    task = single_task(repo)
    executor = make_executor({task.url: ACME})
    executor.process_item(task)
    first = repo.get_item(task.item_id)
    executor.process_item(task)
    second = repo.get_item(task.item_id)

    assert second.status == ItemStatus.COMPLETED
    assert second.company_name == first.company_name
    assert second.contacts == first.contacts
    assert repo.get_job(task.job_id).processed_urls == 1


def test_rate_limit_delay(repo, recognizer):
    task = single_task(repo)
    slept = []
    executor = TaskExecutor(
        repo=repo,
        fetcher=FakeFetcher({task.url: ACME}),
        extractor=Extractor(recognizer),
        request_delay_ms=500,
        sleep=slept.append,
    )
    executor.process_item(task)
    assert slept == [0.5]


class ExplodingExtractor:
    def extract(self, html):
        raise ValueError("boom")


def test_unexpected_error_fails_item(repo, make_executor):
    task = single_task(repo)
    status = make_executor({task.url: ACME}, extractor=ExplodingExtractor()).process_item(task)

    assert status == ItemStatus.FAILED
    assert repo.get_item(task.item_id).last_error == "boom"
    assert repo.get_job(task.job_id).status == JobStatus.FAILED


def test_persistence_error_propagates_and_progress_still_recomputed(repo, make_executor, monkeypatch):
    task = single_task(repo)
    recomputed = []
    original = repo.recompute_job_progress

    def broken_complete(*args, **kwargs):
        raise PersistenceError("disk full")

    def tracking_recompute(job_id):
        recomputed.append(job_id)
        return original(job_id)

    monkeypatch.setattr(repo, "complete_item", broken_complete)
    monkeypatch.setattr(repo, "recompute_job_progress", tracking_recompute)

    with pytest.raises(PersistenceError):
        make_executor({task.url: ACME}).process_item(task)
    assert recomputed == [task.job_id]
    assert repo.get_item(task.item_id).status == ItemStatus.PROCESSING
