"""Shared fixtures and fakes."""
import pytest

from company_scraper_core.extract import Entities, Extractor
from company_scraper_core.fetch import FetchedPage, FetchError
from company_scraper_core.jobs import ScrapingRepository
from company_scraper_core.worker import TaskExecutor


class FakeRecognizer:
    """Reports each known entity that occurs in the text, in text order."""

    def __init__(self, organizations=(), places=(), people=()):
        self.known = {
            "organizations": list(organizations),
            "places": list(places),
            "people": list(people),
        }
        self.calls = 0
        self.lengths: list[int] = []

    def recognize(self, text: str) -> Entities:
        self.calls += 1
        self.lengths.append(len(text))

        def found(names):
            hits = [n for n in names if n in text]
            return sorted(hits, key=text.index)

        return Entities(
            organizations=found(self.known["organizations"]),
            places=found(self.known["places"]),
            people=found(self.known["people"]),
        )


class FakeFetcher:
    """Serves canned pages; a FetchError value is raised instead of returned."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.fetched: list[str] = []

    def fetch(self, url: str) -> FetchedPage:
        self.fetched.append(url)
        page = self.pages[url]
        if isinstance(page, FetchError):
            raise page
        return FetchedPage(url=url, final_url=url, status_code=200, html=page)


@pytest.fixture
def repo(tmp_path):
    r = ScrapingRepository(str(tmp_path / "scraper.db"))
    r.init_db()
    return r


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def make_executor(repo, recognizer):
    def make(pages: dict, extractor=None) -> TaskExecutor:
        return TaskExecutor(
            repo=repo,
            fetcher=FakeFetcher(pages),
            extractor=extractor or Extractor(recognizer),
            request_delay_ms=0,
        )

    return make
