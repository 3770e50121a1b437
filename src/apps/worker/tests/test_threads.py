"""Tests for running RQ workers as threads of one process."""
import threading
from concurrent.futures import ThreadPoolExecutor

from rq.timeouts import TimerDeathPenalty

from company_scraper_worker import tasks
from company_scraper_worker.threads import ThreadWorker, start_worker_threads


class RecordingWorker:
    def __init__(self, queues, connection):
        self.queues = queues
        self.connection = connection
        self.runs = []

    def work(self, with_scheduler=False):
        self.runs.append((threading.current_thread().name, with_scheduler))


def test_start_worker_threads():
    conn = object()
    workers, threads = start_worker_threads(["scrape"], conn, 4, worker_class=RecordingWorker)
    for thread in threads:
        thread.join(timeout=5)

    assert len(workers) == 4
    assert all(w.connection is conn and w.queues == ["scrape"] for w in workers)
    assert [w.runs for w in workers] == [
        [("rq-worker-0", True)],
        [("rq-worker-1", False)],
        [("rq-worker-2", False)],
        [("rq-worker-3", False)],
    ]


def test_thread_worker_avoids_signals():
    assert ThreadWorker.death_penalty_class is TimerDeathPenalty
    assert ThreadWorker.busy is False


def test_worker_threads_share_one_fetcher():
    tasks.get_executor.cache_clear()
    try:
        first = tasks.get_executor()
        with ThreadPoolExecutor(max_workers=4) as pool:
            executors = list(pool.map(lambda _: tasks.get_executor(), range(8)))
        assert all(e is first for e in executors)
        assert len({id(e.fetcher) for e in executors}) == 1
    finally:
        tasks.get_executor.cache_clear()
