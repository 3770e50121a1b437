"""RQ worker entrypoint."""
import signal
import threading
import time

import structlog
from redis import Redis

from company_scraper_core.extract.ner import get_nlp
from company_scraper_core.jobs import get_repository
from company_scraper_core.queue.redis_queue import JOB_TIMEOUT
from company_scraper_core.settings import get_settings
from company_scraper_core.util.logging import configure_logging
from company_scraper_worker.tasks import get_executor
from company_scraper_worker.threads import start_worker_threads

logger = structlog.get_logger()


def main():
    """Run worker threads on the scrape queue until SIGINT or SIGTERM."""
    settings = get_settings()
    configure_logging(settings.log_level)
    get_repository().init_db()

    logger.info("preloading_ner_model", model=settings.spacy_model)
    try:
        get_nlp(settings.spacy_model)
        logger.info("ner_model_ready")
    except Exception as e:
        logger.warning("ner_model_preload_failed", error=str(e))
    # Build the shared executor (and its fetcher) before any thread asks for it.
    get_executor()

    conn = Redis.from_url(settings.redis_url)
    workers, threads = start_worker_threads(
        [settings.queue_name], conn, settings.worker_concurrency
    )

    stop = threading.Event()

    def request_stop(signum, frame):
        logger.info("worker_shutdown_requested", signal=signum)
        for worker in workers:
            worker.stop_after_current_job()
        stop.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)

    while not stop.wait(1.0):
        if not any(t.is_alive() for t in threads):
            logger.error("worker_threads_exited")
            return

    # Busy workers finish their job; idle ones are daemon threads blocked on Redis.
    deadline = time.monotonic() + JOB_TIMEOUT
    for worker, thread in zip(workers, threads):
        if worker.busy:
            thread.join(timeout=max(0.0, deadline - time.monotonic()))
    logger.info("worker_stopped")


if __name__ == "__main__":
    main()
