"""RQ workers as threads of one process.

Every thread runs the same cached executor, so all in-flight tasks share one
Fetcher and its bounded connection pool.
"""
import threading

import structlog
from redis import Redis
from rq import SimpleWorker
from rq.timeouts import TimerDeathPenalty

logger = structlog.get_logger()


class ThreadWorker(SimpleWorker):
    """A SimpleWorker that can run off the main thread.

    Job timeouts use a timer instead of SIGALRM, and signals are left to
    the main thread, which stops the workers itself.
    """

    death_penalty_class = TimerDeathPenalty
    busy = False

    def _install_signal_handlers(self):
        pass

    def execute_job(self, job, queue):
        self.busy = True
        try:
            return super().execute_job(job, queue)
        finally:
            self.busy = False

    def stop_after_current_job(self):
        """Leave the work loop once the job in hand (if any) is done."""
        self._stop_requested = True


def start_worker_threads(
    queue_names: list[str],
    connection: Redis,
    num_workers: int,
    worker_class=ThreadWorker,
) -> tuple[list, list[threading.Thread]]:
    """Start ``num_workers`` workers, each on its own daemon thread.

    Only the first runs the scheduler that releases delayed retries.
    """
    workers = [worker_class(queue_names, connection=connection) for _ in range(num_workers)]
    threads = []
    for n, worker in enumerate(workers):
        thread = threading.Thread(
            target=worker.work,
            kwargs={"with_scheduler": n == 0},
            name=f"rq-worker-{n}",
            daemon=True,
        )
        thread.start()
        threads.append(thread)
    logger.info("worker_threads_started", queues=queue_names, num_workers=num_workers)
    return workers, threads
