"""Partition-keyed worker pool."""

import queue
import threading
from collections.abc import Callable

from .logger import logger

_STOP = object()


class PartitionedDispatcher:
    """Runs tasks on a fixed set of worker threads, one FIFO queue per worker.

    Tasks submitted with the same partition always land on the same worker
    and run one after another in submission order. Different partitions may
    run in parallel.
    """

    def __init__(self, worker_count: int, queue_size: int = 100):
        """Initialize the dispatcher.

        Args:
            worker_count: Number of worker threads
            queue_size: Pending tasks per worker before ``submit`` blocks
        """
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.worker_count = worker_count
        self._queues: list[queue.Queue] = [queue.Queue(maxsize=queue_size) for _ in range(worker_count)]
        self._threads = [
            threading.Thread(target=self._work, args=(q,), name=f"inventory-sync-worker-{i}", daemon=True)
            for i, q in enumerate(self._queues)
        ]
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        for thread in self._threads:
            thread.start()
        self._started = True
        logger.info(f"Partition workers started | workers={self.worker_count}")

    def worker_for(self, partition: int) -> int:
        return partition % self.worker_count

    def submit(self, partition: int, task: Callable[[], None]) -> None:
        """Queue a task on the worker owning ``partition``; blocks while that queue is full."""
        self._queues[self.worker_for(partition)].put(task)

    def _work(self, tasks: queue.Queue) -> None:
        while True:
            task = tasks.get()
            try:
                if task is _STOP:
                    return
                task()
            except Exception as e:
                logger.exception(f"Worker task failed | error={e}")
            finally:
                tasks.task_done()

    def join(self) -> None:
        """Block until every queued task has run."""
        for tasks in self._queues:
            tasks.join()

    def shutdown(self, timeout: float = 10.0) -> None:
        """Let queued tasks finish, then stop the workers."""
        if not self._started:
            return
        for tasks in self._queues:
            tasks.put(_STOP)
        for thread in self._threads:
            thread.join(timeout)
        self._started = False
        logger.info("Partition workers stopped")
