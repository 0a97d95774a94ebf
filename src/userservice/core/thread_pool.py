"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling connections from a bounded queue.
This is what keeps one slow client or one slow query from blocking every
other request.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop ──► submit(conn) ──► [ task queue (queue_size) ]      │
    │                        │                     │                       │
    │                        │ queue full          │ get()                 │
    │                        ▼                     ▼                       │
    │                   return False      ┌──────────┐ ┌──────────┐       │
    │                   (caller sends     │ Worker 0 │ │ Worker 1 │ ...   │
    │                    503 and closes)  └──────────┘ └──────────┘       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With ``workers=1`` requests are served strictly one after another, in
accept order.

Shutdown uses the "poison pill" pattern: one None per worker is queued
after pending tasks, and a worker that receives None exits.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        submitted_at: Time the task was queued (for queue-wait logging).
    """
    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Daemon thread executing tasks until it receives a poison pill.

    Exceptions raised by a task are logged and do not kill the worker.
    """

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at
        if waited > 1.0:
            logger.warning(f"Task waited {waited:.2f}s in queue before Worker {self.worker_id} picked it up")

        try:
            task.func(*task.args)
            self.tasks_completed += 1
        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}")
            self.tasks_failed += 1
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size pool of worker threads.

    Usage:
        pool = ThreadPool(workers=4, queue_size=100)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,)):
            ...  # queue full, reject

        pool.shutdown(wait=True, timeout=30.0)
    """

    def __init__(self, workers: int = 4, queue_size: int = 100):
        self.workers = workers
        self.queue_size = queue_size
        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list = []
        self._started = False
        self._shutdown = False

    def start(self):
        """Create and start the worker threads."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.workers} workers")
        for worker_id in range(self.workers):
            worker = Worker(self._task_queue, worker_id)
            self._workers.append(worker)
            worker.start()

        self._started = True
        self._shutdown = False

    def submit(self, func: Callable[..., Any], args: tuple = ()) -> bool:
        """
        Queue a task without blocking.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started or self._shutdown:
            raise RuntimeError("Thread pool is not running")

        try:
            self._task_queue.put_nowait(Task(func=func, args=args))
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the workers.

        Args:
            wait: Let queued tasks finish before stopping.
            timeout: Upper bound on the wait, in seconds.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = time.time() + timeout if timeout else None
            while self._task_queue.unfinished_tasks:
                if deadline and time.time() > deadline:
                    logger.warning("Shutdown timeout, abandoning queued tasks")
                    break
                time.sleep(0.05)

        for _ in self._workers:
            try:
                self._task_queue.put(None, timeout=1.0)
            except queue.Full:
                pass

        for worker in self._workers:
            worker.join(timeout=2.0)

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def stats(self) -> dict:
        """Worker and task counters, logged at shutdown."""
        return {
            "workers": len(self._workers),
            "busy": sum(1 for w in self._workers if w.state == WorkerState.BUSY),
            "queued": self._task_queue.qsize(),
            "completed": sum(w.tasks_completed for w in self._workers),
            "failed": sum(w.tasks_failed for w in self._workers),
        }
