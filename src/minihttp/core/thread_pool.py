"""
=============================================================================
WORKER POOL
=============================================================================

Connections are handled concurrently by an elastic pool of worker threads
fed from a task queue. One accepted connection becomes one task, and every
task gets a thread of its own right away:

    accept loop ──submit()──►  [ task queue ]
                                   │      │      │
                                   ▼      ▼      ▼
                               Worker-0 Worker-1 ... Worker-N

A connection that never sends anything ties up only its own worker.

=============================================================================
SIZING
=============================================================================

    min_workers     threads started up front and always kept
    idle_timeout    seconds an extra thread waits for work before exiting

submit() reserves an idle worker for the task. When none is idle it starts
a new one, so a queued task never waits behind a busy worker.

    idle worker available   → reserve it, queue the task
    all workers busy        → start one more worker, queue the task

=============================================================================
SHUTDOWN
=============================================================================

Workers exit when they pull the poison pill (None) off the queue.
shutdown(wait=True) lets queued connections finish first.

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
    """A deferred call: func(*args, **kwargs)."""
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Pulls tasks off the pool's queue until it receives the poison pill,
    or until it has been idle for idle_timeout and the pool can spare it.

    A task that raises is logged and counted; the worker carries on with
    the next one.
    """

    def __init__(self, pool: "ThreadPool", worker_id: int):
        # daemon: a stuck connection must not keep the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.pool = pool
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")
        task_queue = self.pool._task_queue

        while True:
            try:
                task = task_queue.get(timeout=self.pool.idle_timeout)
            except queue.Empty:
                if self.pool._retire(self):
                    break
                continue

            try:
                if task is None:
                    break
                self._execute(task)
            finally:
                task_queue.task_done()

            self.pool._worker_idle()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.pool._record(failed=False)
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            self.pool._record(failed=True)
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Elastic pool of worker threads.

        pool = ThreadPool(min_workers=4, idle_timeout=30.0)
        pool.start()

        pool.submit(handle_connection, args=(conn,))

        pool.shutdown(wait=True)
    """

    def __init__(self, min_workers: int = 4, idle_timeout: float = 30.0):
        if min_workers < 1:
            raise ValueError("min_workers must be at least 1")
        if idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")

        self.min_workers = min_workers
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()

        # _idle counts workers waiting on the queue that no queued task has
        # claimed yet. Guarded by _lock together with _workers and counters.
        self._workers: list[Worker] = []
        self._idle = 0
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

        self._tasks_completed = 0
        self._tasks_failed = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Spawn the initial min_workers threads."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        self._shutdown = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
                self._idle += 1
        self._started = True

    def _add_worker(self) -> Worker:
        # Caller holds self._lock
        worker = Worker(pool=self, worker_id=self._next_worker_id)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ):
        """
        Queue func(*args, **kwargs), starting a worker for it if none is idle.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        with self._lock:
            if self._idle > 0:
                self._idle -= 1
            else:
                logger.debug(
                    f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
                )
                self._add_worker()

        self._task_queue.put(task)

    def _worker_idle(self):
        with self._lock:
            self._idle += 1

    def _retire(self, worker: Worker) -> bool:
        """Called by a worker whose get() timed out. True means exit."""
        with self._lock:
            if (
                self._shutdown
                or self._idle == 0
                or len(self._workers) <= self.min_workers
            ):
                return False
            self._idle -= 1
            self._workers.remove(worker)

        logger.debug(f"Worker {worker.worker_id} idle for {self.idle_timeout}s, retiring")
        return True

    def _record(self, failed: bool):
        with self._lock:
            if failed:
                self._tasks_failed += 1
            else:
                self._tasks_completed += 1

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let already-queued tasks run before stopping.
            timeout: Upper bound on the wait for the queue to drain.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if not wait:
            self._drain_queue()
        elif timeout is None:
            self._task_queue.join()
        else:
            deadline = time.time() + timeout
            while self._task_queue.unfinished_tasks and time.time() < deadline:
                time.sleep(0.05)
            if self._task_queue.unfinished_tasks:
                logger.warning("Shutdown timeout, abandoning queued tasks")
                self._drain_queue()

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()
            self._idle = 0

        for _ in workers:
            self._task_queue.put(None)

        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    def _drain_queue(self):
        """Drop queued tasks that no worker has picked up yet."""
        while True:
            try:
                self._task_queue.get_nowait()
            except queue.Empty:
                return
            self._task_queue.task_done()

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def queue_size(self) -> int:
        """Tasks not yet picked up by a worker."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {
                "total": self.worker_count,
                "busy": self.busy_workers,
            },
            "tasks": {
                "queued": self.queue_size,
                "completed": self._tasks_completed,
                "failed": self._tasks_failed,
            },
        }
