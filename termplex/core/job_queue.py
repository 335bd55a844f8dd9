"""Priority job queue with a bounded number of concurrently running jobs.

Jobs are plain callables. The highest priority ready job starts first and
jobs of equal priority start in submission order. Submission is synchronous:
``add`` places the job in the queue before it returns, so the order of
``add`` calls is the order the queue sees.
"""

from __future__ import annotations

import asyncio
import heapq
import inspect
import itertools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from .errors import JobCancelledError
from .session_log import log_warn

Action = Callable[[], Union[Any, Awaitable[Any]]]


@dataclass(eq=False)
class _QueuedJob:
    priority: Any
    sequence: int
    action: Action
    future: "asyncio.Future[Any]"

    def __lt__(self, other: "_QueuedJob") -> bool:
        # heapq pops the smallest entry: higher priority first, then older
        if self.priority != other.priority:
            return self.priority > other.priority
        return self.sequence < other.sequence


class PriorityJobQueue:
    """Runs submitted jobs highest priority first, at most ``concurrency`` at a time."""

    def __init__(self, concurrency: int = 1) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self._heap: list[_QueuedJob] = []
        self._counter = itertools.count()
        self._pending = 0
        self._running: set[asyncio.Task[None]] = set()
        self._idle_waiters: list[asyncio.Future[None]] = []

    @property
    def size(self) -> int:
        """Number of queued jobs that have not started yet."""
        return len(self._heap)

    @property
    def pending(self) -> int:
        """Number of jobs currently running."""
        return self._pending

    @property
    def is_idle(self) -> bool:
        return not self._heap and self._pending == 0

    def add(self, action: Action, *, priority: Any) -> "asyncio.Future[Any]":
        """Queue ``action`` and return a future for its result.

        Must be called while an event loop is running. The action may return a
        plain value or an awaitable; exceptions it raises are set on the future.
        """
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(
            self._heap,
            _QueuedJob(
                priority=priority,
                sequence=next(self._counter),
                action=action,
                future=future,
            ),
        )
        self._start_next()
        return future

    async def on_idle(self) -> None:
        """Return once no job is queued or running."""
        if self.is_idle:
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._idle_waiters.append(waiter)
        await waiter

    def clear(self) -> int:
        """Discard queued jobs and reject their futures. Running jobs keep going."""
        discarded, self._heap = self._heap, []
        for job in discarded:
            if not job.future.done():
                job.future.set_exception(
                    JobCancelledError(f"job discarded before it started (priority {job.priority})")
                )
        if discarded:
            log_warn("queue", "queue.clear", {"discarded": len(discarded)})
        self._notify_idle()
        return len(discarded)

    def _start_next(self) -> None:
        while self._pending < self.concurrency and self._heap:
            job = heapq.heappop(self._heap)
            if job.future.done():
                # the caller gave up on it (cancelled) before it started
                continue
            self._pending += 1
            task = asyncio.ensure_future(self._run(job))
            self._running.add(task)
            task.add_done_callback(self._running.discard)
        self._notify_idle()

    async def _run(self, job: _QueuedJob) -> None:
        try:
            result = job.action()
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            job.future.cancel()
            raise
        except Exception as exc:  # noqa: BLE001
            if not job.future.done():
                job.future.set_exception(exc)
        else:
            if not job.future.done():
                job.future.set_result(result)
        finally:
            self._pending -= 1
            self._start_next()

    def _notify_idle(self) -> None:
        if not self.is_idle:
            return
        waiters, self._idle_waiters = self._idle_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
