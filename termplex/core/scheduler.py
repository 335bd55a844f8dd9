"""Priority-banded scheduler serializing all terminal access.

Every ``QueuedAdapter`` in a hierarchy shares one ``PriorityJobQueue`` with a
single running slot and one terminal adapter. Each instance owns a level;
children always get a lower level than their parent, so anything a parent
submits outranks everything its descendants have pending.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

from .deferred_log import DeferredLogger, ErrorSink
from .job_queue import PriorityJobQueue
from .priority import (
    BLOCKING_PRIORITY,
    LOG_PRIORITY,
    MAIN_LEVEL,
    PROMPT_PRIORITY,
    JobPriority,
    band_for,
)
from .progress import DisplayFactory, ProgressGate, ProgressHandle, ProgressReporter
from .session_log import get_active_logger, log_job, log_warn
from .types import Answers, InputOutputAdapter, Question

T = TypeVar("T")


class QueuedAdapter:
    """Terminal adapter front end that runs every interaction as a queued job.

    Example:
        root = QueuedAdapter(adapter=TerminalAdapter())
        child = root.new_adapter()
        child.log("from the child")       # waits behind anything root queues
        answers = await root.prompt([Question("name", "Your name?")])
        await root.on_idle()
        root.close()
    """

    def __init__(
        self,
        *,
        adapter: Optional[InputOutputAdapter] = None,
        queue: Optional[PriorityJobQueue] = None,
        level: Optional[int] = None,
        progress_gate: Optional[ProgressGate] = None,
        progress_enabled: bool = True,
        display_factory: Optional[DisplayFactory] = None,
        on_log_error: Optional[ErrorSink] = None,
    ) -> None:
        if adapter is None:
            from ..adapter.terminal import TerminalAdapter

            adapter = TerminalAdapter()
        self.adapter = adapter
        self._queue = queue if queue is not None else PriorityJobQueue(concurrency=1)
        self.level = level if level is not None else MAIN_LEVEL
        self._next_child_level = self.level - 1
        self._progress_gate = progress_gate if progress_gate is not None else ProgressGate()
        self._progress_enabled = progress_enabled
        self._display_factory = display_factory
        self._on_log_error = on_log_error
        self.log = DeferredLogger(self, on_error=on_log_error)
        self._reporter = ProgressReporter(
            self,
            self._progress_gate,
            enabled=progress_enabled,
            display_factory=display_factory,
        )

    @property
    def band(self) -> int:
        return band_for(self.level)

    @property
    def job_queue(self) -> PriorityJobQueue:
        return self._queue

    @property
    def is_busy(self) -> bool:
        return self._queue.size > 0 or self._queue.pending > 0

    def new_adapter(self, level: Optional[int] = None) -> "QueuedAdapter":
        """Spawn a child sharing this queue and adapter at a lower level."""
        if level is None:
            level = self._next_child_level
            self._next_child_level -= 1
        return QueuedAdapter(
            adapter=self.adapter,
            queue=self._queue,
            level=level,
            progress_gate=self._progress_gate,
            progress_enabled=self._progress_enabled,
            display_factory=self._display_factory,
            on_log_error=self._on_log_error,
        )

    def close(self) -> None:
        """Close the shared adapter and discard every job that has not started.

        Discarded callers get ``JobCancelledError``. The queue is cleared even
        when closing the adapter fails; that failure is raised afterwards.
        """
        try:
            self.adapter.close()
        finally:
            discarded = self._queue.clear()
            if discarded:
                log_warn("scheduler", "scheduler.close", {"level": self.level, "discarded": discarded})

    def prompt(
        self, questions: Sequence[Question], initial_answers: Optional[Answers] = None
    ) -> "asyncio.Future[Answers]":
        """Ask ``questions`` once every higher priority job has run."""
        return self._submit(
            lambda: self.adapter.prompt(questions, initial_answers), PROMPT_PRIORITY, "prompt"
        )

    async def on_idle(self) -> None:
        await self._queue.on_idle()

    def queue(
        self, task: Callable[[InputOutputAdapter], Union[T, Awaitable[T]]]
    ) -> "asyncio.Future[T]":
        """Basic queue, recommended for blocking calls."""
        return self._submit(lambda: task(self.adapter), BLOCKING_PRIORITY, "blocking")

    def queue_log(
        self, task: Callable[[InputOutputAdapter], Union[T, Awaitable[T]]]
    ) -> "asyncio.Future[T]":
        """Log has the highest priority within a level and should not block."""
        return self._submit(lambda: task(self.adapter), LOG_PRIORITY, "log")

    async def progress(
        self,
        fn: Callable[[ProgressHandle], Union[T, Awaitable[T]]],
        *,
        disabled: bool = False,
        name: Optional[str] = None,
    ) -> T:
        """Progress is blocking, but will be skipped if the queue is not empty."""
        return await self._reporter.progress(fn, disabled=disabled, name=name)

    def _submit(self, action: Callable[[], Any], rank: int, kind: str) -> "asyncio.Future[Any]":
        priority = JobPriority(level=self.level, rank=rank)
        future = self._queue.add(action, priority=priority)
        log_job("scheduler", "job.submitted", {"kind": kind, "priority": priority.value})
        if get_active_logger() is not None:
            future.add_done_callback(lambda done: _log_done(kind, priority, done))
        return future


def _log_done(kind: str, priority: JobPriority, future: "asyncio.Future[Any]") -> None:
    if future.cancelled():
        status = "cancelled"
    elif future.exception() is not None:
        status = "failed"
    else:
        status = "ok"
    log_job("scheduler", "job.done", {"kind": kind, "priority": priority.value, "status": status})
