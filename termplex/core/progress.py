"""Best-effort progress display around blocking work.

A live display only makes sense when nothing else is about to write to the
terminal, so the reporter shows one only when the shared queue is empty and
no other display is active. Otherwise the work runs right away with a step
callback that does nothing.
"""

from __future__ import annotations

import inspect
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar, Union

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .session_log import log_debug, log_warn

if TYPE_CHECKING:
    from .scheduler import QueuedAdapter

T = TypeVar("T")

STEP_UNITS = 10
DEFAULT_PROGRESS_NAME = "Working"

StepCallback = Callable[..., None]
DisplayFactory = Callable[[Optional[Console]], Progress]


class ProgressGate:
    """Shared flag telling whether a progress display is active."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = False

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def try_acquire(self) -> bool:
        with self._lock:
            if self._active:
                return False
            self._active = True
            return True

    def release(self) -> None:
        with self._lock:
            self._active = False


@dataclass(frozen=True)
class ProgressHandle:
    step: StepCallback


def _noop_step(prefix: str, message: str, *args: Any) -> None:
    return None


def default_display(console: Optional[Console]) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


async def _call(fn: Callable[[ProgressHandle], Union[T, Awaitable[T]]], handle: ProgressHandle) -> T:
    result = fn(handle)
    if inspect.isawaitable(result):
        return await result
    return result


class ProgressReporter:
    def __init__(
        self,
        scheduler: "QueuedAdapter",
        gate: ProgressGate,
        *,
        enabled: bool = True,
        display_factory: Optional[DisplayFactory] = None,
    ) -> None:
        self.scheduler = scheduler
        self.gate = gate
        self.enabled = enabled
        self._display_factory = display_factory or default_display

    async def progress(
        self,
        fn: Callable[[ProgressHandle], Union[T, Awaitable[T]]],
        *,
        disabled: bool = False,
        name: Optional[str] = None,
    ) -> T:
        """Run ``fn`` as a blocking job with a live progress display when possible."""
        if self.scheduler.is_busy or disabled or not self.enabled or not self.gate.try_acquire():
            log_debug("progress", "progress.skipped", {"name": name})
            return await _call(fn, ProgressHandle(step=_noop_step))

        display, task_id = self._start_display(name)
        adapter = self.scheduler.adapter

        def step(prefix: str, message: str, *args: Any) -> None:
            if display is None or task_id is None:
                return
            display.advance(task_id, STEP_UNITS)
            adapter.log.info(prefix, message, *args)

        try:
            return await self.scheduler.queue(lambda _adapter: _call(fn, ProgressHandle(step=step)))
        finally:
            self._finish_display(display)
            self.gate.release()
            log_debug("progress", "progress.finalized", {"name": name})

    def _start_display(self, name: Optional[str]) -> tuple[Optional[Progress], Optional[TaskID]]:
        console = getattr(self.scheduler.adapter, "console", None)
        try:
            display = self._display_factory(console)
            task_id = display.add_task(name or DEFAULT_PROGRESS_NAME, total=None)
            display.start()
        except Exception as exc:  # noqa: BLE001
            log_warn("progress", "progress.degraded", {"name": name, "error": str(exc)})
            return None, None
        log_debug("progress", "progress.acquired", {"name": name})
        return display, task_id

    def _finish_display(self, display: Optional[Progress]) -> None:
        if display is None:
            return
        try:
            display.stop()
        except Exception as exc:  # noqa: BLE001
            log_warn("progress", "progress.stop_failed", {"error": str(exc)})
