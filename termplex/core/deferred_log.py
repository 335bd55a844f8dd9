from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional

from rich.console import Console
from rich.markup import escape

from .errors import JobCancelledError
from .session_log import log_exception

if TYPE_CHECKING:
    from .scheduler import QueuedAdapter

ErrorSink = Callable[[BaseException], None]

_stderr_console: Optional[Console] = None


def report_to_stderr(exc: BaseException) -> None:
    global _stderr_console
    if _stderr_console is None:
        _stderr_console = Console(stderr=True)
    _stderr_console.print(
        f"[red]Deferred log write failed: {escape(type(exc).__name__)}: {escape(str(exc))}[/red]"
    )


class DeferredLogger:
    """Logger handle whose calls run later as log jobs on a scheduler.

    Every call returns immediately with the logger itself, so calls can be
    chained just like the terminal logger's. The real write happens when the
    scheduler reaches the job; a failing write goes to ``on_error`` because
    the original caller has already moved on.
    """

    def __init__(self, scheduler: "QueuedAdapter", on_error: Optional[ErrorSink] = None) -> None:
        self._scheduler = scheduler
        self._on_error = on_error or report_to_stderr
        self._pending: set[asyncio.Future[Any]] = set()

    @property
    def pending(self) -> tuple[asyncio.Future[Any], ...]:
        return tuple(self._pending)

    def __call__(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer(None, args, kwargs)

    def write(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("write", args, kwargs)

    def writeln(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("writeln", args, kwargs)

    def ok(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("ok", args, kwargs)

    def info(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("info", args, kwargs)

    def warn(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("warn", args, kwargs)

    def error(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("error", args, kwargs)

    def skip(self, *args: Any, **kwargs: Any) -> "DeferredLogger":
        return self._defer("skip", args, kwargs)

    def _defer(self, method: Optional[str], args: tuple, kwargs: dict) -> "DeferredLogger":
        def forward(adapter: Any) -> None:
            target = adapter.log if method is None else getattr(adapter.log, method)
            target(*args, **kwargs)

        future = self._scheduler.queue_log(forward)
        self._pending.add(future)
        future.add_done_callback(self._settle)
        return self

    def _settle(self, future: "asyncio.Future[Any]") -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None or isinstance(exc, JobCancelledError):
            return
        log_exception("log", exc)
        self._on_error(exc)
