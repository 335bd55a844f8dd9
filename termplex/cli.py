from __future__ import annotations

import argparse
import asyncio
import errno
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel

from .adapter.terminal import TerminalAdapter
from .config.paths import TermplexPaths
from .config.settings import TermplexSettings, load_settings
from .core.progress import ProgressHandle
from .core.scheduler import QueuedAdapter
from .core.session_log import SessionLogger, log_exception, set_active_logger


async def _child_session(index: int, session: QueuedAdapter) -> None:
    label = f"session {index}"
    session.log(f"{label}: started at level {session.level}")
    await session.queue(lambda adapter: adapter.log.info(label, "blocking work done"))
    grandchild = session.new_adapter()
    grandchild.log.skip(f"{label}.1: nested output waits for every ancestor")
    session.log.ok(f"{label}: finished")


async def run_demo(
    console: Console,
    settings: TermplexSettings,
    *,
    sessions: int = 3,
    steps: int = 5,
) -> int:
    root = QueuedAdapter(
        adapter=TerminalAdapter(console=console),
        level=settings.main_level,
        progress_enabled=settings.progress,
    )

    async def work(handle: ProgressHandle) -> int:
        for index in range(steps):
            await asyncio.sleep(0.05)
            handle.step("root", f"step {index + 1}/{steps}")
        return steps

    try:
        await root.progress(work, name="Preparing sessions")
        children = [root.new_adapter() for _ in range(sessions)]
        tasks = [
            asyncio.create_task(_child_session(index + 1, child))
            for index, child in enumerate(children)
        ]
        root.log(f"root: spawned {len(children)} sessions")
        await asyncio.gather(*tasks)
        await root.on_idle()
    finally:
        root.close()
    console.print(Panel("All sessions drained.", title="termplex", border_style="cyan"))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="termplex - priority ordered terminal I/O for nested sessions"
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--debug",
        help="Write a session log (error, warn, info, debug, jobs or all)",
    )
    subparsers = parser.add_subparsers(dest="command")
    demo = subparsers.add_parser("demo", help="Interleave output from nested sessions")
    demo.add_argument("-n", "--sessions", type=int, default=3, help="Number of sub-sessions")
    demo.add_argument("--steps", type=int, default=5, help="Progress steps in the root session")
    demo.add_argument("--no-progress", action="store_true", help="Disable the progress display")
    args = parser.parse_args(argv)
    if args.version:
        from termplex import __version__

        print(f"termplex {__version__}")
        return
    if args.command != "demo":
        parser.print_help()
        return
    if args.sessions < 0 or args.steps < 0:
        parser.error("--sessions and --steps must not be negative")

    console = Console()
    paths = TermplexPaths(Path.cwd())
    settings = load_settings(paths, console)
    if args.no_progress:
        settings.progress = False
    session_logger = SessionLogger(paths, args.debug if args.debug is not None else settings.debug)
    set_active_logger(session_logger)
    try:
        code = asyncio.run(run_demo(console, settings, sessions=args.sessions, steps=args.steps))
        raise SystemExit(code)
    except BrokenPipeError:
        return
    except KeyboardInterrupt:
        return
    except OSError as exc:
        if exc.errno == errno.EPIPE:
            return
        log_exception("cli", exc)
        raise
    finally:
        session_logger.close()
        set_active_logger(None)


if __name__ == "__main__":
    main()
