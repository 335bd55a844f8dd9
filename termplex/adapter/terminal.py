from __future__ import annotations

import asyncio
from typing import Any, Optional, Sequence

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from ..core.errors import AdapterClosedError, PromptCancelledError
from ..core.types import Answers, Question

STATUS_STYLES = {
    "ok": "green",
    "info": "cyan",
    "warn": "yellow",
    "error": "red",
    "skip": "dim",
}


def _join(args: Sequence[Any]) -> str:
    return " ".join(str(arg) for arg in args)


class TerminalLogger:
    """Writes log output straight to a rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def __call__(self, *args: Any) -> "TerminalLogger":
        return self.writeln(*args)

    def write(self, *args: Any) -> "TerminalLogger":
        self.console.print(_join(args), end="", markup=False, highlight=False, soft_wrap=True)
        return self

    def writeln(self, *args: Any) -> "TerminalLogger":
        self.console.print(_join(args), markup=False, highlight=False, soft_wrap=True)
        return self

    def ok(self, *args: Any) -> "TerminalLogger":
        return self._status("ok", args)

    def info(self, *args: Any) -> "TerminalLogger":
        return self._status("info", args)

    def warn(self, *args: Any) -> "TerminalLogger":
        return self._status("warn", args)

    def error(self, *args: Any) -> "TerminalLogger":
        return self._status("error", args)

    def skip(self, *args: Any) -> "TerminalLogger":
        return self._status("skip", args)

    def _status(self, label: str, args: Sequence[Any]) -> "TerminalLogger":
        style = STATUS_STYLES[label]
        self.console.print(
            f"[{style}]{label:>5}[/{style}] {escape(_join(args))}",
            highlight=False,
            soft_wrap=True,
        )
        return self


class TerminalAdapter:
    """Default adapter: rich for output, prompt_toolkit and rich prompts for input."""

    def __init__(
        self,
        console: Optional[Console] = None,
        session: Optional[PromptSession] = None,
    ) -> None:
        self.console = console or Console()
        self.log = TerminalLogger(self.console)
        self._session = session
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def prompt(
        self, questions: Sequence[Question], initial_answers: Optional[Answers] = None
    ) -> Answers:
        """Ask each question in order, skipping the ones already answered."""
        if self._closed:
            raise AdapterClosedError("terminal adapter is closed")
        answers: Answers = dict(initial_answers or {})
        for question in questions:
            if question.name in answers:
                continue
            try:
                answers[question.name] = await self._ask(question)
            except (KeyboardInterrupt, EOFError) as exc:
                raise PromptCancelledError(f"prompt {question.name!r} was cancelled") from exc
        return answers

    def close(self) -> None:
        self._closed = True

    async def _ask(self, question: Question) -> Any:
        if question.kind in {"input", "password"}:
            if self._session is None:
                self._session = PromptSession()
            default = "" if question.default is None else str(question.default)
            return await self._session.prompt_async(
                f"{question.message} ",
                is_password=question.kind == "password",
                default=default,
            )
        loop = asyncio.get_running_loop()
        if question.kind == "confirm":
            return await loop.run_in_executor(
                None,
                lambda: Confirm.ask(
                    question.message, console=self.console, default=bool(question.default)
                ),
            )
        options: dict[str, Any] = {"console": self.console, "choices": list(question.choices)}
        if question.default is not None:
            options["default"] = question.default
        return await loop.run_in_executor(None, lambda: Prompt.ask(question.message, **options))
