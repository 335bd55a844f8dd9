from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence, TypeVar, Union

T = TypeVar("T")

Answers = Dict[str, Any]

QUESTION_KINDS = ("input", "password", "confirm", "list")


@dataclass(frozen=True)
class Question:
    """A single question asked through an adapter's prompt capability."""

    name: str
    message: str
    kind: str = "input"
    default: Any = None
    choices: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.kind not in QUESTION_KINDS:
            raise ValueError(f"Unsupported question kind: {self.kind}")
        if self.kind == "list" and not self.choices:
            raise ValueError(f"Question {self.name!r} needs choices")


class Logger(Protocol):
    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...

    def write(self, *args: Any, **kwargs: Any) -> Any: ...

    def writeln(self, *args: Any, **kwargs: Any) -> Any: ...

    def ok(self, *args: Any, **kwargs: Any) -> Any: ...

    def info(self, *args: Any, **kwargs: Any) -> Any: ...

    def warn(self, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, *args: Any, **kwargs: Any) -> Any: ...

    def skip(self, *args: Any, **kwargs: Any) -> Any: ...


class InputOutputAdapter(Protocol):
    log: Logger

    async def prompt(
        self, questions: Sequence[Question], initial_answers: Optional[Answers] = None
    ) -> Answers: ...

    def close(self) -> None: ...


Task = Callable[[InputOutputAdapter], Union[T, Awaitable[T]]]
