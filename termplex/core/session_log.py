from __future__ import annotations

import json
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config.paths import TermplexPaths

LOG_LEVELS = ("error", "warn", "info", "debug")
LOG_LEVEL_PRIORITY = {level: idx for idx, level in enumerate(LOG_LEVELS)}
LOG_TYPE_JOBS = "jobs"


@dataclass(frozen=True)
class LogSelection:
    enabled_types: frozenset[str]
    enabled_levels: frozenset[str]


def resolve_debug_config(raw: Any) -> LogSelection:
    enabled_types: set[str] = set()
    enabled_levels: set[str] = set()

    def enable_all() -> None:
        enabled_types.add(LOG_TYPE_JOBS)
        enabled_levels.update(LOG_LEVELS)

    def handle_token(token: str) -> None:
        if token in {"all", "true", "1", "yes", "y", "on"}:
            enable_all()
        elif token == LOG_TYPE_JOBS:
            enabled_types.add(LOG_TYPE_JOBS)
        elif token in LOG_LEVEL_PRIORITY:
            # a level turns on every more severe level too
            enabled_levels.update(LOG_LEVELS[: LOG_LEVEL_PRIORITY[token] + 1])

    if raw is True:
        enable_all()
    elif isinstance(raw, str):
        for token in raw.split(","):
            handle_token(token.strip().lower())
    elif isinstance(raw, (list, tuple, set)):
        for item in raw:
            if isinstance(item, str):
                handle_token(item.strip().lower())
    return LogSelection(frozenset(enabled_types), frozenset(enabled_levels))


class SessionLogger:
    """Append Markdown diagnostics for one process when debug logging is enabled."""

    def __init__(self, paths: TermplexPaths, debug_config: Any) -> None:
        self.paths = paths
        self._session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._started_at = datetime.now(timezone.utc)
        self._path: Path | None = None
        self.enabled = False
        self._enabled_types: set[str] = set()
        self._enabled_levels: set[str] = set()
        self.configure(debug_config)

    @property
    def path(self) -> Path | None:
        return self._path

    def configure(self, debug_config: Any) -> None:
        selection = resolve_debug_config(debug_config)
        self._enabled_types = set(selection.enabled_types)
        self._enabled_levels = set(selection.enabled_levels)
        self.enabled = bool(self._enabled_types or self._enabled_levels)

    def close(self) -> None:
        self.enabled = False

    def log_job(self, source: str, event: str, content: Any | None = None) -> None:
        if not (self.enabled and LOG_TYPE_JOBS in self._enabled_types):
            return
        self._write(LOG_TYPE_JOBS, source, event, content)

    def log_level(self, source: str, level: str, event: str, content: Any | None = None) -> None:
        if not (self.enabled and level in self._enabled_levels):
            return
        self._write(level, source, event, content)

    def log_exception(self, source: str, exc: BaseException) -> None:
        if not (self.enabled and "error" in self._enabled_levels):
            return
        location = None
        frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
        if frames:
            last = frames[-1]
            location = f"{last.filename}:{last.lineno} in {last.name}"
        self.log_level(
            source,
            "error",
            "exception",
            {
                "type": type(exc).__name__,
                "message": str(exc),
                "location": location,
                "traceback": "".join(
                    traceback.format_exception(type(exc), exc, exc.__traceback__)
                ),
            },
        )

    def _ensure_path(self) -> Path:
        if self._path is None:
            self.paths.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.paths.logs_dir / f"termplex_session_{self._session_id}.md"
            if not self._path.exists():
                self._path.write_text(
                    "# Termplex Session Log\n\n"
                    f"- Session: {self._session_id}\n"
                    f"- Started: {self._started_at.isoformat()}\n\n"
                    "---\n\n",
                    encoding="utf-8",
                )
        return self._path

    def _write(self, log_type: str, source: str, event: str, content: Any) -> None:
        try:
            path = self._ensure_path()
            timestamp = datetime.now(timezone.utc).isoformat()
            entry = (
                f"## {timestamp} · {log_type}/{source} · {event}\n"
                f"{self._format_content_block(content)}\n\n"
            )
            with path.open("a", encoding="utf-8") as handle:
                handle.write(entry)
        except OSError:
            # an unwritable log directory turns logging off instead of failing callers
            self.close()

    def _format_content_block(self, content: Any) -> str:
        if isinstance(content, (dict, list)):
            body = json.dumps(content, indent=2, ensure_ascii=False, default=str)
            language = "json"
        else:
            body = "" if content is None else str(content)
            language = "text"
        return f"```{language}\n{body.rstrip()}\n```"


_ACTIVE_LOGGER: SessionLogger | None = None


def set_active_logger(logger: SessionLogger | None) -> None:
    global _ACTIVE_LOGGER
    _ACTIVE_LOGGER = logger


def get_active_logger() -> SessionLogger | None:
    return _ACTIVE_LOGGER


def log_job(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_job(source, event, content)


def log_exception(source: str, exc: BaseException) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_exception(source, exc)


def log_error(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "error", event, content)


def log_warn(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "warn", event, content)


def log_info(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "info", event, content)


def log_debug(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "debug", event, content)
