"""Configuration loading for termplex.

Settings are merged from the global ``~/.termplex/termplex.json``, then the
workspace ``.termplex/termplex.json``, then environment variables. Later
sources win.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from ..core.priority import MAIN_LEVEL
from .paths import TermplexPaths


@dataclass
class TermplexSettings:
    main_level: int = MAIN_LEVEL
    progress: bool = True
    debug: Any = None


def _as_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _as_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    cleaned = value.strip().lower()
    if cleaned in {"1", "true", "yes", "y", "on"}:
        return True
    if cleaned in {"0", "false", "no", "n", "off", ""}:
        return False
    return None


def _load_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    main_level = _as_int(os.getenv("TERMPLEX_MAIN_LEVEL"))
    if main_level is not None:
        values["main_level"] = main_level
    no_progress = _as_flag(os.getenv("TERMPLEX_NO_PROGRESS"))
    if no_progress is not None:
        values["progress"] = not no_progress
    debug = os.getenv("TERMPLEX_DEBUG")
    if debug is not None:
        values["debug"] = debug
    return values


def _read_json(path: Path, console: Console) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        loaded = json.loads(path.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[yellow]Ignoring {path}: {exc}[/yellow]")
        return {}
    if not isinstance(loaded, dict):
        console.print(f"[yellow]Ignoring {path}: expected an object.[/yellow]")
        return {}
    known = {item.name for item in fields(TermplexSettings)}
    return {key: value for key, value in loaded.items() if key in known}


def load_settings(
    paths: Optional[TermplexPaths] = None, console: Optional[Console] = None
) -> TermplexSettings:
    """Load settings from config files then env."""
    paths = paths or TermplexPaths(Path.cwd())
    console = console or Console(stderr=True)
    merged: Dict[str, Any] = {}
    merged.update(_read_json(paths.global_config_file, console))
    merged.update(_read_json(paths.config_file, console))
    merged.update(_load_env())
    settings = TermplexSettings(**merged)
    if not isinstance(settings.main_level, int) or settings.main_level <= 0:
        console.print(
            f"[yellow]Invalid main_level {settings.main_level!r}; using {MAIN_LEVEL}.[/yellow]"
        )
        settings.main_level = MAIN_LEVEL
    settings.progress = bool(settings.progress)
    return settings
