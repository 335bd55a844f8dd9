"""Configuration package."""

from __future__ import annotations

from .paths import TermplexPaths
from .settings import TermplexSettings, load_settings

__all__ = ["TermplexPaths", "TermplexSettings", "load_settings"]
