"""Termplex package initialization."""

from importlib.metadata import version

__all__ = [
    "adapter",
    "cli",
    "config",
    "core",
]

# Single source of truth comes from package metadata defined in pyproject.toml
__version__ = version("termplex")
