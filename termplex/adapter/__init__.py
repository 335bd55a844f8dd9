"""Terminal adapters."""

from .terminal import TerminalAdapter, TerminalLogger

__all__ = ["TerminalAdapter", "TerminalLogger"]
