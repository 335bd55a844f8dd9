from __future__ import annotations


class TermplexError(RuntimeError):
    """Base class for termplex errors."""


class JobCancelledError(TermplexError):
    """Raised to callers whose queued job was discarded before it started."""


class PromptCancelledError(TermplexError):
    """Raised when the user aborts a prompt (Ctrl+C or EOF)."""


class AdapterClosedError(TermplexError):
    """Raised when a closed adapter is asked to interact with the terminal."""
