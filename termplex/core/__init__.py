"""Priority scheduling of terminal I/O."""

from .deferred_log import DeferredLogger
from .errors import AdapterClosedError, JobCancelledError, PromptCancelledError, TermplexError
from .job_queue import PriorityJobQueue
from .priority import (
    BAND_SCALE,
    BLOCKING_PRIORITY,
    LOG_PRIORITY,
    MAIN_LEVEL,
    PROMPT_PRIORITY,
    JobPriority,
)
from .progress import ProgressGate, ProgressHandle, ProgressReporter
from .scheduler import QueuedAdapter
from .session_log import SessionLogger
from .types import Answers, InputOutputAdapter, Question

__all__ = [
    "AdapterClosedError",
    "Answers",
    "BAND_SCALE",
    "BLOCKING_PRIORITY",
    "DeferredLogger",
    "InputOutputAdapter",
    "JobCancelledError",
    "JobPriority",
    "LOG_PRIORITY",
    "MAIN_LEVEL",
    "PROMPT_PRIORITY",
    "PriorityJobQueue",
    "ProgressGate",
    "ProgressHandle",
    "ProgressReporter",
    "PromptCancelledError",
    "Question",
    "QueuedAdapter",
    "SessionLogger",
    "TermplexError",
]
