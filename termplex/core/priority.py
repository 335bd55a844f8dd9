"""Priority classes and bands used to order terminal jobs.

A job's priority is a (level, rank) pair compared level first. The level
belongs to the scheduler that submitted the job (the root session uses
``MAIN_LEVEL`` and every child gets a strictly lower one), the rank comes
from the job class. Comparing the pair lexicographically orders jobs exactly
like the flattened ``rank + level * BAND_SCALE`` value as long as ranks stay
below ``BAND_SCALE``.
"""

from __future__ import annotations

from dataclasses import dataclass

BLOCKING_PRIORITY = 10
PROMPT_PRIORITY = 10
LOG_PRIORITY = 20

MAIN_LEVEL = 1000
BAND_SCALE = 100


@dataclass(frozen=True, order=True)
class JobPriority:
    level: int
    rank: int

    def __post_init__(self) -> None:
        if not 0 <= self.rank < BAND_SCALE:
            raise ValueError(f"rank must be within [0, {BAND_SCALE}), got {self.rank}")

    @property
    def value(self) -> int:
        return self.rank + band_for(self.level)


def band_for(level: int) -> int:
    return level * BAND_SCALE
