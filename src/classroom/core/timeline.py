"""Lesson timeline: maps elapsed minutes to lesson phases."""

from dataclasses import dataclass
from typing import List

LESSON_MINUTES = 45.0
TICK_MINUTES = 0.5


@dataclass(frozen=True)
class PhaseWindow:
    phase: str
    start_minute: float
    end_minute: float  # exclusive

    def contains(self, minutes: float) -> bool:
        return self.start_minute <= minutes < self.end_minute


PHASE_WINDOWS: List[PhaseWindow] = [
    PhaseWindow("start", 0, 1),
    PhaseWindow("intro", 1, 8),
    PhaseWindow("development1", 8, 25),
    PhaseWindow("development2", 25, 35),
    PhaseWindow("summary", 35, 42),
    PhaseWindow("end", 42, 45),
]

PHASES = tuple(w.phase for w in PHASE_WINDOWS)


def phase_for(minutes: float) -> str:
    """Return the phase covering ``minutes``; anything unmatched is ``end``."""
    for window in PHASE_WINDOWS:
        if window.contains(minutes):
            return window.phase
    return "end"
