from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class Shift:
    """Domain entity: a work shift; ``start_time`` drives the OnTime/Late decision."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    break_minutes: int = 0

    def label(self) -> str:
        return f"{self.shift_name} ({self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')})"
