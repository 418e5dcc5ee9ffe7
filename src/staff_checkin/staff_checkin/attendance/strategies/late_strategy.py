from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ...core.enums import CheckinStatus
from ...shifts.model import Shift
from .base import CheckinStrategy, StatusDecision


class LateStrategy(CheckinStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, today: date, shift: Optional[Shift], grace_minutes: int) -> StatusDecision:
        note = None
        if shift:
            late_by = now - (datetime.combine(today, shift.start_time) + timedelta(minutes=grace_minutes))
            note = f"Late by {max(1, int(late_by.total_seconds() // 60))} min"
        return StatusDecision(status=CheckinStatus.LATE, note=note)
