from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import CheckinStatus
from ...shifts.model import Shift
from .base import CheckinStrategy, StatusDecision


class RemoteStrategy(CheckinStrategy):
    """Remote check-in; shift start is not enforced."""

    def decide_checkin(self, *, now: datetime, today: date, shift: Optional[Shift], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=CheckinStatus.REMOTE)
