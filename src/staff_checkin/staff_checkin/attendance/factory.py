from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..shifts.model import Shift
from .strategies.base import CheckinStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy
from .strategies.remote_strategy import RemoteStrategy


@dataclass
class CheckinStrategyFactory:
    """Factory Pattern: choose the check-in status strategy.

    Remote wins over shift timing; without a shift every on-site check-in is on time.
    """

    def for_checkin(
        self,
        *,
        now: datetime,
        today: date,
        shift: Optional[Shift],
        grace_minutes: int,
        is_remote: bool = False,
    ) -> CheckinStrategy:
        if is_remote:
            return RemoteStrategy()
        if not shift:
            return OnTimeStrategy()

        shift_start = datetime.combine(today, shift.start_time)
        if now <= shift_start + timedelta(minutes=grace_minutes):
            return OnTimeStrategy()
        return LateStrategy()
