from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckinStatus, Mood
from ..geo.model import Coordinates
from .model import AttendanceDay


class AttendanceRepository(Protocol):
    def get_recent_for_staff(self, staff_id: int, limit: int) -> Sequence[AttendanceDay]:
        raise NotImplementedError

    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        staff_id: int,
        work_date: date,
        checkin_time: datetime,
        status: CheckinStatus,
        is_remote: bool,
        notes: Optional[str] = None,
        mood: Optional[Mood] = None,
        photo_url: Optional[str] = None,
        location: Optional[Coordinates] = None,
    ) -> int:
        """Insert today's record; returns 0 if one already exists for (staff, day)."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        checkout_time: datetime,
        notes: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> bool:
        """Close an open record; False if it was already checked out."""

        raise NotImplementedError
