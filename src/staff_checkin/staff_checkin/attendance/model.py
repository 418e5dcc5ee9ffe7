from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState, CheckinStatus, Mood
from ..geo.model import Coordinates


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one staff member's attendance for one calendar day."""

    attendance_id: int
    staff_id: int
    work_date: date
    checkin_time: datetime
    checkin_status: CheckinStatus
    checkout_time: Optional[datetime] = None
    notes: Optional[str] = None
    checkout_notes: Optional[str] = None
    mood: Optional[Mood] = None
    photo_url: Optional[str] = None
    checkout_photo_url: Optional[str] = None
    location: Optional[Coordinates] = None
    is_remote: bool = False

    @property
    def state(self) -> AttendanceState:
        if self.checkout_time is not None:
            return AttendanceState.CHECKED_OUT
        return AttendanceState.CHECKED_IN


@dataclass(frozen=True)
class TransitionRequest:
    """Everything the staff member supplies for a check-in or check-out."""

    notes: Optional[str] = None
    is_remote: bool = False
    location: Optional[Coordinates] = None
    photo: Optional[bytes] = None
    mood: Optional[Mood] = None
