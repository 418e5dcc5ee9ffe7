from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Mood
from ..core.exceptions import ValidationError
from ..geo.model import Coordinates
from ..shifts.repository import ShiftRepository
from ..users.repository import UserRepository
from .factory import CheckinStrategyFactory
from .model import AttendanceDay
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Persists check-in / check-out transitions.

    This is the authority on one record per (staff, day) and on the check-in
    status (OnTime / Late / Remote); callers only learn accepted or not.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        *,
        strategy_factory: CheckinStrategyFactory | None = None,
        grace_minutes: int = 5,
    ):
        self._attendance = attendance
        self._users = users
        self._shifts = shifts
        self._factory = strategy_factory or CheckinStrategyFactory()
        self._grace_minutes = int(grace_minutes)

    def submit_transition(
        self,
        staff_id: int,
        *,
        notes: Optional[str] = None,
        is_remote: bool = False,
        location: Optional[Coordinates] = None,
        photo_url: Optional[str] = None,
        mood: Optional[Mood] = None,
        now: datetime | None = None,
    ) -> bool:
        now = now or now_local()
        today = now.date()

        if not photo_url:
            logger.warning("Rejected transition for staff %s: no verification photo", staff_id)
            return False

        record = self._attendance.get_for_staff_and_date(staff_id, today)
        if record is None:
            return self._check_in(
                staff_id,
                now=now,
                notes=notes,
                is_remote=is_remote,
                location=location,
                photo_url=photo_url,
                mood=mood,
            )

        if record.checkout_time is not None:
            logger.info("Rejected transition for staff %s: already checked out on %s", staff_id, today)
            return False

        ok = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            checkout_time=now,
            notes=notes,
            photo_url=photo_url,
        )
        if ok:
            logger.info("Staff %s checked out at %s", staff_id, now.isoformat(timespec="seconds"))
        return ok

    def _check_in(
        self,
        staff_id: int,
        *,
        now: datetime,
        notes: Optional[str],
        is_remote: bool,
        location: Optional[Coordinates],
        photo_url: str,
        mood: Optional[Mood],
    ) -> bool:
        user = self._users.get_by_id(staff_id)
        if not user:
            raise ValidationError("Staff member does not exist")

        today = now.date()
        shift = self._shifts.get_by_id(user.shift_id) if user.shift_id else None
        strategy = self._factory.for_checkin(
            now=now, today=today, shift=shift, grace_minutes=self._grace_minutes, is_remote=is_remote
        )
        decision = strategy.decide_checkin(now=now, today=today, shift=shift, grace_minutes=self._grace_minutes)

        if notes and decision.note:
            stored_notes = f"{notes} ({decision.note})"
        else:
            stored_notes = notes or decision.note

        attendance_id = self._attendance.create_checkin(
            staff_id=staff_id,
            work_date=today,
            checkin_time=now,
            status=decision.status,
            is_remote=is_remote,
            notes=stored_notes,
            mood=mood,
            photo_url=photo_url,
            location=location,
        )
        if not attendance_id:
            return False

        logger.info("Staff %s checked in at %s (%s)", staff_id, now.isoformat(timespec="seconds"), decision.status.value)
        return True

    def get_today_record(self, staff_id: int, today: date) -> Optional[AttendanceDay]:
        return self._attendance.get_for_staff_and_date(staff_id, today)

    def get_history(self, staff_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceDay]:
        return self._attendance.get_recent_for_staff(staff_id, limit)

    def get_history_ui(self, staff_id: int, *, limit: int = 15) -> list[dict]:
        return [self._to_ui(r) for r in self.get_history(staff_id, limit=limit)]

    @staticmethod
    def _to_ui(r: AttendanceDay) -> dict:
        return {
            "date": r.work_date.strftime("%Y-%m-%d"),
            "check_in": r.checkin_time.strftime("%H:%M:%S"),
            "check_out": r.checkout_time.strftime("%H:%M:%S") if r.checkout_time else "-",
            "status": r.checkin_status.value,
            "mood": r.mood.value if r.mood else None,
            "is_remote": r.is_remote,
            "photo_url": r.photo_url,
        }
