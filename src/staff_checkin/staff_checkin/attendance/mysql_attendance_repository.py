from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import CheckinStatus, Mood
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Coordinates
from .model import AttendanceDay
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, user_id, work_date, checkin_time, checkin_status, checkout_time,
    notes, checkout_notes, mood, photo_url, checkout_photo_url, latitude, longitude, is_remote
"""


def _to_day(r: Dict[str, Any]) -> AttendanceDay:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = Coordinates(latitude=float(r["latitude"]), longitude=float(r["longitude"]))

    return AttendanceDay(
        attendance_id=int(r["attendance_id"]),
        staff_id=int(r["user_id"]),
        work_date=r["work_date"],
        checkin_time=r["checkin_time"],
        checkin_status=CheckinStatus(r["checkin_status"]),
        checkout_time=r.get("checkout_time"),
        notes=r.get("notes"),
        checkout_notes=r.get("checkout_notes"),
        mood=Mood(r["mood"]) if r.get("mood") else None,
        photo_url=r.get("photo_url"),
        checkout_photo_url=r.get("checkout_photo_url"),
        location=location,
        is_remote=bool(r.get("is_remote")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_recent_for_staff(self, staff_id: int, limit: int) -> Sequence[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_attendance
                WHERE user_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (staff_id, int(limit)),
            )
            return [_to_day(r) for r in fetchall(cur)]

    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_attendance
                WHERE user_id=%s AND work_date=%s
                """,
                (staff_id, work_date),
            )
            r = fetchone(cur)
            return _to_day(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO staff_attendance(
                        user_id, work_date, checkin_time, checkin_status, notes, mood,
                        photo_url, latitude, longitude, is_remote
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        staff_id,
                        work_date,
                        checkin_time,
                        status.value,
                        notes,
                        mood.value if mood else None,
                        photo_url,
                        location.latitude if location else None,
                        location.longitude if location else None,
                        1 if is_remote else 0,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # UNIQUE(user_id, work_date): someone else already checked this staff member in today.
            if e.errno == errorcode.ER_DUP_ENTRY:
                logger.warning("Duplicate check-in for staff %s on %s", staff_id, work_date)
                return 0
            raise

    def update_checkout(
        self,
        *,
        attendance_id: int,
        checkout_time: datetime,
        notes: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE staff_attendance
                SET checkout_time=%s, checkout_notes=%s, checkout_photo_url=%s
                WHERE attendance_id=%s AND checkout_time IS NULL
                """,
                (checkout_time, notes, photo_url, int(attendance_id)),
            )
            return cur.rowcount > 0
