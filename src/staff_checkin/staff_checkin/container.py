from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import CheckinStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .campuses.mysql_campus_repository import MySQLCampusRepository
from .campuses.repository import CampusRepository
from .campuses.service import CampusService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_LATE_GRACE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .verification.camera import Camera, OpenCVCamera
from .verification.flow import GeoVerifiedAttendance
from .verification.location import LocationFeedRegistry
from .verification.notifications import CollectingNotifier
from .verification.photos import PhotoStorage
from .verification.registry import CheckinFlowRegistry


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    shifts_repo: ShiftRepository
    campuses_repo: CampusRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    campus_service: CampusService
    attendance_service: AttendanceService

    photo_storage: PhotoStorage
    location_feeds: LocationFeedRegistry
    checkin_flows: CheckinFlowRegistry

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: UserRepository,
    shifts_repo: ShiftRepository,
    campuses_repo: CampusRepository,
    attendance_repo: AttendanceRepository,
    photo_storage: PhotoStorage,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    require_location: bool = True,
    camera: Optional[Camera] = None,
    clock=now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services and the per-staff check-in flows over the given repositories."""

    auth_service = AuthService(users_repo, shifts_repo)
    campus_service = CampusService(campuses_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        shifts_repo,
        strategy_factory=CheckinStrategyFactory(),
        grace_minutes=grace_minutes,
    )
    location_feeds = LocationFeedRegistry()

    def make_flow(user_id: int) -> GeoVerifiedAttendance:
        def submit(**kwargs) -> bool:
            return attendance_service.submit_transition(user_id, now=clock(), **kwargs)

        def reload_record():
            return attendance_service.get_today_record(user_id, clock().date())

        return GeoVerifiedAttendance(
            staff_id=user_id,
            todays_record=reload_record(),
            geofence=campuses_repo.get_geofence_for_user(user_id),
            submit_transition=submit,
            photo_storage=photo_storage,
            notifier=CollectingNotifier(),
            location_feed=location_feeds.for_user(user_id),
            camera=camera,
            reload_record=reload_record,
            require_location=require_location,
            clock=clock,
        )

    return Container(
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        campuses_repo=campuses_repo,
        attendance_repo=attendance_repo,
        auth_service=auth_service,
        campus_service=campus_service,
        attendance_service=attendance_service,
        photo_storage=photo_storage,
        location_feeds=location_feeds,
        checkin_flows=CheckinFlowRegistry(make_flow, clock=clock),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    photo_storage: PhotoStorage,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    require_location: bool = True,
    camera_index: Optional[int] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        campuses_repo=MySQLCampusRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        photo_storage=photo_storage,
        grace_minutes=grace_minutes,
        require_location=require_location,
        camera=OpenCVCamera(camera_index) if camera_index is not None else None,
        conn=conn,
    )
