from __future__ import annotations

import io
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from src.staff_checkin.staff_checkin.attendance.model import AttendanceDay
from src.staff_checkin.staff_checkin.campuses.model import Campus
from src.staff_checkin.staff_checkin.container import build_services
from src.staff_checkin.staff_checkin.core.enums import CheckinStatus, Role
from src.staff_checkin.staff_checkin.core.exceptions import CameraUnavailable
from src.staff_checkin.staff_checkin.geo.model import Coordinates, Geofence
from src.staff_checkin.staff_checkin.shifts.model import Shift
from src.staff_checkin.staff_checkin.users.model import User
from src.staff_checkin.staff_checkin.verification.flow import GeoVerifiedAttendance
from src.staff_checkin.staff_checkin.verification.location import LocationFeedRegistry
from src.staff_checkin.staff_checkin.verification.notifications import CollectingNotifier
from src.staff_checkin.staff_checkin.verification.photos import StoredPhoto

CAMPUS_CENTER = Coordinates(latitude=6.5244, longitude=3.3792)
METERS_PER_DEGREE_LAT = 111_195.0


def north_of(center: Coordinates, meters: float) -> Coordinates:
    return Coordinates(latitude=center.latitude + meters / METERS_PER_DEGREE_LAT, longitude=center.longitude)


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.username == username), None)


class InMemoryShifts:
    def __init__(self, shifts: list[Shift]):
        self.shifts = {s.shift_id: s for s in shifts}

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.shifts.get(shift_id)


class InMemoryCampuses:
    def __init__(self, campuses: list[Campus], users: InMemoryUsers):
        self.campuses = {c.campus_id: c for c in campuses}
        self._users = users

    def list_all(self):
        return sorted(self.campuses.values(), key=lambda c: c.name)

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        return self.campuses.get(campus_id)

    def get_geofence_for_user(self, user_id: int) -> Optional[Geofence]:
        user = self._users.get_by_id(user_id)
        campus = self.campuses.get(user.campus_id) if user and user.campus_id else None
        return campus.geofence if campus else None

    def update_geofence(self, *, campus_id: int, latitude, longitude, radius_meters) -> bool:
        campus = self.campuses.get(campus_id)
        if not campus:
            return False
        self.campuses[campus_id] = replace(
            campus, geofence_lat=latitude, geofence_lng=longitude, geofence_radius_meters=radius_meters
        )
        return True


class InMemoryAttendance:
    def __init__(self):
        self._by_staff_date: dict[tuple[int, date], AttendanceDay] = {}
        self._id = 0

    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceDay]:
        return self._by_staff_date.get((staff_id, work_date))

    def get_recent_for_staff(self, staff_id: int, limit: int):
        items = [r for r in self._by_staff_date.values() if r.staff_id == staff_id]
        items.sort(key=lambda r: r.checkin_time, reverse=True)
        return items[:limit]

    def create_checkin(
        self, *, staff_id, work_date, checkin_time, status, is_remote, notes, mood, photo_url, location
    ) -> int:
        if (staff_id, work_date) in self._by_staff_date:
            return 0
        self._id += 1
        self._by_staff_date[(staff_id, work_date)] = AttendanceDay(
            attendance_id=self._id,
            staff_id=staff_id,
            work_date=work_date,
            checkin_time=checkin_time,
            checkin_status=status,
            notes=notes,
            mood=mood,
            photo_url=photo_url,
            location=location,
            is_remote=is_remote,
        )
        return self._id

    def update_checkout(self, *, attendance_id, checkout_time, notes, photo_url) -> bool:
        for key, rec in self._by_staff_date.items():
            if rec.attendance_id == attendance_id and rec.checkout_time is None:
                self._by_staff_date[key] = replace(
                    rec, checkout_time=checkout_time, checkout_notes=notes, checkout_photo_url=photo_url
                )
                return True
        return False


class FakePhotoStorage:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.uploads: list[tuple[str, str, bytes]] = []

    def upload_verification_photo(self, image_bytes, path_hint, *, filename=None):
        if self.fail:
            return None
        self.uploads.append((path_hint, filename, image_bytes))
        key = f"{path_hint}/{filename}"
        return StoredPhoto(public_url=f"https://photos.test/{key}", key=key)


class FakeCamera:
    """Kiosk camera double that tracks open streams."""

    def __init__(self, frame: bytes = b"", *, fail_start: bool = False):
        self.frame = frame
        self.fail_start = fail_start
        self.open_streams = 0

    def start(self):
        if self.fail_start:
            raise CameraUnavailable()
        self.open_streams += 1
        return object()

    def capture_frame(self, stream) -> bytes:
        return self.frame

    def stop(self, stream) -> None:
        self.open_streams -= 1


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def jpeg_bytes() -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (64, 48), color=(200, 120, 40)).save(out, format="JPEG")
    return out.getvalue()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 3, 7, 20, 0))


@pytest.fixture
def morning_shift() -> Shift:
    return Shift(shift_id=1, shift_name="Morning", start_time=time(7, 30), end_time=time(15, 30), break_minutes=30)


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(
                user_id=1,
                full_name="Admin",
                username="admin",
                password_hash=generate_password_hash("admin123"),
                role=Role.ADMIN,
                campus_id=1,
                shift_id=None,
            ),
            User(
                user_id=2,
                full_name="Ada Obi",
                username="ada",
                password_hash=generate_password_hash("staff123"),
                role=Role.STAFF,
                campus_id=1,
                shift_id=1,
            ),
            User(
                user_id=3,
                full_name="Annex Staff",
                username="annex",
                password_hash=generate_password_hash("staff123"),
                role=Role.STAFF,
                campus_id=2,
                shift_id=1,
            ),
        ]
    )


@pytest.fixture
def shifts(morning_shift) -> InMemoryShifts:
    return InMemoryShifts([morning_shift])


@pytest.fixture
def campuses(users) -> InMemoryCampuses:
    return InMemoryCampuses(
        [
            Campus(
                campus_id=1,
                name="Main Campus",
                geofence_lat=CAMPUS_CENTER.latitude,
                geofence_lng=CAMPUS_CENTER.longitude,
                geofence_radius_meters=100.0,
            ),
            Campus(campus_id=2, name="Annex (no geofence)"),
        ],
        users,
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def checked_in_record(clock) -> AttendanceDay:
    return AttendanceDay(
        attendance_id=7,
        staff_id=2,
        work_date=clock.now.date(),
        checkin_time=clock.now,
        checkin_status=CheckinStatus.ON_TIME,
        photo_url="https://photos.test/daily/2/in.jpg",
    )


@pytest.fixture
def photo_storage() -> FakePhotoStorage:
    return FakePhotoStorage()


@pytest.fixture
def campus_center() -> Coordinates:
    return CAMPUS_CENTER


@pytest.fixture
def offset_north():
    return north_of


@pytest.fixture
def container(users, shifts, campuses, attendance_repo, photo_storage, clock):
    return build_services(
        users_repo=users,
        shifts_repo=shifts,
        campuses_repo=campuses,
        attendance_repo=attendance_repo,
        photo_storage=photo_storage,
        grace_minutes=5,
        require_location=True,
        clock=clock,
    )


@pytest.fixture
def make_flow(campuses, photo_storage, clock):
    """Build a standalone flow for staff 2 at Main Campus with test doubles."""

    feeds = LocationFeedRegistry()

    def _make(
        *,
        record: Optional[AttendanceDay] = None,
        geofence: Optional[Geofence] = "campus",
        submit=None,
        storage=None,
        camera=None,
        require_location: bool = True,
    ) -> GeoVerifiedAttendance:
        calls = []

        def accept(**kwargs) -> bool:
            calls.append(kwargs)
            return True

        flow = GeoVerifiedAttendance(
            staff_id=2,
            todays_record=record,
            geofence=campuses.get_geofence_for_user(2) if geofence == "campus" else geofence,
            submit_transition=submit or accept,
            photo_storage=storage or photo_storage,
            notifier=CollectingNotifier(),
            location_feed=feeds.for_user(2),
            camera=camera,
            require_location=require_location,
            clock=clock,
        )
        flow.submitted = calls
        return flow

    _make.feeds = feeds
    return _make


@pytest.fixture
def kiosk_camera(jpeg_bytes) -> FakeCamera:
    return FakeCamera(jpeg_bytes)


@pytest.fixture
def broken_camera() -> FakeCamera:
    return FakeCamera(fail_start=True)


@pytest.fixture
def failing_storage() -> FakePhotoStorage:
    return FakePhotoStorage(fail=True)
