"""Geofenced, photo-verified check-in / check-out for one staff member and day.

The flow owns the client-side lifecycle: a live location subscription, the
camera stream while a photo is being taken, the captured photo, and the
guarded ``confirm_transition`` that uploads the photo and asks the
persistence collaborator to record the transition.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional

from ..attendance.model import AttendanceDay, TransitionRequest
from ..attendance.state_machine import TransitionPlan, apply_transition, next_action, plan_transition, state_of
from ..common.datetime_utils import format_hhmm, now_local
from ..common.validators import optional_text
from ..core.constants import PHOTO_PATH_PREFIX
from ..core.enums import AttendanceState, CheckinStatus, Mood, Severity, TransitionAction
from ..core.exceptions import (
    AttendanceError,
    CameraUnavailable,
    GeofenceViolation,
    TransitionInProgress,
    TransitionRejected,
    UploadFailed,
)
from ..geo.model import Coordinates, Geofence
from .camera import Camera, UploadedFrameCamera
from .location import LocationFeed, LocationSubscription
from .notifications import Notifier
from .photos import PhotoStorage, normalize_photo, photo_filename

logger = logging.getLogger(__name__)

# submit(notes=, is_remote=, location=, photo_url=, mood=) -> accepted?
TransitionSubmitter = Callable[..., bool]
RecordLoader = Callable[[], Optional[AttendanceDay]]

SUCCESS_MESSAGES = {
    TransitionAction.CHECK_IN: "Checked in successfully!",
    TransitionAction.CHECK_OUT: "Checked out successfully!",
}


@dataclass(frozen=True)
class TransitionOutcome:
    ok: bool
    action: Optional[TransitionAction]
    state: AttendanceState
    message: str
    error: Optional[AttendanceError] = None

    def as_dict(self) -> dict:
        data = {
            "success": self.ok,
            "action": self.action.value if self.action else None,
            "state": self.state.value,
            "message": self.message,
        }
        if isinstance(self.error, GeofenceViolation):
            data["distance_meters"] = round(self.error.distance_meters, 1)
            data["limit_meters"] = self.error.limit_meters
        if self.error is not None:
            data["error"] = type(self.error).__name__
        return data


class GeoVerifiedAttendance:
    def __init__(
        self,
        *,
        staff_id: int,
        todays_record: Optional[AttendanceDay],
        geofence: Optional[Geofence],
        submit_transition: TransitionSubmitter,
        photo_storage: PhotoStorage,
        notifier: Notifier,
        location_feed: LocationFeed,
        camera: Optional[Camera] = None,
        reload_record: Optional[RecordLoader] = None,
        require_location: bool = True,
        clock: Callable[[], datetime] = now_local,
    ):
        self.staff_id = int(staff_id)
        self._record = todays_record
        self._geofence = geofence
        self._submit = submit_transition
        self._storage = photo_storage
        self._notifier = notifier
        self._feed = location_feed
        self._camera = camera
        self._reload_record = reload_record
        self._require_location = bool(require_location)
        self._clock = clock

        self.work_date: date = clock().date()
        self.location: Optional[Coordinates] = None
        self._photo: Optional[bytes] = None
        self._subscription: Optional[LocationSubscription] = None
        self._stream: Any = None
        self._stream_camera: Optional[Camera] = None
        self._in_flight = threading.Lock()

    # ----- lifecycle -----

    @property
    def is_active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def activate(self) -> "GeoVerifiedAttendance":
        if not self.is_active:
            self.sample_location()
        return self

    def deactivate(self) -> None:
        """Release the location subscription and any open camera stream."""

        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._release_camera()
        self.location = None

    def __enter__(self) -> "GeoVerifiedAttendance":
        return self.activate()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.deactivate()

    # ----- state -----

    @property
    def record(self) -> Optional[AttendanceDay]:
        return self._record

    @property
    def state(self) -> AttendanceState:
        return state_of(self._record)

    @property
    def geofence(self) -> Optional[Geofence]:
        return self._geofence

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def has_photo(self) -> bool:
        return bool(self._photo)

    @property
    def camera_open(self) -> bool:
        return self._stream is not None

    @property
    def is_submitting(self) -> bool:
        return self._in_flight.locked()

    def action_label(self) -> str:
        state = self.state
        if state == AttendanceState.CHECKED_IN:
            return "Check Out"
        if state == AttendanceState.CHECKED_OUT:
            return "Completed"
        return "Check In"

    def status_line(self) -> str:
        record = self._record
        if record is None:
            return "Not checked in."
        if record.checkout_time is not None:
            return f"Checked out at {format_hhmm(record.checkout_time)}"

        text = f"Checked in at {format_hhmm(record.checkin_time)}"
        if record.checkin_status == CheckinStatus.LATE:
            text += " (Late)"
        elif record.checkin_status == CheckinStatus.REMOTE:
            text += " (Remote)"
        return text

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "status": self.status_line(),
            "action": self.action_label(),
            "work_date": self.work_date.isoformat(),
            "gps_acquired": self.location is not None,
            "has_photo": self.has_photo,
            "camera_open": self.camera_open,
            "geofenced": self._geofence is not None,
            "submitting": self.is_submitting,
        }

    # ----- location -----

    def sample_location(self) -> LocationSubscription:
        """Subscribe to the staff member's location feed until deactivate()."""

        self.location = None
        if self._subscription is not None:
            self._subscription.close()
        self._subscription = self._feed.watch(self._on_location, self._on_location_error)
        return self._subscription

    def _on_location(self, coords: Coordinates) -> None:
        self.location = coords

    def _on_location_error(self, reason: str) -> None:
        # Non-fatal: remote check-in and check-out never need a location.
        self.location = None
        logger.warning("Could not get geolocation for staff %s: %s", self.staff_id, reason)

    # ----- camera / photo -----

    def open_camera(self, camera: Optional[Camera] = None) -> bool:
        """Start a camera stream for a new verification photo.

        ``camera`` overrides the device camera (e.g. a frame sent by the client).
        """

        self._photo = None
        camera = camera or self._camera
        if camera is None:
            self._fail_camera(CameraUnavailable("No camera is configured on this device."))
            return False
        if self._stream is not None:
            if self._stream_camera is camera:
                return True
            self._release_camera()
        try:
            self._stream = camera.start()
        except CameraUnavailable as e:
            self._fail_camera(e)
            return False
        self._stream_camera = camera
        return True

    def capture_photo(self, camera: Optional[Camera] = None) -> Optional[bytes]:
        """Take a still; the stream is stopped as soon as the frame is in hand."""

        if (camera is not None or self._stream is None) and not self.open_camera(camera):
            return None
        try:
            frame = self._stream_camera.capture_frame(self._stream)
            self._photo = normalize_photo(frame)
        except AttendanceError as e:
            self._photo = None
            self._fail_camera(e)
            return None
        finally:
            self._release_camera()
        return self._photo

    def retake_photo(self) -> Optional[bytes]:
        self._photo = None
        return self.capture_photo()

    def attach_photo(self, image_bytes: bytes) -> Optional[bytes]:
        """Accept a photo captured on the client device."""

        return self.capture_photo(camera=UploadedFrameCamera(image_bytes))

    def cancel(self) -> None:
        """Leave the verification step: drop the photo and stop the camera."""

        self._photo = None
        self._release_camera()

    def _release_camera(self) -> None:
        stream, camera = self._stream, self._stream_camera
        self._stream = self._stream_camera = None
        if stream is None or camera is None:
            return
        try:
            camera.stop(stream)
        except Exception:
            logger.exception("Failed to stop camera stream for staff %s", self.staff_id)

    def _fail_camera(self, error: AttendanceError) -> None:
        logger.warning("Camera error for staff %s: %s", self.staff_id, error.user_message)
        self._release_camera()
        self._notifier.notify(error.user_message, Severity.ERROR)

    # ----- transition -----

    def confirm_transition(
        self,
        notes: Optional[str] = None,
        is_remote: bool = False,
        mood: Optional[Mood] = None,
    ) -> TransitionOutcome:
        """Validate, upload the photo, then submit the check-in or check-out.

        Never raises for domain or collaborator failures: they become an error
        notification and a failed outcome, and local state is left unchanged.
        """

        if not self._in_flight.acquire(blocking=False):
            return self._failed(next_action(self._record), TransitionInProgress())
        try:
            return self._confirm(notes=notes, is_remote=is_remote, mood=mood)
        finally:
            self._in_flight.release()

    def _confirm(self, *, notes: Optional[str], is_remote: bool, mood: Optional[Mood]) -> TransitionOutcome:
        action = next_action(self._record)
        request = TransitionRequest(
            notes=optional_text(notes),
            is_remote=bool(is_remote),
            location=self.location,
            photo=self._photo,
            mood=mood if action == TransitionAction.CHECK_IN else None,
        )

        try:
            plan = plan_transition(self._record, request, self._geofence, require_location=self._require_location)
            now = self._clock()

            stored = self._storage.upload_verification_photo(
                request.photo,
                f"{PHOTO_PATH_PREFIX}/{self.staff_id}",
                filename=photo_filename(self.staff_id, now),
            )
            if stored is None or not stored.public_url:
                raise UploadFailed()

            accepted = self._submit(
                notes=request.notes,
                is_remote=request.is_remote,
                location=request.location,
                photo_url=stored.public_url,
                mood=request.mood,
            )
            if not accepted:
                raise TransitionRejected()
        except AttendanceError as e:
            return self._failed(action, e)
        except Exception:
            logger.exception("Attendance transition failed for staff %s", self.staff_id)
            return self._failed(action, TransitionRejected())

        self._record = self._advance(plan, request, now=now, photo_url=stored.public_url)
        # A photo attached while this confirm was in flight belongs to the next step.
        if self._photo is request.photo:
            self._photo = None
        self._release_camera()

        message = SUCCESS_MESSAGES[plan.action]
        logger.info(
            "Staff %s %s (remote=%s, distance=%s)",
            self.staff_id,
            "checked in" if plan.action == TransitionAction.CHECK_IN else "checked out",
            request.is_remote,
            f"{plan.distance_meters:.0f}m" if plan.distance_meters is not None else "-",
        )
        self._notifier.notify(message, Severity.SUCCESS)
        return TransitionOutcome(ok=True, action=plan.action, state=self.state, message=message)

    def _advance(self, plan: TransitionPlan, request: TransitionRequest, *, now: datetime, photo_url: str) -> AttendanceDay:
        if self._reload_record is not None:
            try:
                reloaded = self._reload_record()
            except Exception:
                logger.exception("Could not reload today's record for staff %s", self.staff_id)
                reloaded = None
            if reloaded is not None and state_of(reloaded) != self.state:
                return reloaded
        return apply_transition(
            self._record,
            plan,
            request,
            staff_id=self.staff_id,
            now=now,
            photo_url=photo_url,
        )

    def _failed(self, action: Optional[TransitionAction], error: AttendanceError) -> TransitionOutcome:
        if isinstance(error, GeofenceViolation):
            logger.info(
                "Geofence violation for staff %s: %.0fm away (limit %gm)",
                self.staff_id, error.distance_meters, error.limit_meters,
            )
        else:
            logger.info("Attendance transition refused for staff %s: %s", self.staff_id, type(error).__name__)
        self._notifier.notify(error.user_message, Severity.ERROR)
        return TransitionOutcome(ok=False, action=action, state=self.state, message=error.user_message, error=error)
