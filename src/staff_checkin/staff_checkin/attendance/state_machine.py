"""Daily attendance state machine.

NotCheckedIn --check in--> CheckedIn --check out--> CheckedOut (terminal for the day).

Everything here is a pure function of (today's record, request inputs, geofence),
so it can be exercised without Flask, MySQL, a camera or a GPS.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceState, CheckinStatus, TransitionAction
from ..core.exceptions import (
    GeofenceViolation,
    LocationUnavailable,
    TransitionNotAllowed,
    VerificationMissing,
)
from ..geo.model import Geofence
from .model import AttendanceDay, TransitionRequest


@dataclass(frozen=True)
class TransitionPlan:
    action: TransitionAction
    # Measured only for a geofenced, non-remote check-in with a location sample.
    distance_meters: Optional[float] = None


def state_of(record: Optional[AttendanceDay]) -> AttendanceState:
    if record is None:
        return AttendanceState.NOT_CHECKED_IN
    return record.state


def next_action(record: Optional[AttendanceDay]) -> Optional[TransitionAction]:
    state = state_of(record)
    if state == AttendanceState.NOT_CHECKED_IN:
        return TransitionAction.CHECK_IN
    if state == AttendanceState.CHECKED_IN:
        return TransitionAction.CHECK_OUT
    return None


def plan_transition(
    record: Optional[AttendanceDay],
    request: TransitionRequest,
    geofence: Optional[Geofence],
    *,
    require_location: bool = True,
) -> TransitionPlan:
    """Validate a transition request against today's record.

    Raises TransitionNotAllowed, VerificationMissing, LocationUnavailable or
    GeofenceViolation. The photo is checked first: no transition is ever
    attempted without one, whatever the location state.
    """

    action = next_action(record)
    if action is None:
        raise TransitionNotAllowed()

    if not request.photo:
        raise VerificationMissing()

    distance = None
    if action == TransitionAction.CHECK_IN and not request.is_remote and geofence is not None:
        if request.location is None:
            if require_location:
                raise LocationUnavailable()
        else:
            distance = geofence.distance_to(request.location)
            if distance > geofence.radius_meters:
                raise GeofenceViolation(distance, geofence.radius_meters)

    return TransitionPlan(action=action, distance_meters=distance)


def apply_transition(
    record: Optional[AttendanceDay],
    plan: TransitionPlan,
    request: TransitionRequest,
    *,
    staff_id: int,
    now: datetime,
    photo_url: str,
    status: Optional[CheckinStatus] = None,
    attendance_id: int = 0,
) -> AttendanceDay:
    """Return the record as it looks after ``plan`` has been accepted."""

    if plan.action == TransitionAction.CHECK_IN:
        if record is not None:
            raise TransitionNotAllowed("You have already checked in today.")
        return AttendanceDay(
            attendance_id=attendance_id,
            staff_id=staff_id,
            work_date=now.date(),
            checkin_time=now,
            checkin_status=status or (CheckinStatus.REMOTE if request.is_remote else CheckinStatus.ON_TIME),
            notes=request.notes,
            mood=request.mood,
            photo_url=photo_url,
            location=request.location,
            is_remote=request.is_remote,
        )

    if record is None or record.checkout_time is not None:
        raise TransitionNotAllowed()
    return replace(record, checkout_time=now, checkout_notes=request.notes, checkout_photo_url=photo_url)
