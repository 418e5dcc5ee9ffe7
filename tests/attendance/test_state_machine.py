from dataclasses import replace
from datetime import datetime

import pytest

from src.staff_checkin.staff_checkin.attendance.model import TransitionRequest
from src.staff_checkin.staff_checkin.attendance.state_machine import (
    apply_transition,
    next_action,
    plan_transition,
    state_of,
)
from src.staff_checkin.staff_checkin.core.enums import AttendanceState, CheckinStatus, Mood, TransitionAction
from src.staff_checkin.staff_checkin.core.exceptions import (
    GeofenceViolation,
    LocationUnavailable,
    TransitionNotAllowed,
    VerificationMissing,
)
from src.staff_checkin.staff_checkin.geo.model import Geofence

PHOTO = b"jpeg"


@pytest.fixture
def fence(campus_center):
    return Geofence(center=campus_center, radius_meters=100.0)


def test_state_progression(checked_in_record):
    assert state_of(None) == AttendanceState.NOT_CHECKED_IN
    assert next_action(None) == TransitionAction.CHECK_IN

    assert state_of(checked_in_record) == AttendanceState.CHECKED_IN
    assert next_action(checked_in_record) == TransitionAction.CHECK_OUT

    done = replace(checked_in_record, checkout_time=datetime(2025, 3, 3, 15, 40))
    assert state_of(done) == AttendanceState.CHECKED_OUT
    assert next_action(done) is None


def test_photo_is_required_even_outside_the_geofence(fence, campus_center, offset_north):
    far = offset_north(campus_center, 5000)
    with pytest.raises(VerificationMissing):
        plan_transition(None, TransitionRequest(location=far), fence)


def test_photo_is_required_for_checkout(checked_in_record, fence):
    with pytest.raises(VerificationMissing):
        plan_transition(checked_in_record, TransitionRequest(), fence)


def test_checkin_outside_geofence_reports_distance(fence, campus_center, offset_north):
    request = TransitionRequest(photo=PHOTO, location=offset_north(campus_center, 150))

    with pytest.raises(GeofenceViolation) as e:
        plan_transition(None, request, fence)

    assert e.value.distance_meters == pytest.approx(150, abs=1)
    assert e.value.limit_meters == 100
    assert e.value.user_message == "Geofence Error: You are 150m away (Limit: 100m)."


def test_checkin_inside_geofence(fence, campus_center, offset_north):
    plan = plan_transition(None, TransitionRequest(photo=PHOTO, location=offset_north(campus_center, 50)), fence)

    assert plan.action == TransitionAction.CHECK_IN
    assert plan.distance_meters == pytest.approx(50, abs=1)


def test_checkin_without_location_at_geofenced_site(fence):
    with pytest.raises(LocationUnavailable):
        plan_transition(None, TransitionRequest(photo=PHOTO), fence)

    plan = plan_transition(None, TransitionRequest(photo=PHOTO), fence, require_location=False)
    assert plan.distance_meters is None


def test_remote_checkin_skips_geofence(fence):
    plan = plan_transition(None, TransitionRequest(photo=PHOTO, is_remote=True), fence)
    assert plan.action == TransitionAction.CHECK_IN


def test_checkout_skips_geofence(checked_in_record, fence, campus_center, offset_north):
    far = offset_north(campus_center, 5000)
    plan = plan_transition(checked_in_record, TransitionRequest(photo=PHOTO, location=far), fence)
    assert plan.action == TransitionAction.CHECK_OUT


def test_no_geofence_means_no_location_needed():
    plan = plan_transition(None, TransitionRequest(photo=PHOTO), None)
    assert plan.action == TransitionAction.CHECK_IN


def test_checked_out_is_terminal(checked_in_record, fence):
    done = replace(checked_in_record, checkout_time=datetime(2025, 3, 3, 15, 40))
    with pytest.raises(TransitionNotAllowed):
        plan_transition(done, TransitionRequest(photo=PHOTO), fence)


def test_apply_checkin_then_checkout():
    now = datetime(2025, 3, 3, 7, 20)
    request = TransitionRequest(photo=PHOTO, is_remote=True, mood=Mood.GOOD, notes="From home")
    plan = plan_transition(None, request, None)

    record = apply_transition(None, plan, request, staff_id=2, now=now, photo_url="u1")
    assert record.state == AttendanceState.CHECKED_IN
    assert record.checkin_status == CheckinStatus.REMOTE
    assert record.mood == Mood.GOOD
    assert record.work_date == now.date()

    out_request = TransitionRequest(photo=PHOTO, notes="Bye")
    out_plan = plan_transition(record, out_request, None)
    done = apply_transition(record, out_plan, out_request, staff_id=2, now=now.replace(hour=15), photo_url="u2")
    assert done.state == AttendanceState.CHECKED_OUT
    assert done.checkout_photo_url == "u2"
    assert done.checkout_notes == "Bye"
    assert done.photo_url == "u1"
