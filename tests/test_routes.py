import io

import pytest

from src.staff_checkin.staff_checkin.container import build_services
from src.staff_checkin.staff_checkin.main import create_app
from src.staff_checkin.staff_checkin.verification.photos import LocalPhotoStorage


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username="ada", password="staff123"):
    return client.post("/login", json={"username": username, "password": password})


def _send_photo(client, jpeg_bytes):
    return client.post(
        "/api/attendance/photo",
        data={"photo": (io.BytesIO(jpeg_bytes), "selfie.jpg")},
        content_type="multipart/form-data",
    )


def test_login_rejects_bad_password(client):
    resp = _login(client, password="nope")

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid username or password"


def test_attendance_requires_login(client):
    assert client.get("/api/attendance/today").status_code == 401


def test_today_shows_not_checked_in(client):
    _login(client)

    body = client.get("/api/attendance/today").get_json()

    assert body["attendance"]["state"] == "NotCheckedIn"
    assert body["attendance"]["action"] == "Check In"
    assert body["attendance"]["gps_acquired"] is False


def test_full_day_on_campus(client, container, jpeg_bytes, campus_center, offset_north):
    _login(client)
    client.get("/api/attendance/today")

    here = offset_north(campus_center, 50)
    resp = client.post("/api/attendance/location", json={"lat": here.latitude, "lng": here.longitude})
    assert resp.get_json()["attendance"]["gps_acquired"] is True

    assert _send_photo(client, jpeg_bytes).status_code == 200

    resp = client.post("/api/attendance/confirm", json={"notes": "Hi", "mood": "great"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["attendance"]["state"] == "CheckedIn"
    assert body["notifications"] == [{"message": "Checked in successfully!", "severity": "success"}]

    _send_photo(client, jpeg_bytes)
    body = client.post("/api/attendance/confirm", json={}).get_json()
    assert body["attendance"]["state"] == "CheckedOut"
    assert body["attendance"]["action"] == "Completed"

    history = client.get("/api/attendance/history").get_json()["history"]
    assert len(history) == 1
    assert history[0]["mood"] == "Great"
    assert history[0]["check_out"] != "-"


def test_confirm_outside_geofence_returns_400(client, jpeg_bytes, campus_center, offset_north):
    _login(client)
    far = offset_north(campus_center, 150)
    client.post("/api/attendance/location", json={"lat": far.latitude, "lng": far.longitude})
    _send_photo(client, jpeg_bytes)

    resp = client.post("/api/attendance/confirm", json={})
    body = resp.get_json()

    assert resp.status_code == 400
    assert body["error"] == "GeofenceViolation"
    assert body["distance_meters"] == pytest.approx(150, abs=1)
    assert body["limit_meters"] == 100
    assert body["attendance"]["state"] == "NotCheckedIn"


def test_confirm_without_photo_returns_400(client):
    _login(client)

    body = client.post("/api/attendance/confirm", json={"is_remote": True}).get_json()

    assert body["error"] == "VerificationMissing"
    assert body["notifications"][0]["severity"] == "error"


def test_remote_checkin_needs_no_location(client, jpeg_bytes):
    _login(client)
    _send_photo(client, jpeg_bytes)

    resp = client.post("/api/attendance/confirm", json={"is_remote": "true"})

    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["status"].endswith("(Remote)")


def test_invalid_location_and_mood_are_400(client):
    _login(client)

    assert client.post("/api/attendance/location", json={"lat": 200, "lng": 0}).status_code == 400
    assert client.post("/api/attendance/confirm", json={"mood": "ecstatic"}).status_code == 400


def test_location_error_is_accepted(client):
    _login(client)

    resp = client.post("/api/attendance/location", json={"error": "Permission denied"})

    assert resp.status_code == 200
    assert resp.get_json()["success"] is False


def test_empty_photo_upload_is_refused(client):
    _login(client)

    resp = client.post("/api/attendance/photo", data={}, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json()["attendance"]["has_photo"] is False


def test_cancel_photo(client, jpeg_bytes):
    _login(client)
    _send_photo(client, jpeg_bytes)

    body = client.delete("/api/attendance/photo").get_json()

    assert body["attendance"]["has_photo"] is False


def test_capture_without_kiosk_camera(client):
    _login(client)

    resp = client.post("/api/attendance/photo/capture")

    assert resp.status_code == 400
    assert resp.get_json()["notifications"][0]["message"] == "No camera is configured on this device."


def test_logout_and_session_close_release_location(client, container):
    _login(client)
    client.get("/api/attendance/today")
    assert container.location_feeds.active_count == 1

    assert client.post("/api/attendance/session/close").get_json()["closed"] is True
    assert container.location_feeds.active_count == 0

    client.get("/api/attendance/today")
    assert client.post("/logout").status_code == 200
    assert container.location_feeds.active_count == 0
    assert client.get("/api/attendance/today").status_code == 401


def test_admin_routes_require_admin(client):
    _login(client)

    assert client.get("/admin/campuses").status_code == 403


def test_admin_updates_geofence(client, container):
    container.checkin_flows.get(2)
    _login(client, "admin", "admin123")

    campuses = client.get("/admin/campuses").get_json()["campuses"]
    assert [c["name"] for c in campuses] == ["Annex (no geofence)", "Main Campus"]

    resp = client.post("/admin/campuses/2/geofence", json={"lat": 6.43, "lng": 3.42, "radius_meters": 80})
    assert resp.get_json()["geofence"] == {"lat": 6.43, "lng": 3.42, "radius_meters": 80.0}
    assert len(container.checkin_flows) == 0

    bad = client.post("/admin/campuses/2/geofence", json={"lat": 6.43, "lng": 3.42, "radius_meters": 0})
    assert bad.status_code == 400

    cleared = client.post("/admin/campuses/1/geofence", json={"clear": True}).get_json()
    assert cleared["geofence"] is None


def test_local_photos_are_served(tmp_path, users, shifts, campuses, attendance_repo, clock, jpeg_bytes):
    storage = LocalPhotoStorage(tmp_path, base_url="/photos")
    container = build_services(
        users_repo=users,
        shifts_repo=shifts,
        campuses_repo=campuses,
        attendance_repo=attendance_repo,
        photo_storage=storage,
        clock=clock,
    )
    client = create_app(container=container, settings_module="config.testing").test_client()
    _login(client)
    _send_photo(client, jpeg_bytes)
    client.post("/api/attendance/confirm", json={"is_remote": True})

    url = container.attendance_service.get_history(2)[0].photo_url
    resp = client.get(url)

    assert url.startswith("/photos/daily/2/checkin_2_")
    assert resp.status_code == 200
    assert resp.mimetype == "image/jpeg"


def test_oversized_upload_is_413(client):
    _login(client)

    resp = client.post(
        "/api/attendance/photo",
        data={"photo": (io.BytesIO(b"\0" * (2 * 1024 * 1024)), "huge.jpg")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 413
    assert resp.get_json()["success"] is False
