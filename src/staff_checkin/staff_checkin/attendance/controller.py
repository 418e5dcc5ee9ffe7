from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_text, parse_bool
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Mood
from ..core.exceptions import ValidationError
from ..container import Container
from ..geo.model import Coordinates
from ..users.guards import current_user_id, login_required
from ..verification.flow import GeoVerifiedAttendance


def register(app: Flask, container: Container) -> None:
    def _respond(flow: GeoVerifiedAttendance, body: dict, status: int = 200):
        body = dict(body)
        body["attendance"] = flow.snapshot()
        drain = getattr(flow.notifier, "drain", None)
        body["notifications"] = [n.as_dict() for n in drain()] if drain else []
        return jsonify(body), status

    def _parse_mood(value) -> Mood | None:
        value = optional_text(value)
        if value is None:
            return None
        try:
            return Mood(value.capitalize())
        except ValueError:
            raise ValidationError("Mood must be one of: " + ", ".join(m.value for m in Mood))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        flow = container.checkin_flows.get(current_user_id())
        return _respond(flow, {"success": True})

    @app.route("/api/attendance/location", methods=["POST"], endpoint="attendance_location")
    @login_required
    def attendance_location():
        user_id = current_user_id()
        flow = container.checkin_flows.get(user_id)
        feed = container.location_feeds.for_user(user_id)
        data = request.get_json(silent=True) or {}

        if data.get("error"):
            feed.publish_error(str(data["error"]))
            return _respond(flow, {"success": False, "message": "Location unavailable."})

        coords = Coordinates.parse(data.get("lat"), data.get("lng"))
        feed.publish(coords)
        return _respond(flow, {"success": True, "location": coords.as_dict()})

    @app.route("/api/attendance/photo", methods=["POST"], endpoint="attendance_photo")
    @login_required
    def attendance_photo():
        flow = container.checkin_flows.get(current_user_id())
        upload = request.files.get("photo")
        photo = flow.attach_photo(upload.read() if upload else b"")
        if photo is None:
            return _respond(flow, {"success": False}, 400)
        return _respond(flow, {"success": True})

    @app.route("/api/attendance/photo/capture", methods=["POST"], endpoint="attendance_photo_capture")
    @login_required
    def attendance_photo_capture():
        flow = container.checkin_flows.get(current_user_id())
        photo = flow.retake_photo() if flow.has_photo else flow.capture_photo()
        if photo is None:
            return _respond(flow, {"success": False}, 400)
        return _respond(flow, {"success": True})

    @app.route("/api/attendance/photo", methods=["DELETE"], endpoint="attendance_photo_cancel")
    @login_required
    def attendance_photo_cancel():
        flow = container.checkin_flows.get(current_user_id())
        flow.cancel()
        return _respond(flow, {"success": True})

    @app.route("/api/attendance/confirm", methods=["POST"], endpoint="attendance_confirm")
    @login_required
    def attendance_confirm():
        flow = container.checkin_flows.get(current_user_id())
        data = request.get_json(silent=True) or request.form

        outcome = flow.confirm_transition(
            notes=data.get("notes"),
            is_remote=parse_bool(data.get("is_remote")),
            mood=_parse_mood(data.get("mood")),
        )
        return _respond(flow, outcome.as_dict(), 200 if outcome.ok else 400)

    @app.route("/api/attendance/session/close", methods=["POST"], endpoint="attendance_session_close")
    @login_required
    def attendance_session_close():
        closed = container.checkin_flows.close(current_user_id())
        return jsonify({"success": True, "closed": closed})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int)
        if limit <= 0:
            raise ValidationError("limit must be positive")
        rows = container.attendance_service.get_history_ui(current_user_id(), limit=limit)
        return jsonify({"success": True, "history": rows})
