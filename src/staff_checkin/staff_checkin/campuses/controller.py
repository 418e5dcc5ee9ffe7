from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import parse_bool
from ..container import Container
from ..users.guards import admin_required, current_role


def register(app: Flask, container: Container) -> None:
    def _campus_dict(campus) -> dict:
        fence = campus.geofence
        return {
            "id": campus.campus_id,
            "name": campus.name,
            "geofence": (
                {**fence.center.as_dict(), "radius_meters": fence.radius_meters} if fence else None
            ),
        }

    @app.route("/admin/campuses", methods=["GET"], endpoint="admin_campuses")
    @admin_required
    def admin_campuses():
        campuses = container.campus_service.list_campuses()
        return jsonify({"success": True, "campuses": [_campus_dict(c) for c in campuses]})

    @app.route("/admin/campuses/<int:campus_id>/geofence", methods=["POST"], endpoint="admin_campus_geofence")
    @admin_required
    def admin_campus_geofence(campus_id: int):
        data = request.get_json(silent=True) or request.form

        if parse_bool(data.get("clear")):
            container.campus_service.clear_geofence(current_role=current_role(), campus_id=campus_id)
            geofence = None
        else:
            fence = container.campus_service.configure_geofence(
                current_role=current_role(),
                campus_id=campus_id,
                latitude=data.get("lat"),
                longitude=data.get("lng"),
                radius_meters=data.get("radius_meters"),
            )
            geofence = {**fence.center.as_dict(), "radius_meters": fence.radius_meters}

        # Open flows captured the old boundary; rebuild them on next use.
        container.checkin_flows.close_all()
        return jsonify({"success": True, "campus_id": campus_id, "geofence": geofence})
