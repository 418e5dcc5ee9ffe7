from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.validators import parse_bool
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Severity
from ..core.exceptions import AuthenticationError
from ..container import Container
from ..verification.notifications import FlashNotifier
from .guards import current_user_id, login_required


def register(app: Flask, container: Container) -> None:
    notifier = FlashNotifier()

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        payload = request.get_json(silent=True) or request.form
        username = payload.get("username", "")
        password = payload.get("password", "")
        remember = payload.get("remember_me")

        try:
            s_user = container.auth_service.authenticate(username, password)
        except AuthenticationError as e:
            notifier.notify(str(e), Severity.ERROR)
            return jsonify({"success": False, "message": str(e)}), 401

        session.clear()
        session.permanent = parse_bool(remember)
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["campus_id"] = s_user.campus_id
        session["shift_id"] = s_user.shift_id
        session["shift_info"] = s_user.shift_info

        app.logger.info("User %s signed in", s_user.user_id)
        notifier.notify("Signed in successfully!", Severity.SUCCESS)
        return jsonify(
            {
                "success": True,
                "user": {
                    "id": s_user.user_id,
                    "name": s_user.full_name,
                    "role": s_user.role.value,
                    "shift": s_user.shift_info,
                },
            }
        )

    @app.route("/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        user_id = current_user_id()
        # Signing out tears down the location watch and any open camera.
        container.checkin_flows.close(user_id)
        session.clear()
        notifier.notify("You have been signed out.", Severity.INFO)
        return jsonify({"success": True})
