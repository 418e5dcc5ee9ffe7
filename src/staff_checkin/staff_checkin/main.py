from __future__ import annotations

import atexit
import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import get_settings_module

from .common.log import setup_logging
from .core.constants import DEFAULT_LATE_GRACE_MINUTES
from .core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .campuses.controller import register as register_campuses
from .users.controller import register as register_users
from .verification.photos import LocalPhotoStorage, build_photo_storage

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _camera_index(value) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    return int(value)


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["LOG_LEVEL"] = getattr(settings, "LOG_LEVEL", "INFO")
    app.config["LOG_FILE"] = getattr(settings, "LOG_FILE", None)
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)

    setup_logging(app)
    app.logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=PROJECT_ROOT / "database" / "schema.sql")
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=PROJECT_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)
            app.logger.info("demo seed ready")

        photo_storage = build_photo_storage(
            getattr(settings, "PHOTO_STORAGE", "local"),
            photo_dir=PROJECT_ROOT / getattr(settings, "PHOTO_DIR", "uploads/photos"),
            base_url=getattr(settings, "PHOTO_BASE_URL", "/photos"),
            bucket=getattr(settings, "S3_BUCKET", None),
            region=getattr(settings, "S3_REGION", None),
        )
        container = build_container(
            db_config=db_config,
            photo_storage=photo_storage,
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            require_location=bool(getattr(settings, "GEOFENCE_REQUIRE_LOCATION", True)),
            camera_index=_camera_index(getattr(settings, "CAMERA_INDEX", None)),
        )
        atexit.register(container.checkin_flows.close_all)

    app.extensions["staff_checkin"] = container

    register_users(app, container)
    register_attendance(app, container)
    register_campuses(app, container)

    storage = container.photo_storage
    if isinstance(storage, LocalPhotoStorage):
        base_url = getattr(settings, "PHOTO_BASE_URL", "/photos").rstrip("/")

        @app.route(f"{base_url}/<path:key>", methods=["GET"], endpoint="photo_file")
        def photo_file(key: str):
            return send_from_directory(storage.root.resolve(), key, mimetype="image/jpeg")

    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(AuthenticationError)
    def handle_authentication(e: AuthenticationError):
        return jsonify({"success": False, "message": str(e)}), 401

    @app.errorhandler(AuthorizationError)
    def handle_authorization(e: AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return jsonify({"success": False, "message": "The photo is too large. Please retake it."}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500

    return app
