import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staff_checkin"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))
# Block non-remote check-in at a geofenced campus when no location sample exists.
GEOFENCE_REQUIRE_LOCATION = bool(int(os.getenv("GEOFENCE_REQUIRE_LOCATION", "1")))

PHOTO_STORAGE = os.getenv("PHOTO_STORAGE", "local")
PHOTO_DIR = os.getenv("PHOTO_DIR", "uploads/photos")
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "/photos")
# Largest accepted request body (photo uploads), in bytes.
MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024)))
S3_BUCKET = os.getenv("S3_BUCKET")
S3_REGION = os.getenv("S3_REGION")

# Kiosk webcam index for server-side capture; unset = photos come from the client.
CAMERA_INDEX = os.getenv("CAMERA_INDEX")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "logs/staff_checkin.log")
