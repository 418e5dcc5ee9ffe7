import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staff_checkin_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

LATE_GRACE_MINUTES = 5
GEOFENCE_REQUIRE_LOCATION = True

PHOTO_STORAGE = "local"
PHOTO_DIR = os.getenv("PHOTO_DIR", "uploads/test-photos")
PHOTO_BASE_URL = "/photos"
MAX_CONTENT_LENGTH = 1024 * 1024
S3_BUCKET = None
S3_REGION = None

CAMERA_INDEX = None

LOG_LEVEL = "WARNING"
LOG_FILE = None
