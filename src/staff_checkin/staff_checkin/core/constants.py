"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LATE_GRACE_MINUTES = 5

EARTH_RADIUS_METERS = 6_371_000.0

PHOTO_JPEG_QUALITY = 80
CAMERA_WIDTH = 640
CAMERA_HEIGHT = 480
PHOTO_PATH_PREFIX = "daily"

# geofence_radius_meters is DECIMAL(8, 1)
MIN_GEOFENCE_RADIUS_METERS = 1.0
MAX_GEOFENCE_RADIUS_METERS = 9_999_999.9
