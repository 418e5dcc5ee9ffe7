from __future__ import annotations

from dataclasses import dataclass

from ..common.validators import require_float, require_range
from ..core.exceptions import ValidationError
from .distance import compute_distance_meters


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude, longitude) -> "Coordinates":
        lat = require_range(require_float(latitude, "Latitude"), "Latitude", -90.0, 90.0)
        lng = require_range(require_float(longitude, "Longitude"), "Longitude", -180.0, 180.0)
        return cls(latitude=lat, longitude=lng)

    def as_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True)
class Geofence:
    """Circular boundary a non-remote check-in must fall within."""

    center: Coordinates
    radius_meters: float

    def __post_init__(self):
        if not self.radius_meters or self.radius_meters <= 0:
            raise ValidationError("Geofence radius must be greater than zero")

    def distance_to(self, point: Coordinates) -> float:
        return compute_distance_meters(self.center, point)

    def contains(self, point: Coordinates) -> bool:
        return self.distance_to(point) <= self.radius_meters
