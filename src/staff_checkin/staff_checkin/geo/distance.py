from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..core.constants import EARTH_RADIUS_METERS

if TYPE_CHECKING:
    from .model import Coordinates


def compute_distance_meters(a: "Coordinates", b: "Coordinates") -> float:
    """Great-circle distance between two points (haversine), in meters."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h slightly outside [0, 1] for (near-)antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
