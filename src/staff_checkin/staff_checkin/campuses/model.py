from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..geo.model import Coordinates, Geofence


@dataclass(frozen=True)
class Campus:
    """Domain entity: a school campus (site) staff are assigned to."""

    campus_id: int
    name: str
    geofence_lat: Optional[float] = None
    geofence_lng: Optional[float] = None
    geofence_radius_meters: Optional[float] = None

    @property
    def geofence(self) -> Optional[Geofence]:
        """The campus geofence, or None when it is not fully configured."""

        if self.geofence_lat is None or self.geofence_lng is None:
            return None
        if not self.geofence_radius_meters or float(self.geofence_radius_meters) <= 0:
            return None
        return Geofence(
            center=Coordinates(latitude=float(self.geofence_lat), longitude=float(self.geofence_lng)),
            radius_meters=float(self.geofence_radius_meters),
        )
