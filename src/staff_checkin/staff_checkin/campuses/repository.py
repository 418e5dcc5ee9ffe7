from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..geo.model import Geofence
from .model import Campus


class CampusRepository(Protocol):
    """Site configuration provider: campuses and their geofences."""

    def list_all(self) -> Sequence[Campus]:
        raise NotImplementedError

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        raise NotImplementedError

    def get_geofence_for_user(self, user_id: int) -> Optional[Geofence]:
        raise NotImplementedError

    def update_geofence(
        self,
        *,
        campus_id: int,
        latitude: Optional[float],
        longitude: Optional[float],
        radius_meters: Optional[float],
    ) -> bool:
        raise NotImplementedError
