from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_float, require_range
from ..core.constants import MAX_GEOFENCE_RADIUS_METERS, MIN_GEOFENCE_RADIUS_METERS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..geo.model import Coordinates, Geofence
from .model import Campus
from .repository import CampusRepository

logger = logging.getLogger(__name__)


class CampusService:
    """Use case: admins manage per-campus geofences."""

    def __init__(self, campuses: CampusRepository):
        self._campuses = campuses

    def list_campuses(self) -> Sequence[Campus]:
        return self._campuses.list_all()

    def configure_geofence(
        self,
        *,
        current_role: Role,
        campus_id: int,
        latitude,
        longitude,
        radius_meters,
    ) -> Geofence:
        self._require_admin(current_role)
        self._require_campus(campus_id)

        center = Coordinates.parse(latitude, longitude)
        radius = require_range(
            require_float(radius_meters, "Radius"), "Radius", MIN_GEOFENCE_RADIUS_METERS, MAX_GEOFENCE_RADIUS_METERS
        )
        geofence = Geofence(center=center, radius_meters=radius)

        self._campuses.update_geofence(
            campus_id=campus_id,
            latitude=center.latitude,
            longitude=center.longitude,
            radius_meters=geofence.radius_meters,
        )
        logger.info(
            "Geofence for campus %s set to (%.6f, %.6f) r=%.0fm",
            campus_id, center.latitude, center.longitude, geofence.radius_meters,
        )
        return geofence

    def clear_geofence(self, *, current_role: Role, campus_id: int) -> None:
        self._require_admin(current_role)
        self._require_campus(campus_id)
        self._campuses.update_geofence(campus_id=campus_id, latitude=None, longitude=None, radius_meters=None)
        logger.info("Geofence for campus %s cleared", campus_id)

    def _require_campus(self, campus_id: int) -> Optional[Campus]:
        campus = self._campuses.get_by_id(int(campus_id))
        if not campus:
            raise ValidationError("Campus not found")
        return campus

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to do this")
