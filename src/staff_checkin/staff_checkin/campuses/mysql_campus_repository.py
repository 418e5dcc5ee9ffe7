from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import Geofence
from .model import Campus
from .repository import CampusRepository


def _to_campus(r: Dict[str, Any]) -> Campus:
    def _num(value) -> Optional[float]:
        return float(value) if value is not None else None

    return Campus(
        campus_id=int(r["campus_id"]),
        name=r["name"],
        geofence_lat=_num(r.get("geofence_lat")),
        geofence_lng=_num(r.get("geofence_lng")),
        geofence_radius_meters=_num(r.get("geofence_radius_meters")),
    )


class MySQLCampusRepository(CampusRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Campus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT campus_id, name, geofence_lat, geofence_lng, geofence_radius_meters
                FROM campuses
                ORDER BY campus_id
                """
            )
            return [_to_campus(r) for r in fetchall(cur)]

    def get_by_id(self, campus_id: int) -> Optional[Campus]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT campus_id, name, geofence_lat, geofence_lng, geofence_radius_meters
                FROM campuses
                WHERE campus_id=%s
                """,
                (campus_id,),
            )
            r = fetchone(cur)
            return _to_campus(r) if r else None

    def get_geofence_for_user(self, user_id: int) -> Optional[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.campus_id, c.name, c.geofence_lat, c.geofence_lng, c.geofence_radius_meters
                FROM users u
                JOIN campuses c ON c.campus_id = u.campus_id
                WHERE u.user_id=%s
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_campus(r).geofence if r else None

    def update_geofence(
        self,
        *,
        campus_id: int,
        latitude: Optional[float],
        longitude: Optional[float],
        radius_meters: Optional[float],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE campuses
                SET geofence_lat=%s, geofence_lng=%s, geofence_radius_meters=%s
                WHERE campus_id=%s
                """,
                (latitude, longitude, radius_meters, int(campus_id)),
            )
            return cur.rowcount > 0
