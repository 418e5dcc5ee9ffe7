"""Load demo campuses, shifts and accounts, then show each campus geofence."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.staff_checkin.staff_checkin.campuses.mysql_campus_repository import MySQLCampusRepository
from src.staff_checkin.staff_checkin.database.bootstrap import apply_seed_sql, ensure_demo_users
from src.staff_checkin.staff_checkin.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    campuses = MySQLCampusRepository(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))
    print(f"Seeded {db_config.get('database')}; demo logins: admin/admin123, ada/staff123")
    for campus in campuses.list_all():
        fence = campus.geofence
        if fence is None:
            print(f"  {campus.name}: no geofence (check-in allowed from anywhere)")
        else:
            print(
                f"  {campus.name}: geofence ({fence.center.latitude:.6f}, {fence.center.longitude:.6f}) "
                f"radius {fence.radius_meters:g}m"
            )


if __name__ == "__main__":
    main()
