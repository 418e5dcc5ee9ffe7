"""Create the staff check-in tables (idempotent)."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.staff_checkin.staff_checkin.database.bootstrap import apply_schema, list_tables

REQUIRED_TABLES = ("campuses", "shifts", "users", "staff_attendance")


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")

    tables = set(list_tables(db_config))
    missing = [t for t in REQUIRED_TABLES if t not in tables]
    target = f"{db_config.get('database')} on {db_config.get('host')}:{db_config.get('port', 3306)}"
    if missing:
        print(f"FAILED: {target} is missing check-in tables: {', '.join(missing)}")
        return 1

    print(f"OK: check-in schema ready in {target} ({', '.join(REQUIRED_TABLES)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
