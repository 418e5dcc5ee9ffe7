"""Example: drive a check-in flow from the service layer (no HTTP).

Controllers stay thin; the flow and services carry the behaviour.
"""

import importlib
import sys

from config import get_settings_module

from src.staff_checkin.staff_checkin.container import build_container
from src.staff_checkin.staff_checkin.geo.model import Coordinates
from src.staff_checkin.staff_checkin.verification.photos import build_photo_storage


def main(staff_id: int = 2, photo_path: str = "") -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        photo_storage=build_photo_storage("local", photo_dir=settings.PHOTO_DIR),
    )

    flow = container.checkin_flows.get(staff_id)
    print(flow.snapshot())

    # Main Campus center from seed.sql.
    container.location_feeds.for_user(staff_id).publish(Coordinates(latitude=6.5244, longitude=3.3792))

    if photo_path:
        with open(photo_path, "rb") as f:
            flow.attach_photo(f.read())

    outcome = flow.confirm_transition(notes="Example run")
    print(outcome.as_dict())
    print([n.as_dict() for n in flow.notifier.drain()])

    container.checkin_flows.close_all()


if __name__ == "__main__":
    main(photo_path=sys.argv[1] if len(sys.argv) > 1 else "")
