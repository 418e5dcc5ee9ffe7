from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol

from flask import flash

from ..core.enums import Severity

# Flash categories as the templates style them.
_FLASH_CATEGORY = {
    Severity.SUCCESS: "success",
    Severity.ERROR: "danger",
    Severity.INFO: "info",
}


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity

    def as_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        raise NotImplementedError


class FlashNotifier:
    """Fire-and-forget notifications through Flask's flash(); needs a request context."""

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        flash(message, _FLASH_CATEGORY.get(Severity(severity), "info"))


class CollectingNotifier:
    """Buffers notifications until the next JSON response picks them up."""

    def __init__(self) -> None:
        self._items: List[Notification] = []

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self._items.append(Notification(message=message, severity=Severity(severity)))

    def drain(self) -> List[Notification]:
        items, self._items = self._items, []
        return items
