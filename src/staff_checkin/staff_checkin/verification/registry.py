from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict

from ..common.datetime_utils import now_local
from .flow import GeoVerifiedAttendance

logger = logging.getLogger(__name__)

FlowFactory = Callable[[int], GeoVerifiedAttendance]


class CheckinFlowRegistry:
    """One active check-in flow per signed-in staff member.

    A flow belongs to a single work day; on the first request after midnight
    it is torn down and rebuilt from the persisted record.
    """

    def __init__(self, factory: FlowFactory, *, clock: Callable[[], datetime] = now_local):
        self._factory = factory
        self._clock = clock
        self._lock = threading.Lock()
        self._flows: Dict[int, GeoVerifiedAttendance] = {}

    def get(self, user_id: int) -> GeoVerifiedAttendance:
        user_id = int(user_id)
        today = self._clock().date()
        with self._lock:
            flow = self._flows.get(user_id)
            if flow is not None and flow.work_date != today:
                flow.deactivate()
                flow = None
            if flow is None:
                flow = self._factory(user_id).activate()
                self._flows[user_id] = flow
                logger.debug("Activated check-in flow for staff %s", user_id)
            return flow

    def close(self, user_id: int) -> bool:
        with self._lock:
            flow = self._flows.pop(int(user_id), None)
        if flow is None:
            return False
        flow.deactivate()
        logger.debug("Closed check-in flow for staff %s", user_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            flows, self._flows = list(self._flows.values()), {}
        for flow in flows:
            flow.deactivate()

    def __len__(self) -> int:
        with self._lock:
            return len(self._flows)
