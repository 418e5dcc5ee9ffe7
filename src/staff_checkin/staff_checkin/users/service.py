from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..shifts.repository import ShiftRepository
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    campus_id: Optional[int]
    shift_id: Optional[int]
    shift_info: str


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository, shifts: ShiftRepository):
        self._users = users
        self._shifts = shifts

    def get_shift_info(self, shift_id: Optional[int]) -> str:
        shift = self._shifts.get_by_id(shift_id) if shift_id else None
        if not shift:
            return "No shift assigned"
        return shift.label()

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %r", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            campus_id=user.campus_id,
            shift_id=user.shift_id,
            shift_info=self.get_shift_info(user.shift_id),
        )
