from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a staff account.

    Plain data object; no DB access code lives here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    campus_id: Optional[int]
    shift_id: Optional[int]
    is_active: bool = True
