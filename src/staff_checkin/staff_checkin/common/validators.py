from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_float(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number != number:
        raise ValidationError(f"{field_name} must be a number")
    return number


def require_range(value: float, field_name: str, low: float, high: float) -> float:
    if value < low or value > high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return value


def optional_text(value: Any) -> Optional[str]:
    """Normalize optional free text: blank strings become None."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
