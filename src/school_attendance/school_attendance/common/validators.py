from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def parse_status(value) -> Optional[AttendanceStatus]:
    """Parse an attendance status; empty values mean "not marked"."""
    if value is None:
        return None
    if isinstance(value, AttendanceStatus):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    try:
        return AttendanceStatus(text)
    except ValueError:
        raise ValidationError(f"Invalid status: {value!r}")
