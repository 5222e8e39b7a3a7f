"""Lightweight validation helpers."""

from typing import Any

from utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError (400) if value is falsy."""
    if value in (None, "", []):
        raise ValidationError(f"{field} is required", status_code=400)
