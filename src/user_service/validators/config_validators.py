"""Value normalizers shared by the Settings field validators (mode="before")."""

from typing import Any


def to_uppercase(value: Any) -> Any:
    """
    Upper-case string values; anything else (None, already-parsed values) is
    returned unchanged for pydantic to validate.
    """
    if not isinstance(value, str):
        return value
    return value.strip().upper()


def to_lowercase(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.strip().lower()
