from typing import Optional

ALL = "Todos"


def _normalize(value: Optional[str]) -> str:
    return (value or '').strip().lower()


def is_all(filter_value: Optional[str]) -> bool:
    """True for the "no filter" sentinel (blank counts as no filter too)."""
    s = (filter_value or '').strip()
    return not s or s == ALL


def matches(filter_value: Optional[str], record_value: Optional[str]) -> bool:
    """Loose match used for client names.

    Case-insensitive, trimmed; equal values match and so does either string
    containing the other. Short filters can over-match ("Ana" in "Mariana"),
    and a record with a blank name is contained in every filter value.
    """
    if is_all(filter_value):
        return True
    wanted = _normalize(filter_value)
    actual = _normalize(record_value)
    return wanted == actual or wanted in actual or actual in wanted


def matches_exact(filter_value: Optional[str], record_value: Optional[str]) -> bool:
    """Strict equality, used for payment methods."""
    if is_all(filter_value):
        return True
    return filter_value == record_value
