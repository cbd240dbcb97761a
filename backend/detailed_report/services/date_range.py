from datetime import date
from typing import NamedTuple, Optional, Union

from ..exceptions import InvalidDateRange
from .formatting import format_date_br

DateLike = Union[str, date]


class DateRange(NamedTuple):
    """Order-corrected ``(start, end)`` pair; the fetch and cache key."""

    start: str
    end: str

    @property
    def label(self) -> str:
        return f"{format_date_br(self.start)} - {format_date_br(self.end)}"


def _to_iso(value: DateLike) -> str:
    if isinstance(value, date):
        return value.isoformat()
    s = (value or '').strip()
    try:
        return date.fromisoformat(s).isoformat()
    except ValueError:
        raise InvalidDateRange(f"Data inválida: '{value}'. Use o formato AAAA-MM-DD.")


def normalize_range(start: DateLike, end: DateLike) -> DateRange:
    """Return the two dates ordered so that ``start <= end``.

    Inverted input is swapped silently; it is never reported as an error.
    """
    start_iso, end_iso = _to_iso(start), _to_iso(end)
    if start_iso <= end_iso:
        return DateRange(start_iso, end_iso)
    return DateRange(end_iso, start_iso)


def default_range(today: Optional[date] = None) -> DateRange:
    """First day of the current month through today."""
    today = today or date.today()
    return DateRange(today.replace(day=1).isoformat(), today.isoformat())
