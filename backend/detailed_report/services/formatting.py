"""Display formatting shared by the JSON view, the PDF and the print page.

All three outputs go through these helpers, so a figure is formatted in
exactly one place.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[Decimal, int, float]

NBSP = "\u00A0"
CENTS = Decimal('0.01')
TENTHS = Decimal('0.1')


def _to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_currency(value: Optional[Number]) -> str:
    """BRL currency as in pt-BR locale: ``R$ 1.234,56`` (non-breaking space)."""
    num = _to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = '-' if num < 0 else ''
    text = f"{abs(num):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R${NBSP}{text}"


def format_deduction(value: Optional[Number]) -> str:
    """Expense cells: ``- R$ 10,00`` when positive, ``-`` otherwise."""
    num = _to_decimal(value)
    if num > 0:
        return f"- {format_currency(num)}"
    return '-'


def format_percentage(value: Optional[Number]) -> str:
    num = _to_decimal(value).quantize(TENTHS, rounding=ROUND_HALF_UP)
    return f"{num}%"


def format_quantity(value: int) -> str:
    return str(int(value))


def format_date_br(iso_date: Union[str, date, None]) -> str:
    """Convert YYYY-MM-DD to DD/MM/YYYY; anything else is returned as-is."""
    if isinstance(iso_date, date):
        return iso_date.strftime("%d/%m/%Y")
    s = (iso_date or "").strip()
    if not s:
        return ""
    try:
        return date.fromisoformat(s[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return s


__all__ = [
    "format_currency",
    "format_deduction",
    "format_percentage",
    "format_quantity",
    "format_date_br",
]
