"""Re-aggregation of the report rollups under client-side filters.

When no narrowing filter is active the server-computed rollups are used as
they came. Otherwise the product summary, payment breakdown, receivement
summary and general detail are rebuilt from the filtered sales and
receivements so the tables always add up to the rows on screen. Expenses
and stock are company-wide and never pass through here.

Grouping keys are exact strings: "Gás P13" and "gás p13" are two groups,
unlike the loose client matcher.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from ..schemas.report import (
    ClientEntry,
    PaymentBreakdownRow,
    ProductSummaryRow,
    ReceivementRecord,
    ReceivementSummaryRow,
    ReportAggregate,
    SaleRecord,
)
from .matching import ALL, is_all, matches, matches_exact

DEFAULT_METHOD = "Outros"
ZERO = Decimal('0')
HUNDRED = Decimal('100')


class Rollups(NamedTuple):
    product_summary: Tuple[ProductSummaryRow, ...]
    payment_breakdown: Tuple[PaymentBreakdownRow, ...]
    receivement_summary: Tuple[ReceivementSummaryRow, ...]
    general_detail: Tuple[PaymentBreakdownRow, ...]


def sale_method(sale: SaleRecord) -> str:
    return sale.payment_method or DEFAULT_METHOD


def filter_sales(sales: Iterable[SaleRecord], client_filter: str,
                 payment_filter: str) -> Tuple[SaleRecord, ...]:
    return tuple(
        s for s in sales
        if matches(client_filter, s.client) and matches_exact(payment_filter, sale_method(s))
    )


def filter_receivements(receivements: Iterable[ReceivementRecord], client_filter: str,
                        payment_filter: str) -> Tuple[ReceivementRecord, ...]:
    return tuple(
        r for r in receivements
        if matches(client_filter, r.client) and matches_exact(payment_filter, r.method)
    )


def with_percentages(rows: Sequence[PaymentBreakdownRow]) -> Tuple[PaymentBreakdownRow, ...]:
    """Set ``percentage = amount / Σamount * 100`` (0 when the sum is 0).

    Percentages sent by the server are overwritten so the column always
    adds up to the rows shown.
    """
    total = sum((r.amount for r in rows), ZERO)
    return tuple(
        r.model_copy(update={'percentage': (r.amount / total * HUNDRED) if total else ZERO})
        for r in rows
    )


def build_product_summary(sales: Iterable[SaleRecord]) -> Tuple[ProductSummaryRow, ...]:
    groups: Dict[str, List] = {}
    for s in sales:
        acc = groups.setdefault(s.product, [0, ZERO])
        acc[0] += s.quantity
        acc[1] += s.total
    return tuple(
        ProductSummaryRow(
            product=product,
            quantity=qty,
            average_price=(total / qty) if qty else ZERO,
            total=total,
        )
        for product, (qty, total) in groups.items()
    )


def build_payment_breakdown(sales: Iterable[SaleRecord]) -> Tuple[PaymentBreakdownRow, ...]:
    groups: Dict[str, List] = {}
    for s in sales:
        acc = groups.setdefault(sale_method(s), [0, ZERO])
        acc[0] += 1
        acc[1] += s.total
    rows = [
        PaymentBreakdownRow(method=method, quantity=count, amount=amount)
        for method, (count, amount) in groups.items()
    ]
    return with_percentages(rows)


def build_receivement_summary(receivements: Iterable[ReceivementRecord]) -> Tuple[ReceivementSummaryRow, ...]:
    groups: Dict[str, List] = {}
    for r in receivements:
        acc = groups.setdefault(r.method, [0, ZERO])
        acc[0] += 1
        acc[1] += r.amount
    return tuple(
        ReceivementSummaryRow(method=method, quantity=count, amount=amount)
        for method, (count, amount) in groups.items()
    )


def server_rollups(aggregate: Optional[ReportAggregate]) -> Rollups:
    if aggregate is None:
        return Rollups((), (), (), ())
    return Rollups(
        product_summary=aggregate.product_summary,
        payment_breakdown=with_percentages(aggregate.payment_breakdown),
        receivement_summary=aggregate.receivement_summary,
        general_detail=with_percentages(aggregate.general_detail),
    )


def derive_rollups(base_sales: Sequence[SaleRecord],
                   base_receivements: Sequence[ReceivementRecord],
                   client_filter: str,
                   payment_filter: str,
                   fallback: Rollups) -> Rollups:
    """Rollups for the active filters.

    ``base_*`` are the unfiltered collections; ``fallback`` holds the
    server-computed rollups, returned as-is when no filter narrows the data.
    """
    if is_all(client_filter) and is_all(payment_filter):
        return fallback
    sales = filter_sales(base_sales, client_filter, payment_filter)
    receivements = filter_receivements(base_receivements, client_filter, payment_filter)
    breakdown = build_payment_breakdown(sales)
    return Rollups(
        product_summary=build_product_summary(sales),
        payment_breakdown=breakdown,
        receivement_summary=build_receivement_summary(receivements),
        general_detail=breakdown,
    )


def payment_method_options(aggregate: Optional[ReportAggregate]) -> List[str]:
    """Choices for the payment-method dropdown, "Todos" first."""
    if aggregate is None:
        return [ALL]
    methods = {r.method for r in aggregate.receivement_summary}
    methods.update(r.method for r in aggregate.payment_breakdown)
    methods.discard(ALL)
    return [ALL] + sorted(methods)


def client_options(directory: Iterable[ClientEntry]) -> List[str]:
    names = []
    for c in directory:
        if c.name and c.name not in names:
            names.append(c.name)
    return [ALL] + names
