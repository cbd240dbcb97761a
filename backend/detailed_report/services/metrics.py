"""Scalar summary figures for the detailed report.

Everything here is a pure function of the collections currently on screen
(filtered or not), recomputed on every view. Two expense measures exist and
must stay apart: ``order_expenses_total`` sums the per-sale costs (freight,
fuel) and feeds the net value; ``total_expenses`` sums the company-wide
payables and is never filtered.
"""
from decimal import Decimal
from typing import Iterable, NamedTuple, Sequence

from ..schemas.report import (
    ContainerStockRow,
    ExpenseRecord,
    LiquidStockRow,
    PaymentBreakdownRow,
    ProductSummaryRow,
    ReceivementRecord,
    ReceivementSummaryRow,
    SaleRecord,
)

ZERO = Decimal('0')


class ReportMetrics(NamedTuple):
    total_sales: Decimal
    total_quantity: int
    average_ticket: Decimal
    payment_total: Decimal
    payment_quantity: int
    total_expenses: Decimal
    order_expenses_total: Decimal
    net_value: Decimal


class SectionTotals(NamedTuple):
    product_quantity: int
    product_total: Decimal
    receivement_billed: Decimal
    receivement_received: Decimal
    receivement_summary_quantity: int
    receivement_summary_amount: Decimal
    general_quantity: int
    general_amount: Decimal
    returned_checks_amount: Decimal
    liquid_stock_quantity: int
    container_empty: int
    container_maintenance: int
    container_total: int


def _money(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def average_ticket(total_sales: Decimal, total_quantity: int) -> Decimal:
    return total_sales / total_quantity if total_quantity > 0 else ZERO


def compute_metrics(sales: Sequence[SaleRecord],
                    payment_breakdown: Sequence[PaymentBreakdownRow],
                    expenses: Sequence[ExpenseRecord]) -> ReportMetrics:
    total_sales = _money(s.total for s in sales)
    total_quantity = sum(s.quantity for s in sales)
    order_expenses_total = _money(s.expenses_amount for s in sales)
    return ReportMetrics(
        total_sales=total_sales,
        total_quantity=total_quantity,
        average_ticket=average_ticket(total_sales, total_quantity),
        payment_total=_money(r.amount for r in payment_breakdown),
        payment_quantity=sum(r.quantity for r in payment_breakdown),
        total_expenses=_money(e.amount for e in expenses),
        order_expenses_total=order_expenses_total,
        net_value=total_sales - order_expenses_total,
    )


def compute_section_totals(product_summary: Sequence[ProductSummaryRow],
                           receivements: Sequence[ReceivementRecord],
                           receivement_summary: Sequence[ReceivementSummaryRow],
                           general_detail: Sequence[PaymentBreakdownRow],
                           returned_checks: Sequence[ReceivementRecord],
                           liquid_stock: Sequence[LiquidStockRow],
                           container_stock: Sequence[ContainerStockRow]) -> SectionTotals:
    """Trailing "Total" row values for every table of the report."""
    return SectionTotals(
        product_quantity=sum(r.quantity for r in product_summary),
        product_total=_money(r.total for r in product_summary),
        receivement_billed=_money(r.amount for r in receivements),
        receivement_received=_money(r.effective_received for r in receivements),
        receivement_summary_quantity=sum(r.quantity for r in receivement_summary),
        receivement_summary_amount=_money(r.amount for r in receivement_summary),
        general_quantity=sum(r.quantity for r in general_detail),
        general_amount=_money(r.amount for r in general_detail),
        returned_checks_amount=_money(r.amount for r in returned_checks),
        liquid_stock_quantity=sum(r.quantity for r in liquid_stock),
        container_empty=sum(r.empty for r in container_stock),
        container_maintenance=sum(r.maintenance for r in container_stock),
        container_total=sum(r.total for r in container_stock),
    )
