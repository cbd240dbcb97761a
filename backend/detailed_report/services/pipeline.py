"""``aggregate x filters -> DerivedView``.

The derived view is everything the screen and both exports read. It is
rebuilt from the raw aggregate on demand and never mutated; ``ViewMemo``
skips the rebuild while neither the aggregate nor the filters changed.
"""
from datetime import date
from typing import Callable, List, NamedTuple, Optional, Tuple

from ..schemas.report import (
    ContainerStockRow,
    ExpenseRecord,
    LiquidStockRow,
    ReceivementRecord,
    ReportAggregate,
    ReportMetadata,
    SaleRecord,
)
from .aggregation import (
    Rollups,
    derive_rollups,
    filter_receivements,
    filter_sales,
    payment_method_options,
    server_rollups,
)
from .date_range import DateRange
from .formatting import format_date_br
from .matching import ALL
from .metrics import ReportMetrics, SectionTotals, compute_metrics, compute_section_totals

FALLBACK_UNIT = "Todas as unidades"
FALLBACK_CITY = "Consolidado"
DEFAULT_PREPARED_BY = "Sistema SISGÁS"


class ReportFilters(NamedTuple):
    client: str = ALL
    payment_method: str = ALL


class DerivedView(NamedTuple):
    metadata: ReportMetadata
    date_range: DateRange
    filters: ReportFilters
    loaded: bool
    sales: Tuple[SaleRecord, ...]
    receivements: Tuple[ReceivementRecord, ...]
    returned_checks: Tuple[ReceivementRecord, ...]
    expenses: Tuple[ExpenseRecord, ...]
    liquid_stock: Tuple[LiquidStockRow, ...]
    container_stock: Tuple[ContainerStockRow, ...]
    rollups: Rollups
    metrics: ReportMetrics
    totals: SectionTotals
    payment_options: List[str]

    @property
    def applied_period(self) -> str:
        return self.metadata.period


def fallback_metadata(date_range: DateRange, prepared_by: str = DEFAULT_PREPARED_BY,
                      today: Optional[date] = None) -> ReportMetadata:
    return ReportMetadata(
        date=format_date_br(today or date.today()),
        unit=FALLBACK_UNIT,
        city=FALLBACK_CITY,
        period=date_range.label,
        prepared_by=prepared_by,
    )


def derive_view(aggregate: Optional[ReportAggregate],
                date_range: DateRange,
                filters: ReportFilters = ReportFilters(),
                prepared_by: str = DEFAULT_PREPARED_BY,
                today: Optional[date] = None) -> DerivedView:
    """Build the view for ``aggregate`` (``None`` when nothing is loaded)."""
    if aggregate is None:
        metadata = fallback_metadata(date_range, prepared_by, today)
        base_sales, base_receivements, returned = (), (), ()
        expenses, liquid, container = (), (), ()
    else:
        metadata = aggregate.metadata
        base_sales = aggregate.sales
        base_receivements = aggregate.receivements
        returned = aggregate.returned_checks
        expenses = aggregate.expenses
        liquid = aggregate.liquid_stock
        container = aggregate.container_stock

    sales = filter_sales(base_sales, filters.client, filters.payment_method)
    receivements = filter_receivements(base_receivements, filters.client, filters.payment_method)
    returned_checks = filter_receivements(returned, filters.client, filters.payment_method)
    rollups = derive_rollups(base_sales, base_receivements, filters.client,
                             filters.payment_method, server_rollups(aggregate))

    return DerivedView(
        metadata=metadata,
        date_range=date_range,
        filters=filters,
        loaded=aggregate is not None,
        sales=sales,
        receivements=receivements,
        returned_checks=returned_checks,
        expenses=expenses,
        liquid_stock=liquid,
        container_stock=container,
        rollups=rollups,
        metrics=compute_metrics(sales, rollups.payment_breakdown, expenses),
        totals=compute_section_totals(
            rollups.product_summary, receivements, rollups.receivement_summary,
            rollups.general_detail, returned_checks, liquid, container),
        payment_options=payment_method_options(aggregate),
    )


class ViewMemo:
    """Single-entry memo keyed on ``(aggregate identity, range, filters)``."""

    def __init__(self) -> None:
        self._key = None
        self._value: Optional[DerivedView] = None

    def get(self, aggregate: Optional[ReportAggregate], date_range: DateRange,
            filters: ReportFilters,
            compute: Callable[[], DerivedView]) -> DerivedView:
        key = (aggregate, date_range, filters)
        if self._value is not None and self._same_key(key):
            return self._value
        self._value = compute()
        self._key = key
        return self._value

    def _same_key(self, key) -> bool:
        aggregate, date_range, filters = key
        old_aggregate, old_range, old_filters = self._key
        return aggregate is old_aggregate and date_range == old_range and filters == old_filters

    def clear(self) -> None:
        self._key = None
        self._value = None
