from datetime import date
from decimal import Decimal

from detailed_report.schemas.report import ReportAggregate
from detailed_report.services.date_range import DateRange
from detailed_report.services.pipeline import (
    FALLBACK_CITY,
    FALLBACK_UNIT,
    ReportFilters,
    ViewMemo,
    derive_view,
)

RANGE = DateRange("2024-03-01", "2024-03-10")


def test_unfiltered_view_uses_server_rollups(aggregate):
    view = derive_view(aggregate, RANGE)
    assert view.loaded
    assert view.rollups.product_summary == aggregate.product_summary
    assert view.sales == aggregate.sales
    assert view.metrics.total_sales == Decimal(960)
    assert view.applied_period == "01/03/2024 - 10/03/2024"


def test_client_filter_leaves_expenses_and_stock_alone(aggregate):
    view = derive_view(aggregate, RANGE, ReportFilters(client="Padaria"))
    assert [s.client for s in view.sales] == ["Padaria Pão Quente"]
    assert [r.code for r in view.receivements] == ["R2"]
    assert view.expenses == aggregate.expenses
    assert view.liquid_stock == aggregate.liquid_stock
    assert view.container_stock == aggregate.container_stock
    assert view.metrics.total_expenses == Decimal("1250.75")
    assert view.metrics.total_sales == Decimal(480)


def test_section_totals_follow_filtered_rows(aggregate):
    view = derive_view(aggregate, RANGE, ReportFilters(client="Comercial Silva"))
    t = view.totals
    assert t.product_total == view.metrics.total_sales == Decimal(365)
    assert t.receivement_billed == Decimal(365)
    assert t.general_amount == Decimal(365)
    assert t.liquid_stock_quantity == 40
    assert (t.container_empty, t.container_maintenance, t.container_total) == (12, 3, 15)


def test_received_defaults_to_amount(aggregate):
    view = derive_view(aggregate, RANGE)
    assert view.totals.receivement_billed == Decimal(845)
    assert view.totals.receivement_received == Decimal(605)


def test_returned_checks_follow_the_client_filter(aggregate):
    agg = aggregate.model_copy(update={'returned_checks': (
        aggregate.receivements[0].model_copy(update={'code': "CH1", 'method': "Cheque"}),
        aggregate.receivements[1].model_copy(update={'code': "CH2", 'method': "Cheque"}),
    )})
    view = derive_view(agg, RANGE, ReportFilters(client="Silva"))
    assert [r.code for r in view.returned_checks] == ["CH1"]
    assert view.totals.returned_checks_amount == Decimal(220)


def test_nothing_loaded_gives_fallback_metadata():
    view = derive_view(None, RANGE, today=date(2024, 3, 10))
    assert not view.loaded
    assert view.metadata.unit == FALLBACK_UNIT
    assert view.metadata.city == FALLBACK_CITY
    assert view.metadata.date == "10/03/2024"
    assert view.metadata.period == RANGE.label
    assert view.metrics.total_sales == 0
    assert view.payment_options == ["Todos"]


def test_general_detail_defaults_to_payment_breakdown():
    agg = ReportAggregate.model_validate({
        'metadata': {'date': "10/03/2024", 'unit': "Matriz", 'city': "Campinas",
                     'period': "01/03/2024 - 10/03/2024", 'preparedBy': "Sistema"},
        'paymentBreakdown': [{'method': "Pix", 'quantity': 1, 'amount': "50"}],
        'generalDetail': None,
        'sales': None,
    })
    assert agg.sales == ()
    assert [r.method for r in agg.general_detail] == ["Pix"]
    view = derive_view(agg, RANGE)
    assert view.totals.general_amount == Decimal(50)


def test_memo_reuses_view_until_inputs_change(aggregate):
    memo = ViewMemo()
    calls = []

    def compute(filters):
        def run():
            calls.append(filters)
            return derive_view(aggregate, RANGE, filters)
        return run

    first = memo.get(aggregate, RANGE, ReportFilters(), compute(ReportFilters()))
    again = memo.get(aggregate, RANGE, ReportFilters(), compute(ReportFilters()))
    assert again is first
    assert len(calls) == 1

    narrowed = ReportFilters(client="Silva")
    other = memo.get(aggregate, RANGE, narrowed, compute(narrowed))
    assert other is not first
    assert len(calls) == 2


def test_memo_keys_on_aggregate_identity(aggregate):
    memo = ViewMemo()
    calls = []

    def compute(agg):
        def run():
            calls.append(agg)
            return derive_view(agg, RANGE)
        return run

    memo.get(aggregate, RANGE, ReportFilters(), compute(aggregate))
    copy = aggregate.model_copy()
    memo.get(copy, RANGE, ReportFilters(), compute(copy))
    assert len(calls) == 2
    memo.clear()
    memo.get(copy, RANGE, ReportFilters(), compute(copy))
    assert len(calls) == 3
