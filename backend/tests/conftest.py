from decimal import Decimal

import pytest

from detailed_report.schemas.report import (
    ContainerStockRow,
    ExpenseRecord,
    LiquidStockRow,
    PaymentBreakdownRow,
    ProductSummaryRow,
    ReceivementRecord,
    ReceivementSummaryRow,
    ReportAggregate,
    ReportMetadata,
    ReportResponse,
    SaleRecord,
)


def sale(client, product, quantity, unit_price, method=None, total=None, expenses=None, **extra):
    unit_price = Decimal(str(unit_price))
    return SaleRecord(
        client=client,
        city=extra.pop('city', 'Campinas'),
        unit=extra.pop('unit', 'Matriz'),
        product=product,
        date=extra.pop('date', '2024-03-05'),
        quantity=quantity,
        unit_price=unit_price,
        total=Decimal(str(total)) if total is not None else unit_price * quantity,
        payment_method=method,
        expenses=Decimal(str(expenses)) if expenses is not None else None,
        **extra,
    )


def receivement(code, client, method, amount, received=None):
    return ReceivementRecord(
        code=code, client=client, method=method, document=f"DOC-{code}",
        amount=Decimal(str(amount)),
        received=Decimal(str(received)) if received is not None else None,
    )


@pytest.fixture
def metadata():
    return ReportMetadata(
        date="10/03/2024",
        unit="Matriz",
        city="Campinas",
        period="01/03/2024 - 10/03/2024",
        prepared_by="Sistema SISGÁS",
    )


@pytest.fixture
def scenario_sales():
    return (
        sale("Comercial Silva", "P13", 2, 100, method="Pix"),
        sale("Padaria Pão Quente", "P13", 1, 100, method="Dinheiro"),
    )


@pytest.fixture
def aggregate(metadata):
    """Aggregate whose server rollups are consistent with its records."""
    sales = (
        sale("Comercial Silva", "Gás P13", 2, 110, method="Pix", expenses=20),
        sale("Padaria Pão Quente", "Gás P45", 1, 480, method="Boleto"),
        sale("Comercial Silva", "Água 20L", 10, "14.50", method="Pix", expenses="5.50"),
        sale("Maria Aparecida", "Gás P13", 1, 115),
    )
    receivements = (
        receivement("R1", "Comercial Silva", "Pix", 220),
        receivement("R2", "Padaria Pão Quente", "Boleto", 480, received=240),
        receivement("R3", "Comercial Silva", "Pix", 145),
    )
    breakdown = (
        PaymentBreakdownRow(method="Pix", quantity=2, amount=Decimal("365.00"), percentage=Decimal("38.0")),
        PaymentBreakdownRow(method="Boleto", quantity=1, amount=Decimal("480"), percentage=Decimal("50.0")),
        PaymentBreakdownRow(method="Outros", quantity=1, amount=Decimal("115"), percentage=Decimal("12.0")),
    )
    return ReportAggregate(
        metadata=metadata,
        sales=sales,
        product_summary=(
            ProductSummaryRow(product="Gás P13", quantity=3, average_price=Decimal("111.6666"), total=Decimal("335")),
            ProductSummaryRow(product="Gás P45", quantity=1, average_price=Decimal("480"), total=Decimal("480")),
            ProductSummaryRow(product="Água 20L", quantity=10, average_price=Decimal("14.50"), total=Decimal("145.00")),
        ),
        payment_breakdown=breakdown,
        receivements=receivements,
        receivement_summary=(
            ReceivementSummaryRow(method="Pix", quantity=2, amount=Decimal("365")),
            ReceivementSummaryRow(method="Boleto", quantity=1, amount=Decimal("480")),
        ),
        expenses=(
            ExpenseRecord(provider="Ultragaz", due_date="2024-03-15", document="NF 1", amount=Decimal("1000")),
            ExpenseRecord(provider="Posto Central", due_date="2024-03-20", document="CF 2", amount=Decimal("250.75")),
        ),
        general_detail=breakdown,
        liquid_stock=(LiquidStockRow(product="Gás P13", location="Matriz", quantity=40),),
        container_stock=(ContainerStockRow(product="Gás P13", location="Matriz", empty=12, maintenance=3, total=15),),
    )


class FakeSource:
    """Data source returning a canned response and recording each call."""

    def __init__(self, response=None):
        self.response = response
        self.calls = []

    async def fetch_detailed_report(self, date_range, location_id=None):
        self.calls.append((date_range, location_id))
        return self.response

    async def fetch_clients(self):
        return []


@pytest.fixture
def ok_source(aggregate):
    return FakeSource(ReportResponse(success=True, data=aggregate))


@pytest.fixture
def failing_source():
    return FakeSource(ReportResponse(success=False, error="timeout"))
