from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..config import settings
from ..schemas.report import (
    ClientEntry,
    ContainerStockRow,
    ExpenseRecord,
    LiquidStockRow,
    ReceivementRecord,
    ReportAggregate,
    ReportMetadata,
    ReportResponse,
    SaleRecord,
)
from ..services.aggregation import (
    build_payment_breakdown,
    build_product_summary,
    build_receivement_summary,
)
from ..services.date_range import DateRange
from ..services.formatting import format_date_br

# Demo rows used when no upstream API is configured (REPORT_API_URL=stub://...)
DEMO_SALES = [
    ("Comercial Silva Ltda", "Campinas", "Matriz", "Gás P13", 10, "110.00", "Pix", "Pago", "25.00"),
    ("Padaria Pão Quente", "Campinas", "Matriz", "Gás P45", 2, "480.00", "Boleto", "Pendente", "40.00"),
    ("Maria Aparecida", "Valinhos", "Filial Valinhos", "Gás P13", 1, "115.00", "Dinheiro", "Pago", None),
    ("Restaurante Sabor Caseiro", "Campinas", "Matriz", "Gás P45", 3, "470.00", "Cartão", "Pago", "30.00"),
    ("Comercial Silva Ltda", "Campinas", "Matriz", "Água 20L", 12, "14.00", "Pix", "Pago", None),
    ("José Carlos", "Sumaré", "Filial Valinhos", "Gás P13", 2, "112.50", None, "Vencido", None),
]

DEMO_RECEIVEMENTS = [
    ("REC-001", "Comercial Silva Ltda", "Pix", "NF 1021", "1100.00", None),
    ("REC-002", "Padaria Pão Quente", "Boleto", "BOL 553", "960.00", "480.00"),
    ("REC-003", "Maria Aparecida", "Dinheiro", "NF 1024", "115.00", None),
    ("REC-004", "Restaurante Sabor Caseiro", "Cartão", "NF 1025", "1410.00", None),
]

DEMO_EXPENSES = [
    ("Ultragaz Distribuidora", 5, "NF 88231", "18500.00"),
    ("Posto Central (combustível)", 10, "CF 4410", "1320.75"),
    ("Energia Elétrica CPFL", 15, "FAT 0923", "610.40"),
]


def _day(date_range: DateRange, offset: int) -> str:
    start = date.fromisoformat(date_range.start)
    end = date.fromisoformat(date_range.end)
    span = (end - start).days
    return date.fromordinal(start.toordinal() + (offset % (span + 1))).isoformat()


def demo_aggregate(date_range: DateRange, today: Optional[date] = None) -> ReportAggregate:
    sales = tuple(
        SaleRecord(
            client=client, city=city, unit=unit, product=product, quantity=qty,
            unit_price=Decimal(price), total=Decimal(price) * qty,
            date=_day(date_range, i), payment_method=method, payment_status=status,
            expenses=Decimal(exp) if exp else None,
        )
        for i, (client, city, unit, product, qty, price, method, status, exp) in enumerate(DEMO_SALES)
    )
    receivements = tuple(
        ReceivementRecord(
            code=code, client=client, method=method, document=doc, amount=Decimal(amount),
            received=Decimal(received) if received else None, date=_day(date_range, i),
        )
        for i, (code, client, method, doc, amount, received) in enumerate(DEMO_RECEIVEMENTS)
    )
    expenses = tuple(
        ExpenseRecord(provider=provider, due_date=_day(date_range, offset), document=doc,
                      amount=Decimal(amount))
        for provider, offset, doc, amount in DEMO_EXPENSES
    )
    breakdown = build_payment_breakdown(sales)
    return ReportAggregate(
        metadata=ReportMetadata(
            date=format_date_br(today or date.today()),
            unit="Todas as unidades",
            city="Consolidado",
            period=date_range.label,
            prepared_by=settings.prepared_by,
        ),
        sales=sales,
        product_summary=build_product_summary(sales),
        payment_breakdown=breakdown,
        receivements=receivements,
        receivement_summary=build_receivement_summary(receivements),
        expenses=expenses,
        general_detail=breakdown,
        liquid_stock=(
            LiquidStockRow(product="Gás P13", location="Matriz", quantity=140),
            LiquidStockRow(product="Gás P45", location="Matriz", quantity=22),
            LiquidStockRow(product="Gás P13", location="Filial Valinhos", quantity=48),
        ),
        container_stock=(
            ContainerStockRow(product="Gás P13", location="Matriz", empty=63, maintenance=4, total=67),
            ContainerStockRow(product="Gás P45", location="Matriz", empty=9, maintenance=1, total=10),
        ),
    )


class StubReportDataSource:
    """Local stand-in for the upstream API, for development and demos."""

    async def fetch_detailed_report(self, date_range: DateRange,
                                    location_id: Optional[int] = None) -> ReportResponse:
        return ReportResponse(success=True, data=demo_aggregate(date_range))

    async def fetch_clients(self) -> List[ClientEntry]:
        names = []
        for row in DEMO_SALES:
            if row[0] not in names:
                names.append(row[0])
        return [ClientEntry(id=i, name=name) for i, name in enumerate(names, start=1)]
