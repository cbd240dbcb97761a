from decimal import Decimal
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

PaymentStatus = Literal["Pago", "Vencido", "Pendente"]


class WireModel(BaseModel):
    """Immutable record read from (or written back to) the camelCase API."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class ReportMetadata(WireModel):
    date: str
    unit: str
    city: str
    period: str
    prepared_by: str


class SaleRecord(WireModel):
    client: str
    city: str = ''
    unit: str = ''
    product: str
    date: str = ''
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    # authoritative value from the source, never recomputed
    total: Decimal
    payment_method: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    expenses: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[str] = None
    paid_amount: Optional[Decimal] = None
    due_date: Optional[str] = None

    @property
    def expenses_amount(self) -> Decimal:
        return self.expenses or Decimal('0')

    @property
    def net_value(self) -> Decimal:
        return self.total - self.expenses_amount


class ProductSummaryRow(WireModel):
    product: str
    quantity: int
    average_price: Decimal
    total: Decimal


class PaymentBreakdownRow(WireModel):
    method: str
    quantity: int
    amount: Decimal
    percentage: Optional[Decimal] = None


class ReceivementRecord(WireModel):
    code: str
    client: str
    method: str
    document: str = ''
    amount: Decimal
    received: Optional[Decimal] = None
    date: Optional[str] = None

    @property
    def effective_received(self) -> Decimal:
        return self.amount if self.received is None else self.received


class ReceivementSummaryRow(WireModel):
    method: str
    quantity: int
    amount: Decimal


class ExpenseRecord(WireModel):
    provider: str
    due_date: str = ''
    document: str = ''
    amount: Decimal


class LiquidStockRow(WireModel):
    product: str
    location: str
    quantity: int


class ContainerStockRow(WireModel):
    product: str
    location: str
    empty: int = 0
    maintenance: int = 0
    total: int = 0


class ReportAggregate(WireModel):
    metadata: ReportMetadata
    sales: Tuple[SaleRecord, ...] = ()
    product_summary: Tuple[ProductSummaryRow, ...] = ()
    payment_breakdown: Tuple[PaymentBreakdownRow, ...] = ()
    receivements: Tuple[ReceivementRecord, ...] = ()
    returned_checks: Tuple[ReceivementRecord, ...] = ()
    receivement_summary: Tuple[ReceivementSummaryRow, ...] = ()
    expenses: Tuple[ExpenseRecord, ...] = ()
    general_detail: Tuple[PaymentBreakdownRow, ...] = ()
    liquid_stock: Tuple[LiquidStockRow, ...] = ()
    container_stock: Tuple[ContainerStockRow, ...] = ()

    @model_validator(mode='before')
    @classmethod
    def _general_detail_fallback(cls, data):
        # generalDetail mirrors paymentBreakdown when the source omits it
        if isinstance(data, dict):
            has_detail = any(
                data.get(k) is not None for k in ('generalDetail', 'general_detail'))
            if not has_detail:
                breakdown = data.get('paymentBreakdown', data.get('payment_breakdown'))
                if breakdown is not None:
                    data = {**data, 'generalDetail': breakdown}
            # explicit nulls from the API mean "no rows"
            data = {k: v for k, v in data.items() if v is not None}
        return data


class ReportResponse(BaseModel):
    success: bool
    data: Optional[ReportAggregate] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ClientEntry(WireModel):
    id: int
    name: str
