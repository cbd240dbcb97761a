"""Formatted document model shared by the screen and both exports.

``build_document`` turns a ``DerivedView`` into header lines, summary cards
and ordered sections whose cells are final strings. The PDF and the print
page only lay these strings out; neither formats nor sums anything, so the
exported figures cannot differ from the ones on screen.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from .formatting import (
    format_currency,
    format_date_br,
    format_deduction,
    format_percentage,
    format_quantity,
)
from .matching import is_all
from .metrics import average_ticket
from .pipeline import DerivedView

REPORT_TITLE = "RELATÓRIO DETALHADO DE VENDAS"

LEFT = "left"
RIGHT = "right"


class SummaryCard(BaseModel):
    key: str
    label: str
    value: str
    hint: str
    tone: str = "neutral"


class ReportSection(BaseModel):
    key: str
    title: str
    head: List[str]
    align: List[str]
    rows: List[List[str]]
    total: List[str]
    empty_message: str

    @property
    def is_empty(self) -> bool:
        return not self.rows


class ReportHeader(BaseModel):
    title: str
    period: str
    unit: str
    city: str
    emitted_at: str
    prepared_by: str
    filters: Optional[str] = None

    @property
    def lines(self) -> List[str]:
        lines = [
            f"Período: {self.period}",
            f"Unidade: {self.unit} · {self.city}",
            f"Emitido em: {self.emitted_at}",
            f"Preparado por: {self.prepared_by}",
        ]
        if self.filters:
            lines.append(f"Filtros: {self.filters}")
        return lines


class ReportDocument(BaseModel):
    header: ReportHeader
    cards: List[SummaryCard]
    sections: List[ReportSection]
    file_name: str

    def section(self, key: str) -> ReportSection:
        for s in self.sections:
            if s.key == key:
                return s
        raise KeyError(key)


def pdf_file_name(metadata_date: str) -> str:
    return f"relatorio-detalhado-{metadata_date.replace('/', '-')}.pdf"


def _filters_label(view: DerivedView) -> Optional[str]:
    parts = []
    if not is_all(view.filters.client):
        parts.append(f"Cliente: {view.filters.client}")
    if not is_all(view.filters.payment_method):
        parts.append(f"Forma: {view.filters.payment_method}")
    return " · ".join(parts) or None


def build_cards(view: DerivedView) -> List[SummaryCard]:
    m = view.metrics
    return [
        SummaryCard(key="gross", label="Faturamento Bruto",
                    value=format_currency(m.total_sales),
                    hint="Valor total das vendas", tone="positive"),
        SummaryCard(key="quantity", label="Quantidade Total",
                    value=f"{format_quantity(m.total_quantity)} un",
                    hint=f"Período: {view.applied_period}"),
        SummaryCard(key="order_expenses", label="Despesas (Pedidos)",
                    value=f"- {format_currency(m.order_expenses_total)}",
                    hint="Frete, combustível, etc.", tone="negative"),
        SummaryCard(key="net", label="Valor Líquido",
                    value=format_currency(m.net_value),
                    hint="Faturamento - Despesas",
                    tone="positive" if m.net_value >= 0 else "negative"),
        SummaryCard(key="average_ticket", label="Ticket Médio",
                    value=format_currency(m.average_ticket),
                    hint="Por unidade vendida"),
    ]


def _sales_section(view: DerivedView) -> ReportSection:
    m = view.metrics
    return ReportSection(
        key="sales",
        title="Vendas",
        head=["Cliente", "Cidade", "Unidade", "Produto", "Qtd.", "P. Unitário",
              "Valor Bruto", "Despesas", "Valor Líquido"],
        align=[LEFT, LEFT, LEFT, LEFT, RIGHT, RIGHT, RIGHT, RIGHT, RIGHT],
        rows=[
            [s.client, s.city, s.unit, s.product, format_quantity(s.quantity),
             format_currency(s.unit_price), format_currency(s.total),
             format_deduction(s.expenses_amount), format_currency(s.net_value)]
            for s in view.sales
        ],
        total=["Total Geral", "", "", "", format_quantity(m.total_quantity),
               format_currency(m.average_ticket), format_currency(m.total_sales),
               format_deduction(m.order_expenses_total), format_currency(m.net_value)],
        empty_message="Nenhuma venda registrada no período selecionado.",
    )


def _products_section(view: DerivedView) -> ReportSection:
    t = view.totals
    return ReportSection(
        key="products",
        title="Produtos",
        head=["Produto", "Quantidade", "P. Médio", "Total"],
        align=[LEFT, RIGHT, RIGHT, RIGHT],
        rows=[
            [r.product, format_quantity(r.quantity), format_currency(r.average_price),
             format_currency(r.total)]
            for r in view.rollups.product_summary
        ],
        total=["Total", format_quantity(t.product_quantity),
               format_currency(average_ticket(t.product_total, t.product_quantity)),
               format_currency(t.product_total)],
        empty_message="Sem dados de produtos para o período selecionado.",
    )


def _finance_section(view: DerivedView) -> ReportSection:
    m = view.metrics
    return ReportSection(
        key="finance",
        title="Financeiro",
        head=["Forma", "Quantidade", "Total", "%"],
        align=[LEFT, RIGHT, RIGHT, RIGHT],
        rows=[
            [r.method, format_quantity(r.quantity), format_currency(r.amount),
             format_percentage(r.percentage)]
            for r in view.rollups.payment_breakdown
        ],
        total=["Total", format_quantity(m.payment_quantity), format_currency(m.payment_total),
               format_percentage(Decimal('100') if m.payment_total else Decimal('0'))],
        empty_message="Não há registros financeiros neste período.",
    )


def _receivements_section(view: DerivedView) -> ReportSection:
    t = view.totals
    return ReportSection(
        key="receivements",
        title="Recebimentos",
        head=["Código", "Cliente", "Forma", "Documento", "Valor", "Recebido"],
        align=[LEFT, LEFT, LEFT, LEFT, RIGHT, RIGHT],
        rows=[
            [r.code, r.client, r.method, r.document, format_currency(r.amount),
             format_currency(r.effective_received)]
            for r in view.receivements
        ],
        total=["Total", "", "", "", format_currency(t.receivement_billed),
               format_currency(t.receivement_received)],
        empty_message="Nenhum recebimento registrado no período.",
    )


def _receivement_summary_section(view: DerivedView) -> ReportSection:
    t = view.totals
    return ReportSection(
        key="receivement_summary",
        title="Resumo dos Recebimentos",
        head=["Forma", "Quantidade", "Total"],
        align=[LEFT, RIGHT, RIGHT],
        rows=[
            [r.method, format_quantity(r.quantity), format_currency(r.amount)]
            for r in view.rollups.receivement_summary
        ],
        total=["Total", format_quantity(t.receivement_summary_quantity),
               format_currency(t.receivement_summary_amount)],
        empty_message="Nenhum recebimento consolidado no período.",
    )


def _expenses_section(view: DerivedView) -> ReportSection:
    return ReportSection(
        key="expenses",
        title="Despesas (Todas as Unidades)",
        head=["Cedente", "Vencimento", "Documento", "Valor"],
        align=[LEFT, LEFT, LEFT, RIGHT],
        rows=[
            [e.provider, format_date_br(e.due_date), e.document, format_currency(e.amount)]
            for e in view.expenses
        ],
        total=["Total Geral", "", "", format_currency(view.metrics.total_expenses)],
        empty_message="Nenhuma despesa registrada no período.",
    )


def _general_detail_section(view: DerivedView) -> ReportSection:
    t = view.totals
    return ReportSection(
        key="general_detail",
        title="Detalhamento Geral",
        head=["Forma", "Quantidade", "Total"],
        align=[LEFT, RIGHT, RIGHT],
        rows=[
            [r.method, format_quantity(r.quantity), format_currency(r.amount)]
            for r in view.rollups.general_detail
        ],
        total=["Total", format_quantity(t.general_quantity), format_currency(t.general_amount)],
        empty_message="Sem registros no período selecionado.",
    )


def _returned_checks_section(view: DerivedView) -> ReportSection:
    return ReportSection(
        key="returned_checks",
        title="Cheques Devolvidos",
        head=["Código", "Cliente", "Forma", "Documento", "Valor"],
        align=[LEFT, LEFT, LEFT, LEFT, RIGHT],
        rows=[
            [r.code, r.client, r.method, r.document, format_currency(r.amount)]
            for r in view.returned_checks
        ],
        total=["Total", "", "", "", format_currency(view.totals.returned_checks_amount)],
        empty_message="Nenhum cheque devolvido no período.",
    )


def _liquid_stock_section(view: DerivedView) -> ReportSection:
    return ReportSection(
        key="liquid_stock",
        title="Estoque Líquido (Cheios)",
        head=["Produto", "Unidade", "Quantidade"],
        align=[LEFT, LEFT, RIGHT],
        rows=[
            [r.product, r.location, format_quantity(r.quantity)]
            for r in view.liquid_stock
        ],
        total=["Total", "", format_quantity(view.totals.liquid_stock_quantity)],
        empty_message="Nenhum estoque líquido disponível.",
    )


def _container_stock_section(view: DerivedView) -> ReportSection:
    t = view.totals
    return ReportSection(
        key="container_stock",
        title="Estoque de Vasilhame",
        head=["Produto", "Unidade", "Vazios", "Manutenção", "Total"],
        align=[LEFT, LEFT, RIGHT, RIGHT, RIGHT],
        rows=[
            [r.product, r.location, format_quantity(r.empty),
             format_quantity(r.maintenance), format_quantity(r.total)]
            for r in view.container_stock
        ],
        total=["Total", "", format_quantity(t.container_empty),
               format_quantity(t.container_maintenance), format_quantity(t.container_total)],
        empty_message="Nenhum vasilhame em estoque.",
    )


SECTION_BUILDERS = (
    _sales_section,
    _products_section,
    _finance_section,
    _receivements_section,
    _receivement_summary_section,
    _expenses_section,
    _general_detail_section,
    _returned_checks_section,
    _liquid_stock_section,
    _container_stock_section,
)


def build_document(view: DerivedView) -> ReportDocument:
    metadata = view.metadata
    header = ReportHeader(
        title=REPORT_TITLE,
        period=view.applied_period,
        unit=metadata.unit,
        city=metadata.city,
        emitted_at=metadata.date,
        prepared_by=metadata.prepared_by,
        filters=_filters_label(view),
    )
    return ReportDocument(
        header=header,
        cards=build_cards(view),
        sections=[build(view) for build in SECTION_BUILDERS],
        file_name=pdf_file_name(metadata.date),
    )
