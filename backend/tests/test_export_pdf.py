import io

import pdfplumber
import pytest

from detailed_report.exceptions import ExportEnvironmentError, ExportPreconditionError
from detailed_report.export import pdf as pdf_export
from detailed_report.export.pdf import LIBRARY_MISSING_MESSAGE, NOT_LOADED_MESSAGE, export_pdf
from detailed_report.services.date_range import DateRange
from detailed_report.services.formatting import format_currency
from detailed_report.services.pipeline import ReportFilters, derive_view

RANGE = DateRange("2024-03-01", "2024-03-10")


def _text(content: bytes) -> str:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        text = "\n".join(page.extract_text() or "" for page in pdf.pages)
    return text.replace("\xa0", " ")


def _plain(value: str) -> str:
    return value.replace("\xa0", " ")


def test_export_refused_without_report():
    with pytest.raises(ExportPreconditionError) as exc:
        export_pdf(derive_view(None, RANGE))
    assert exc.value.user_message == NOT_LOADED_MESSAGE


def test_pdf_contains_header_and_totals(aggregate):
    view = derive_view(aggregate, RANGE)
    file_name, content = export_pdf(view)
    assert file_name == "relatorio-detalhado-10-03-2024.pdf"
    assert content.startswith(b"%PDF")
    text = _text(content)
    assert "RELATÓRIO DETALHADO DE VENDAS" in text
    assert "Período: 01/03/2024 - 10/03/2024" in text
    assert _plain(format_currency(view.metrics.total_sales)) in text
    assert _plain(format_currency(view.metrics.total_expenses)) in text
    assert "Página 1" in text


def test_pdf_follows_filters_on_screen(aggregate):
    view = derive_view(aggregate, RANGE, ReportFilters(client="Padaria"))
    _, content = export_pdf(view)
    text = _text(content)
    assert "Padaria Pão Quente" in text
    assert "Maria Aparecida" not in text
    assert "Filtros: Cliente: Padaria" in text


def test_sections_appear_in_order(aggregate):
    _, content = export_pdf(derive_view(aggregate, RANGE))
    text = _text(content)
    titles = ["Vendas", "Produtos", "Financeiro", "Recebimentos", "Resumo dos Recebimentos",
              "Despesas (Todas as Unidades)", "Detalhamento Geral", "Cheques Devolvidos",
              "Estoque Líquido (Cheios)", "Estoque de Vasilhame"]
    positions = [text.index(t) for t in titles]
    assert positions == sorted(positions)


def test_empty_section_prints_message(aggregate):
    _, content = export_pdf(derive_view(aggregate, RANGE))
    assert "Nenhum cheque devolvido no período." in _text(content)


def test_missing_pdf_library_is_reported(aggregate, monkeypatch):
    monkeypatch.setattr(pdf_export, "colors", None)
    result = None
    with pytest.raises(ExportEnvironmentError) as exc:
        result = export_pdf(derive_view(aggregate, RANGE))
    assert exc.value.user_message == LIBRARY_MISSING_MESSAGE
    assert result is None
