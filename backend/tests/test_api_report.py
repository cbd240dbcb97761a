import pytest
from fastapi.testclient import TestClient

from detailed_report.api.report import get_data_source
from detailed_report.datasource.stub import StubReportDataSource
from detailed_report.export import pdf as pdf_export
from detailed_report.main import app


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use(source):
    app.dependency_overrides[get_data_source] = lambda: source


def test_root(client):
    r = client.get('/')
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_detailed_view(client, ok_source):
    _use(ok_source)
    r = client.get('/report/detailed', params={
        'start_date': '2024-03-10', 'end_date': '2024-03-01', 'client': 'Silva'})
    assert r.status_code == 200
    body = r.json()
    assert body['loaded'] and body['can_export']
    assert body['error'] is None
    assert body['date_range'] == {'start': '2024-03-01', 'end': '2024-03-10'}
    assert body['filters'] == {'client': 'Silva', 'payment_method': 'Todos'}
    assert body['payment_methods'] == ['Todos', 'Boleto', 'Outros', 'Pix']
    assert body['metadata']['preparedBy'] == "Sistema SISGÁS"
    sales = body['document']['sections'][0]
    assert sales['key'] == 'sales'
    assert [row[0] for row in sales['rows']] == ["Comercial Silva", "Comercial Silva"]


def test_fetch_failure_is_reported_in_body(client, failing_source):
    _use(failing_source)
    r = client.get('/report/detailed', params={'start_date': '2024-03-01', 'end_date': '2024-03-10'})
    assert r.status_code == 200
    body = r.json()
    assert body['error'] == "timeout"
    assert not body['loaded'] and not body['can_export']
    assert body['metadata']['unit'] == "Todas as unidades"


def test_bad_date_is_400(client, ok_source):
    _use(ok_source)
    r = client.get('/report/detailed', params={'start_date': '03/01/2024'})
    assert r.status_code == 400
    assert "Data inválida" in r.json()['detail']
    assert ok_source.calls == []


def test_pdf_download(client, ok_source):
    _use(ok_source)
    r = client.get('/report/detailed/pdf', params={'start_date': '2024-03-01', 'end_date': '2024-03-10'})
    assert r.status_code == 200
    assert r.headers['content-type'] == 'application/pdf'
    assert 'relatorio-detalhado-10-03-2024.pdf' in r.headers['content-disposition']
    assert r.content.startswith(b'%PDF')


def test_exports_refused_after_failed_fetch(client, failing_source):
    _use(failing_source)
    r = client.get('/report/detailed/pdf')
    assert r.status_code == 409
    assert r.json()['detail'] == "Gere o relatório antes de exportar o PDF."
    r = client.get('/report/detailed/print')
    assert r.status_code == 409
    assert r.json()['detail'] == "Gere o relatório antes de imprimir."


def test_print_page(client, ok_source):
    _use(ok_source)
    r = client.get('/report/detailed/print', params={'payment_method': 'Boleto'})
    assert r.status_code == 200
    assert r.headers['content-type'].startswith('text/html')
    assert 'window.print()' in r.text
    assert 'Forma: Boleto' in r.text


def test_clients_from_stub(client):
    _use(StubReportDataSource())
    r = client.get('/report/clients')
    assert r.status_code == 200
    body = r.json()
    assert body['options'][0] == "Todos"
    assert "Comercial Silva Ltda" in body['options']
    assert len(body['options']) == len(set(body['options']))


def test_stub_report_is_consistent(client):
    _use(StubReportDataSource())
    r = client.get('/report/detailed', params={'start_date': '2024-03-01', 'end_date': '2024-03-31'})
    body = r.json()
    assert body['loaded']
    sections = {s['key']: s for s in body['document']['sections']}
    cards = {c['key']: c['value'] for c in body['document']['cards']}
    assert sections['products']['total'][-1] == cards['gross']
    assert sections['finance']['total'][-1] == "100.0%"


def test_pdf_route_without_pdf_library_is_503(client, ok_source, monkeypatch):
    monkeypatch.setattr(pdf_export, "colors", None)
    _use(ok_source)
    r = client.get('/report/detailed/pdf')
    assert r.status_code == 503
    assert r.json()['detail'] == pdf_export.LIBRARY_MISSING_MESSAGE
    assert not r.content.startswith(b'%PDF')
