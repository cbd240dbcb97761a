import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel

from ..config import settings
from ..datasource.http import from_settings
from ..datasource.stub import StubReportDataSource
from ..exceptions import ExportEnvironmentError, ExportPreconditionError, InvalidDateRange
from ..schemas.report import ClientEntry, ReportMetadata
from ..services.aggregation import client_options
from ..services.layout import ReportDocument
from ..services.matching import ALL
from ..services.session import ReportSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/report", tags=["report"])


class DateRangeOut(BaseModel):
    start: str
    end: str


class FiltersOut(BaseModel):
    client: str
    payment_method: str


class ReportViewResponse(BaseModel):
    loaded: bool
    error: Optional[str] = None
    can_export: bool
    applied_period: str
    date_range: DateRangeOut
    filters: FiltersOut
    payment_methods: List[str]
    metadata: ReportMetadata
    document: ReportDocument


class ClientOptionsResponse(BaseModel):
    options: List[str]
    clients: List[ClientEntry]


def get_data_source():
    """Upstream API when REPORT_API_URL is http(s), otherwise the local stub."""
    if settings.uses_http_source:
        return from_settings()
    return StubReportDataSource()


async def _open_session(source, start_date: Optional[str], end_date: Optional[str],
                        client: str, payment_method: str,
                        location_id: Optional[int]) -> ReportSession:
    session = ReportSession(
        source,
        start_date=start_date,
        end_date=end_date,
        location_id=location_id or settings.report_location_id,
        prepared_by=settings.prepared_by,
    )
    try:
        date_range = session.date_range
    except InvalidDateRange as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    logger.info("report request %s..%s client=%r payment_method=%r",
                date_range.start, date_range.end, client, payment_method)
    session.set_filters(client=client, payment_method=payment_method)
    await session.load()
    return session


@router.get('/detailed', response_model=ReportViewResponse)
async def detailed(start_date: Optional[str] = None, end_date: Optional[str] = None,
                   client: str = ALL, payment_method: str = ALL,
                   location_id: Optional[int] = None, source=Depends(get_data_source)):
    session = await _open_session(source, start_date, end_date, client, payment_method, location_id)
    try:
        view = session.view()
        rng = view.date_range
        return ReportViewResponse(
            loaded=view.loaded,
            error=session.error,
            can_export=session.can_export,
            applied_period=view.applied_period,
            date_range=DateRangeOut(start=rng.start, end=rng.end),
            filters=FiltersOut(client=view.filters.client,
                               payment_method=view.filters.payment_method),
            payment_methods=view.payment_options,
            metadata=view.metadata,
            document=session.document(),
        )
    finally:
        session.close()


@router.get('/detailed/pdf')
async def detailed_pdf(start_date: Optional[str] = None, end_date: Optional[str] = None,
                       client: str = ALL, payment_method: str = ALL,
                       location_id: Optional[int] = None, source=Depends(get_data_source)):
    session = await _open_session(source, start_date, end_date, client, payment_method, location_id)
    try:
        file_name, content = session.export_pdf()
    except ExportPreconditionError as e:
        raise HTTPException(status_code=409, detail=e.user_message)
    except ExportEnvironmentError as e:
        raise HTTPException(status_code=503, detail=e.user_message)
    finally:
        session.close()
    return Response(
        content=content,
        media_type='application/pdf',
        headers={'Content-Disposition': f'attachment; filename="{file_name}"'},
    )


@router.get('/detailed/print', response_class=HTMLResponse)
async def detailed_print(start_date: Optional[str] = None, end_date: Optional[str] = None,
                         client: str = ALL, payment_method: str = ALL,
                         location_id: Optional[int] = None, source=Depends(get_data_source)):
    session = await _open_session(source, start_date, end_date, client, payment_method, location_id)
    try:
        html = session.export_print()
    except ExportPreconditionError as e:
        raise HTTPException(status_code=409, detail=e.user_message)
    finally:
        session.close()
    return HTMLResponse(content=html, headers={'Content-Disposition': 'inline'})


@router.get('/clients', response_model=ClientOptionsResponse)
async def clients(source=Depends(get_data_source)):
    entries = await source.fetch_clients()
    return ClientOptionsResponse(options=client_options(entries), clients=entries)
