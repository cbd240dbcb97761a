import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..exceptions import ReportFetchError
from ..schemas.report import ClientEntry, ReportResponse
from ..services.date_range import DateRange

logger = logging.getLogger(__name__)

INVALID_PAYLOAD = "Resposta inválida do servidor de relatórios."


def _error_from(resp: httpx.Response, data: Any) -> str:
    if isinstance(data, dict) and (data.get('error') or data.get('message')):
        return str(data.get('error') or data.get('message'))
    return f"HTTP {resp.status_code}"


class HttpReportDataSource:
    """Client for the distributor REST backend.

    Every failure comes back as a ``ReportResponse`` with ``success=False``;
    nothing is raised to callers.
    """

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = 30, transport: httpx.AsyncBaseTransport = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    async def _get(self, endpoint: str, params: Dict[str, Any] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s %s", url, params or {})
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(url, headers=self._headers(), params=params)
        try:
            data = resp.json(parse_float=Decimal)
        except ValueError:
            data = None
        if resp.is_error:
            raise httpx.HTTPStatusError(_error_from(resp, data), request=resp.request, response=resp)
        if not isinstance(data, dict):
            raise ReportFetchError(INVALID_PAYLOAD)
        return data

    async def fetch_detailed_report(self, date_range: DateRange,
                                    location_id: Optional[int] = None) -> ReportResponse:
        params = {'date_from': date_range.start, 'date_to': date_range.end}
        if location_id:
            params['location_id'] = str(location_id)
        try:
            payload = await self._get('/reports/detailed', params)
        except (httpx.HTTPError, ReportFetchError) as e:
            logger.warning("detailed report request failed for %s..%s: %s",
                           date_range.start, date_range.end, e)
            return ReportResponse(success=False, error=str(e) or e.__class__.__name__)
        try:
            return ReportResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning("detailed report payload rejected: %s", e)
            return ReportResponse(success=False, error=INVALID_PAYLOAD)

    async def fetch_clients(self) -> List[ClientEntry]:
        try:
            payload = await self._get('/clients')
        except (httpx.HTTPError, ReportFetchError) as e:
            logger.warning("client directory request failed: %s", e)
            return []
        rows = payload.get('data') or []
        clients = []
        for row in rows:
            try:
                clients.append(ClientEntry.model_validate(row))
            except ValidationError:
                logger.debug("skipping malformed client row: %r", row)
        return clients


def from_settings(transport: httpx.AsyncBaseTransport = None) -> HttpReportDataSource:
    return HttpReportDataSource(
        settings.report_api_url,
        token=settings.report_api_token,
        timeout=settings.report_api_timeout,
        transport=transport,
    )
