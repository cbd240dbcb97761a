"""State holder for one open detailed report.

``ReportSession`` owns the editable date fields, the filters and the last
aggregate returned by the data source. Every ``load()`` takes a new request
generation; a response is applied only if its generation is still the
latest and the session has not been closed, so overlapping fetches can no
longer let a stale range win.
"""
import logging
from datetime import date
from typing import Optional, Protocol, Tuple

from ..schemas.report import ReportAggregate, ReportResponse
from ..export.pdf import export_pdf
from ..export.print_html import export_print
from .date_range import DateLike, DateRange, default_range, normalize_range
from .layout import ReportDocument, build_document
from .matching import ALL
from .pipeline import DEFAULT_PREPARED_BY, DerivedView, ReportFilters, ViewMemo, derive_view

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Não foi possível gerar o relatório."
UNEXPECTED_ERROR = "Erro inesperado ao gerar o relatório."


class ReportDataSource(Protocol):
    async def fetch_detailed_report(self, date_range: DateRange,
                                    location_id: Optional[int] = None) -> ReportResponse:
        ...


class ReportSession:

    def __init__(self, source: ReportDataSource,
                 start_date: Optional[DateLike] = None,
                 end_date: Optional[DateLike] = None,
                 location_id: Optional[int] = None,
                 prepared_by: str = DEFAULT_PREPARED_BY,
                 today: Optional[date] = None) -> None:
        initial = default_range(today)
        self.source = source
        self.start_date = start_date or initial.start
        self.end_date = end_date or initial.end
        self.location_id = location_id
        self.prepared_by = prepared_by
        self.today = today
        self.filters = ReportFilters()
        self.report: Optional[ReportAggregate] = None
        self.error: Optional[str] = None
        self.loading = False
        self.closed = False
        self._generation = 0
        self._loaded_range: Optional[DateRange] = None
        self._memo = ViewMemo()

    @property
    def date_range(self) -> DateRange:
        return normalize_range(self.start_date, self.end_date)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def can_export(self) -> bool:
        return self.report is not None and not self.loading

    def set_dates(self, start_date: Optional[DateLike] = None,
                  end_date: Optional[DateLike] = None) -> bool:
        """Update the date fields; True when the normalized range changed."""
        before = self.date_range
        if start_date is not None:
            self.start_date = start_date
        if end_date is not None:
            self.end_date = end_date
        return self.date_range != before

    def set_filters(self, client: Optional[str] = None,
                    payment_method: Optional[str] = None) -> ReportFilters:
        self.filters = ReportFilters(
            client=self.filters.client if client is None else (client or ALL),
            payment_method=(self.filters.payment_method if payment_method is None
                            else (payment_method or ALL)),
        )
        return self.filters

    async def load(self, force: bool = False) -> bool:
        """Fetch the aggregate for the current range.

        Returns True when this call's response was applied. A range that is
        already loaded is not fetched again unless ``force`` is set.
        """
        date_range = self.date_range
        if not force and self.report is not None and date_range == self._loaded_range:
            return True

        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None
        logger.info("loading detailed report %s..%s (request %d)",
                    date_range.start, date_range.end, generation)
        try:
            try:
                response = await self.source.fetch_detailed_report(date_range, self.location_id)
            except Exception as e:
                logger.exception("report data source raised")
                response = ReportResponse(success=False, error=str(e) or UNEXPECTED_ERROR)

            if self.closed:
                logger.debug("session closed, dropping response %d", generation)
                return False
            if generation != self._generation:
                logger.info("dropping stale response %d (latest is %d)", generation, self._generation)
                return False

            if response.success and response.data is not None:
                self.report = response.data
                self.error = None
                self._loaded_range = date_range
            else:
                self.report = None
                self._loaded_range = None
                self.error = response.error or response.message or DEFAULT_ERROR
                logger.warning("detailed report unavailable: %s", self.error)
            return True
        finally:
            # only the latest request owns the loading flag; cancellation included
            if generation == self._generation:
                self.loading = False

    def view(self) -> DerivedView:
        date_range = self.date_range
        return self._memo.get(
            self.report, date_range, self.filters,
            lambda: derive_view(self.report, date_range, self.filters,
                                prepared_by=self.prepared_by, today=self.today),
        )

    def document(self) -> ReportDocument:
        return build_document(self.view())

    def export_pdf(self) -> Tuple[str, bytes]:
        return export_pdf(self.view())

    def export_print(self, settle_ms: int = None) -> str:
        return export_print(self.view(), settle_ms)

    def close(self) -> None:
        self.closed = True
        self._memo.clear()
