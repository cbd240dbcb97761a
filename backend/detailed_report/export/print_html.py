import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config import settings
from ..exceptions import ExportPreconditionError
from ..services.layout import ReportDocument, build_document
from ..services.pipeline import DerivedView

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
NOT_LOADED_MESSAGE = "Gere o relatório antes de imprimir."

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(['html']),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_print_html(document: ReportDocument, settle_ms: int = None) -> str:
    template = _env.get_template("print_report.html")
    return template.render(
        doc=document,
        settle_ms=settings.print_settle_ms if settle_ms is None else settle_ms,
    )


def export_print(view: DerivedView, settle_ms: int = None) -> str:
    """Standalone HTML that opens the print dialog once layout settles."""
    if not view.loaded:
        logger.info("print export refused: no report loaded")
        raise ExportPreconditionError(NOT_LOADED_MESSAGE)
    return render_print_html(build_document(view), settle_ms)
