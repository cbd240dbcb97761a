import io
import logging
from typing import List, Tuple
from xml.sax.saxutils import escape as xml_escape

from ..exceptions import ExportEnvironmentError, ExportPreconditionError
from ..services.layout import RIGHT, ReportDocument, ReportSection, build_document
from ..services.pipeline import DerivedView

try:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
except ImportError:
    colors = None

logger = logging.getLogger(__name__)

NOT_LOADED_MESSAGE = "Gere o relatório antes de exportar o PDF."
LIBRARY_MISSING_MESSAGE = "Biblioteca de PDF não encontrada. Verifique a instalação do reportlab."

MARGIN = 40
HEAD_BG = (245, 247, 250)
TOTAL_BG = (249, 250, 251)


def _rgb(values):
    r, g, b = values
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


def _section_table(section: ReportSection) -> Table:
    if section.rows:
        body = [list(r) for r in section.rows]
    else:
        body = [[section.empty_message] + [""] * (len(section.head) - 1)]
    data = [section.head] + body + [section.total]
    last = len(data) - 1

    style = [
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#D1D5DB')),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('BACKGROUND', (0, 0), (-1, 0), _rgb(HEAD_BG)),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#212121')),
        ('BACKGROUND', (0, last), (-1, last), _rgb(TOTAL_BG)),
        ('FONTNAME', (0, last), (-1, last), 'Helvetica-Bold'),
    ]
    for col, align in enumerate(section.align):
        if align == RIGHT:
            style.append(('ALIGN', (col, 0), (col, -1), 'RIGHT'))
    if not section.rows:
        style += [
            ('SPAN', (0, 1), (-1, 1)),
            ('ALIGN', (0, 1), (-1, 1), 'CENTER'),
            ('TEXTCOLOR', (0, 1), (-1, 1), colors.HexColor('#6B7280')),
        ]

    table = Table(data, repeatRows=1, hAlign='LEFT')
    table.setStyle(TableStyle(style))
    return table


def _draw_page_number(canvas_obj, doc):
    page_width, page_height = doc.pagesize
    canvas_obj.saveState()
    canvas_obj.setFont('Helvetica', 8)
    canvas_obj.setFillGray(0.6)
    canvas_obj.drawRightString(page_width - MARGIN, 20, f"Página {canvas_obj.getPageNumber()}")
    canvas_obj.restoreState()


def _story(document: ReportDocument) -> List:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle', parent=styles['Heading1'], fontName='Helvetica-Bold',
        fontSize=14, spaceAfter=8)
    meta_style = ParagraphStyle(
        'ReportMeta', parent=styles['Normal'], fontName='Helvetica', fontSize=10, leading=14)
    section_style = ParagraphStyle(
        'ReportSection', parent=styles['Heading2'], fontName='Helvetica-Bold',
        fontSize=11, spaceBefore=14, spaceAfter=6)

    story = [Paragraph(xml_escape(document.header.title), title_style)]
    for line in document.header.lines:
        story.append(Paragraph(xml_escape(line), meta_style))
    story.append(Spacer(1, 10))

    cards = Table(
        [[c.label for c in document.cards], [c.value for c in document.cards]],
        hAlign='LEFT')
    cards.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#D1D5DB')),
        ('INNERGRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#E5E7EB')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, 0), 8),
        ('FONTNAME', (0, 1), (-1, 1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 1), (-1, 1), 11),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]))
    story.append(cards)

    for section in document.sections:
        story.append(Paragraph(xml_escape(section.title), section_style))
        story.append(_section_table(section))
    return story


def render_pdf(document: ReportDocument) -> bytes:
    """Lay out an already formatted document as an A4 (landscape) PDF."""
    if colors is None:
        raise ExportEnvironmentError(LIBRARY_MISSING_MESSAGE)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=document.header.title,
        author=document.header.prepared_by,
    )
    doc.build(_story(document), onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)
    return buffer.getvalue()


def export_pdf(view: DerivedView) -> Tuple[str, bytes]:
    """Return ``(file_name, pdf_bytes)`` for the view on screen.

    Raises ``ExportPreconditionError`` when no report is loaded; nothing is
    produced in that case.
    """
    if not view.loaded:
        logger.info("PDF export refused: no report loaded")
        raise ExportPreconditionError(NOT_LOADED_MESSAGE)
    document = build_document(view)
    content = render_pdf(document)
    logger.info("PDF export %s (%d bytes)", document.file_name, len(content))
    return document.file_name, content
