"""PDF rendering of the consolidated financial report with reportlab."""

import logging
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from finmaster.domain.report import FinancialReport, ReportSection

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 0.9 * inch
HEADER_COLOR = colors.HexColor("#4f46e5")
TABLE_HEADER_COLOR = colors.HexColor("#e0e7ff")
EMPTY_TABLE_TEXT = "Nenhum registro"


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers page output so each footer can show the page total."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict[str, Any]] = []

    def showPage(self) -> None:  # noqa: N802
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(total)
            super().showPage()
        super().save()

    def draw_page_number(self, total: int) -> None:
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawCentredString(width / 2, 0.4 * inch, f"Página {self._pageNumber} de {total}")


def _draw_header_band(report: FinancialReport):
    def draw(pdf: canvas.Canvas, doc: SimpleDocTemplate) -> None:
        width, height = doc.pagesize
        pdf.saveState()
        pdf.setFillColor(HEADER_COLOR)
        pdf.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, stroke=0, fill=1)
        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica-Bold", 16)
        pdf.drawString(0.6 * inch, height - 0.45 * inch, report.title)
        pdf.setFont("Helvetica", 9)
        pdf.drawString(0.6 * inch, height - 0.7 * inch, f"Gerado em: {report.generated_at}")
        pdf.restoreState()

    return draw


def _section_table(section: ReportSection, cell_style: Any) -> Table:
    header = [Paragraph(f"<b>{escape(h)}</b>", cell_style) for h in section.headers]
    body = [[Paragraph(escape(str(cell)), cell_style) for cell in row] for row in section.rows]
    if not body:
        body = [[Paragraph(f"<i>{EMPTY_TABLE_TEXT}</i>", cell_style)] + [""] * (len(section.headers) - 1)]

    table = Table([header, *body], repeatRows=1, hAlign="LEFT")
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), TABLE_HEADER_COLOR),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
    ]
    if not section.rows:
        style.append(("SPAN", (0, 1), (-1, 1)))
    table.setStyle(TableStyle(style))
    return table


def render_report_pdf(report: FinancialReport, output_path: Path) -> Path:
    """Write the report as a PDF document.

    Args:
        report: Assembled report.
        output_path: Destination file. Parent directories are created.

    Returns:
        The written path.

    Raises:
        OSError: If the file can't be written.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"]
    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        title=report.title,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=HEADER_HEIGHT + 0.3 * inch,
        bottomMargin=0.7 * inch,
    )

    story: list[Any] = []
    for section in report.sections:
        story.append(Paragraph(escape(section.heading), styles["Heading2"]))
        story.append(Spacer(1, 0.08 * inch))
        story.append(_section_table(section, cell_style))
        story.append(Spacer(1, 0.25 * inch))

    draw_header = _draw_header_band(report)
    doc.build(story, onFirstPage=draw_header, onLaterPages=draw_header, canvasmaker=NumberedCanvas)
    logger.info("Wrote report with %d sections to %s", len(report.sections), output_path)
    return output_path
