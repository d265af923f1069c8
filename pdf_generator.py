"""
PDF Generator Module
Exports an installation document as a paginated PDF using ReportLab
"""

import io
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import inch
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError
from reportlab.pdfgen import canvas
from reportlab.graphics.shapes import Drawing, Rect, String, Line, Group

import installation_document as doc
from installation_document import Document, RackElevation, installation_guide_filename

TABLOID = (11 * inch, 17 * inch)

PAGE_SIZES = {
    'letter': LETTER,
    'a4': A4,
    'tabloid': TABLOID,
}
DEFAULT_PAGE_SIZE = LETTER

# Color scheme - matches the rack elevation drawings
COLORS = {
    'rack_frame': colors.Color(0.15, 0.15, 0.15),      # Dark gray frame
    'rack_rail': colors.Color(0.3, 0.3, 0.3),          # Rail color
    'rack_face': colors.Color(0.95, 0.95, 0.95),       # Empty rack background
    'grid': colors.Color(0.85, 0.85, 0.85),            # Unit divider lines
    'conflict': colors.Color(0.86, 0.15, 0.15),        # Overlapping equipment outline
    'text_dark': colors.black,
    'title_bg': colors.Color(0.1, 0.1, 0.1),           # Title block background
    'table_header': colors.Color(0.12, 0.23, 0.37),
    'table_stripe': colors.Color(0.96, 0.96, 0.97),
    'warning': colors.Color(0.75, 0.1, 0.1),
}

TITLE_BAND_HEIGHT = 0.8 * inch
MAX_ELEVATION_HEIGHT = 6.5 * inch
MAX_U_HEIGHT_PTS = 18
RAIL_WIDTH = 6
U_LABEL_WIDTH = 24


@dataclass(frozen=True)
class ExportResult:
    """Outcome of an export; message is suitable for a toast notification"""
    success: bool
    path: Optional[str]
    message: str


Notifier = Callable[[str, str], None]


def verbatim_markup(text: str) -> str:
    """Escape text for a Paragraph, keeping repeated spaces and line breaks"""
    markup = escape(text).replace("\n", "<br/>")
    return re.sub(r" {2,}", lambda m: " " + "&nbsp;" * (len(m.group(0)) - 1), markup)


class InstallationGuidePDF:
    """Generates installation guide PDF documents"""

    def __init__(
        self,
        output,
        company_name: str = "Your Company",
        revision: str = "A",
        page_size=None
    ):
        if page_size is None:
            page_size = DEFAULT_PAGE_SIZE
        self.output = output      # File path or binary stream
        self.company_name = company_name
        self.revision = revision
        self.rack_name = ""
        self.page_size = page_size
        self.page_width, self.page_height = page_size
        self.margin = 0.5 * inch

        styles = getSampleStyleSheet()
        self.styles = {
            'title': ParagraphStyle('GuideTitle', parent=styles['Title'], fontSize=20, spaceAfter=4),
            'subtitle': ParagraphStyle('GuideSubtitle', parent=styles['Normal'], fontSize=12,
                                       alignment=1, spaceAfter=12),
            'heading': ParagraphStyle('GuideHeading', parent=styles['Heading2'], fontSize=14,
                                      spaceBefore=12, spaceAfter=6),
            'body': ParagraphStyle('GuideBody', parent=styles['Normal'], fontSize=10, leading=13),
            'warning': ParagraphStyle('GuideWarning', parent=styles['Normal'], fontSize=10, leading=13,
                                      textColor=COLORS['warning'], fontName='Helvetica-Bold'),
            'cell': ParagraphStyle('GuideCell', parent=styles['Normal'], fontSize=8, leading=10),
            'cell_header': ParagraphStyle('GuideCellHeader', parent=styles['Normal'], fontSize=8, leading=10,
                                          textColor=colors.white, fontName='Helvetica-Bold'),
        }

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    def generate(self, document: Document):
        """
        Write the document as a PDF.

        Args:
            document: Assembled installation document

        Returns:
            The output path or stream passed to the constructor
        """
        self.rack_name = document.rack_name
        pdf = SimpleDocTemplate(
            self.output,
            pagesize=self.page_size,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin + TITLE_BAND_HEIGHT + 0.2 * inch,
            bottomMargin=self.margin + 0.2 * inch,
            title=f"{doc.DOCUMENT_TITLE} - {document.rack_name}",
            author=self.company_name,
        )
        story = []
        for block in document.blocks:
            story.extend(self._block_flowables(block))
        pdf.build(story, onFirstPage=self._draw_page_frame, onLaterPages=self._draw_page_frame)
        return self.output

    # ------------------------------------------------------------------
    # Page decoration
    # ------------------------------------------------------------------

    def _draw_page_frame(self, c: canvas.Canvas, pdf) -> None:
        """Draw the title block at top of page and the page number at the bottom"""
        c.saveState()
        title_y = self.page_height - self.margin - TITLE_BAND_HEIGHT
        title_width = self.page_width - 2 * self.margin

        # Background
        c.setFillColor(COLORS['title_bg'])
        c.rect(self.margin, title_y, title_width, TITLE_BAND_HEIGHT, fill=1, stroke=0)

        # Company name (left side)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 14)
        c.drawString(self.margin + 0.2 * inch, title_y + 0.5 * inch, self.company_name)

        # Rack name
        c.setFont("Helvetica", 10)
        c.drawString(self.margin + 0.2 * inch, title_y + 0.2 * inch, f"Rack: {self.rack_name}")

        # Date and revision (right side)
        date_str = datetime.now().strftime("%Y-%m-%d")
        rev_text = f"Rev: {self.revision}  |  Date: {date_str}"
        c.drawRightString(self.page_width - self.margin - 0.2 * inch, title_y + 0.2 * inch, rev_text)
        c.drawRightString(self.page_width - self.margin - 0.2 * inch, title_y + 0.5 * inch,
                          "RACK INSTALLATION GUIDE")

        # Footer
        c.setFillColor(COLORS['text_dark'])
        c.setFont("Helvetica", 8)
        c.drawCentredString(self.page_width / 2, self.margin, f"Page {pdf.page}")
        c.restoreState()

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _block_flowables(self, block) -> list:
        if isinstance(block, doc.TitleBlock):
            flowables = [Paragraph(escape(block.title), self.styles['title'])]
            if block.subtitle:
                flowables.append(Paragraph(escape(block.subtitle), self.styles['subtitle']))
            return flowables

        flowables = [Paragraph(escape(block.heading), self.styles['heading'])]
        for content in block.content:
            flowables.extend(self._content_flowables(content))
            flowables.append(Spacer(1, 0.12 * inch))
        return flowables

    def _content_flowables(self, content) -> list:
        if isinstance(content, doc.Paragraph):
            style = self.styles['warning'] if content.warning else self.styles['body']
            return [Paragraph(verbatim_markup(content.text), style)]
        if isinstance(content, doc.KeyValueList):
            return [self._key_value_table(content)]
        if isinstance(content, doc.Table):
            return self._table(content)
        if isinstance(content, doc.OrderedList):
            return [
                Paragraph(f"{i}. {verbatim_markup(item)}", self.styles['body'])
                for i, item in enumerate(content.items, start=1)
            ]
        if isinstance(content, RackElevation):
            return [self._elevation_drawing(content)]
        return []

    def _key_value_table(self, content: doc.KeyValueList) -> Table:
        data = [
            [Paragraph(f"<b>{escape(key)}</b>", self.styles['cell']), Paragraph(escape(value), self.styles['cell'])]
            for key, value in content.entries
        ]
        table = Table(data, colWidths=[1.8 * inch, 3.2 * inch], hAlign='LEFT')
        table.setStyle(TableStyle([
            ('LINEBELOW', (0, 0), (-1, -1), 0.25, COLORS['grid']),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        return table

    def _table(self, content: doc.Table) -> list:
        flowables = []
        if content.title:
            flowables.append(Paragraph(f"<b>{escape(content.title)}</b>", self.styles['body']))
            flowables.append(Spacer(1, 0.05 * inch))

        data = [[Paragraph(escape(col), self.styles['cell_header']) for col in content.columns]]
        for row in content.rows:
            data.append([Paragraph(escape(cell), self.styles['cell']) for cell in row])

        col_width = self.content_width / max(1, len(content.columns))
        table = Table(data, colWidths=[col_width] * len(content.columns), repeatRows=1, hAlign='LEFT')
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), COLORS['table_header']),
            ('GRID', (0, 0), (-1, -1), 0.25, COLORS['grid']),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]
        for i in range(1, len(data)):
            if i % 2 == 0:
                style.append(('BACKGROUND', (0, i), (-1, i), COLORS['table_stripe']))
        # Presentation key: colour bar on the left edge of each row
        for i, key in enumerate(content.row_keys, start=1):
            style.append(('LINEBEFORE', (0, i), (0, i), 4, colors.HexColor(key)))
        table.setStyle(TableStyle(style))
        flowables.append(table)
        return flowables

    def _elevation_drawing(self, elevation: RackElevation) -> Drawing:
        """Draw the rack front view; slot offsets are converted from top-down to PDF bottom-up"""
        u_pts = min(MAX_U_HEIGHT_PTS, MAX_ELEVATION_HEIGHT / elevation.total_units)
        rack_height = elevation.total_units * u_pts
        rack_width = min(4.5 * inch, self.content_width - U_LABEL_WIDTH - 12)
        frame_padding = 6

        drawing = Drawing(U_LABEL_WIDTH + rack_width + 2 * frame_padding, rack_height + 2 * frame_padding)
        x = U_LABEL_WIDTH + frame_padding
        y = frame_padding

        # Rack frame and rails
        drawing.add(Rect(x - frame_padding, y - frame_padding, rack_width + 2 * frame_padding,
                         rack_height + 2 * frame_padding, fillColor=COLORS['rack_face'],
                         strokeColor=COLORS['rack_frame'], strokeWidth=2))
        drawing.add(Rect(x, y, RAIL_WIDTH, rack_height, fillColor=COLORS['rack_rail'], strokeColor=None))
        drawing.add(Rect(x + rack_width - RAIL_WIDTH, y, RAIL_WIDTH, rack_height,
                         fillColor=COLORS['rack_rail'], strokeColor=None))

        # Unit dividers and numbers (only every Nth number on tall racks)
        if elevation.total_units > 30:
            step = 5
        elif elevation.total_units > 15:
            step = 2
        else:
            step = 1
        for u in range(1, elevation.total_units + 1):
            unit_y = y + (u - 1) * u_pts
            drawing.add(Line(x + RAIL_WIDTH, unit_y, x + rack_width - RAIL_WIDTH, unit_y,
                             strokeColor=COLORS['grid'], strokeWidth=0.5, strokeDashArray=[2, 2]))
            if u == 1 or u % step == 0:
                drawing.add(String(x - frame_padding - 3, unit_y + u_pts / 2 - 2, str(u),
                                   fontName="Helvetica", fontSize=6, textAnchor='end'))

        inset = 10
        for slot in elevation.slots:
            slot_top_units = slot.top_y / elevation.unit_height
            height = slot.height_units * u_pts
            slot_y = y + rack_height - slot_top_units * u_pts - height
            drawing.add(self._slot_group(slot, x + inset, slot_y, rack_width - 2 * inset, height))
        return drawing

    def _slot_group(self, slot: doc.ElevationSlot, x: float, y: float, width: float, height: float) -> Group:
        group = Group()
        stroke = COLORS['conflict'] if slot.conflict else COLORS['rack_frame']
        group.add(Rect(x, y + 1, width, height - 2, fillColor=colors.HexColor(slot.color),
                       strokeColor=stroke, strokeWidth=2 if slot.conflict else 1, rx=2, ry=2))

        font_size = max(5, min(9, int(height / 2.5)))
        label = slot.label
        max_chars = int(width / (font_size * 0.55))
        if len(label) > max_chars:
            label = label[:max_chars - 3] + "..."
        group.add(String(x + width / 2, y + height / 2 - font_size / 3, label,
                         fontName="Helvetica-Bold", fontSize=font_size,
                         fillColor=colors.white, textAnchor='middle'))

        # Show rack units in corner (if space allows)
        if height >= 10:
            group.add(String(x + 3, y + 3, f"{slot.height_units}U", fontName="Helvetica",
                             fontSize=max(4, font_size - 2), fillColor=colors.white))
        return group


def render_pdf_bytes(
    document: Document,
    company_name: str = "Your Company",
    page_size: str = "letter",
    revision: str = "A"
) -> bytes:
    """Render a document to PDF bytes (for downloads)"""
    buffer = io.BytesIO()
    InstallationGuidePDF(
        buffer,
        company_name=company_name,
        revision=revision,
        page_size=PAGE_SIZES.get(page_size.lower(), DEFAULT_PAGE_SIZE),
    ).generate(document)
    return buffer.getvalue()


def export_installation_guide(
    document: Document,
    output_dir: str = ".",
    page_size: str = "letter",
    company_name: str = "Your Company",
    revision: str = "A",
    notify: Optional[Notifier] = None
) -> ExportResult:
    """
    Write '<rackName>-installation-guide.pdf' into output_dir.

    Failures are returned, not raised, and are not retried. If notify is given
    it is called once with ("success" | "error", message).

    Args:
        document: Assembled installation document
        output_dir: Directory for the PDF (created if needed)
        page_size: "letter", "a4" or "tabloid"
        company_name: Company name for title block
        revision: Document revision
        notify: Optional toast-style callback

    Returns:
        ExportResult
    """
    output_path = Path(output_dir) / installation_guide_filename(document.rack_name)
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
        InstallationGuidePDF(
            str(output_path),
            company_name=company_name,
            revision=revision,
            page_size=PAGE_SIZES.get(page_size.lower(), DEFAULT_PAGE_SIZE),
        ).generate(document)
        result = ExportResult(True, str(output_path), "Installation guide exported as PDF")
    except (OSError, LayoutError, ValueError) as e:
        result = ExportResult(False, None, f"Failed to generate PDF: {e}")

    if notify is not None:
        notify("success" if result.success else "error", result.message)
    return result
