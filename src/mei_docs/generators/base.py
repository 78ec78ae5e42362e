"""
Base class for freehand document generators.

Draws a complete page with reportlab when no fillable template is
available: bordered boxes sized to their wrapped text, centered labels,
and the signature zone shared by every document type.
"""

import io
from abc import abstractmethod
from typing import List, Optional, Sequence, Tuple

from reportlab.lib.colors import Color, black, white
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..assets import decode_signature
from ..config import LayoutConfig
from ..errors import SignatureAssetUnavailable
from ..fillers.base import BaseRenderer
from ..models import RenderedDocument, RenderRequest, RenderStrategy
from ..utils.formatting import format_cnpj, format_long_date
from ..utils.text_layout import box_height, center_x, measure, wrap_text

GRAY_TEXT = Color(0.3, 0.3, 0.3)
SEPARATOR_GRAY = Color(0.5, 0.5, 0.5)
ROW_BORDER_GRAY = Color(0.8, 0.8, 0.8)

DEFAULT_ACCOUNTANT = "Contador Responsável"
DETAIL_LINE_HEIGHT = 12.0


def fit_image(width: float, height: float, max_width: float, max_height: float) -> Tuple[float, float]:
    """Scale (width, height) to fit the box, keeping the aspect ratio."""
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    scale = min(max_width / width, max_height / height)
    return width * scale, height * scale


class BaseFreehandGenerator(BaseRenderer):
    """
    Abstract base class for freehand generators.

    Subclasses implement draw_page; the base handles the canvas lifecycle
    and provides the drawing primitives.
    """

    def __init__(self, layout: Optional[LayoutConfig] = None, city: str = "Sinop"):
        self.city = city
        super().__init__(layout)

    @property
    def strategy(self) -> RenderStrategy:
        return RenderStrategy.FREEHAND

    @abstractmethod
    def draw_page(self, pdf: canvas.Canvas, request: RenderRequest) -> None:
        """Draw the single page of the document."""
        pass

    @abstractmethod
    def document_title(self, request: RenderRequest) -> str:
        pass

    def render(self, request: RenderRequest) -> RenderedDocument:
        buffer = io.BytesIO()
        # invariant output: no timestamps or random ids in the file
        pdf = canvas.Canvas(buffer, pagesize=self.layout.page_size, invariant=1)
        pdf.setTitle(self.document_title(request))
        pdf.setSubject(request.subject.display_name)

        self.draw_page(pdf, request)
        pdf.showPage()
        pdf.save()

        return RenderedDocument(
            content=buffer.getvalue(),
            page_count=1,
            strategy=RenderStrategy.FREEHAND,
        )

    # -- text -----------------------------------------------------------

    def draw_centered(
        self,
        pdf: canvas.Canvas,
        text: str,
        font: str,
        size: float,
        y: float,
        container_x: Optional[float] = None,
        container_width: Optional[float] = None,
        color: Color = black,
    ) -> None:
        """Draw text centered in a container (the content area by default)."""
        if container_x is None:
            container_x = self.layout.margin_x
        if container_width is None:
            container_width = self.layout.content_width

        x = center_x(measure(text, font, size), container_width, container_x)
        pdf.setFillColor(color)
        pdf.setFont(font, size)
        pdf.drawString(x, y, text)

    def draw_box(
        self,
        pdf: canvas.Canvas,
        x: float,
        top: float,
        width: float,
        height: float,
        border_width: float = 1.0,
        fill: Color = white,
        border: Color = black,
    ) -> None:
        """Bordered rectangle hanging down from `top`."""
        pdf.setLineWidth(border_width)
        pdf.setStrokeColor(border)
        pdf.setFillColor(fill)
        pdf.rect(x, top - height, width, height, stroke=1, fill=1)

    # -- boxes ----------------------------------------------------------

    def draw_header_box(self, pdf: canvas.Canvas, request: RenderRequest, top: float,
                        details: Optional[Sequence[str]] = None) -> float:
        """
        Company box: wrapped, centered legal name with detail lines below.

        The box grows with the number of name lines. Returns the y just
        below the box.
        """
        layout = self.layout
        name = request.subject.display_name.upper()
        details = list(details) if details else [f"CNPJ: {format_cnpj(request.subject.tax_id)}"]

        size = layout.legal_name_size
        line_height = size + layout.legal_name_line_gap
        lines = wrap_text(name, layout.font_bold, size, layout.content_width - 24)
        extra = (len(details) - 1) * DETAIL_LINE_HEIGHT

        if len(lines) > 1 or extra:
            height = box_height(len(lines), line_height, layout.header_padding + extra)
        else:
            height = layout.header_single_line_height

        self.draw_box(pdf, layout.margin_x, top, layout.content_width, height)

        name_block = len(lines) * line_height
        start_y = top - (height - name_block - 20 - extra) / 2 - line_height + 4
        for i, line in enumerate(lines):
            self.draw_centered(pdf, line, layout.font_bold, size, start_y - i * line_height)

        bottom = top - height
        for i, detail in enumerate(reversed(details)):
            self.draw_centered(pdf, detail, layout.font_regular, layout.tax_id_size,
                               bottom + 10 + i * DETAIL_LINE_HEIGHT)

        return bottom

    def draw_paragraph_box(self, pdf: canvas.Canvas, text: str, top: float) -> float:
        """Bordered box with a wrapped, centered oblique paragraph."""
        layout = self.layout
        size = layout.declaration_size
        line_height = size + layout.declaration_line_gap
        lines = wrap_text(text, layout.font_oblique, size, layout.content_width - 16)

        height = box_height(len(lines), line_height, layout.declaration_padding)
        self.draw_box(pdf, layout.margin_x, top, layout.content_width, height)
        for i, line in enumerate(lines):
            self.draw_centered(pdf, line, layout.font_oblique, size, top - 12 - i * line_height)
        return top - height

    # -- signatures -----------------------------------------------------

    def signature_area(self) -> Tuple[float, float]:
        """(x, width) of the centered signature lines."""
        layout = self.layout
        width = layout.content_width * layout.signature_width_ratio
        return layout.margin_x + (layout.content_width - width) / 2, width

    def draw_signature_line(self, pdf: canvas.Canvas, y: float, name: str, detail: str = "") -> None:
        layout = self.layout
        x, width = self.signature_area()

        pdf.setStrokeColor(black)
        pdf.setLineWidth(0.8)
        pdf.line(x, y, x + width, y)

        self.draw_centered(pdf, name.upper(), layout.font_bold, layout.signature_name_size,
                           y - 14, container_x=x, container_width=width)
        if detail:
            self.draw_centered(pdf, detail, layout.font_regular, layout.signature_detail_size,
                               y - 26, container_x=x, container_width=width, color=GRAY_TEXT)

    def draw_signature_image(self, pdf: canvas.Canvas, data: Optional[bytes], y: float) -> bool:
        """Signature image sitting on the line at y. Returns False if omitted."""
        if not data:
            return False
        try:
            image = decode_signature(data)
        except SignatureAssetUnavailable as e:
            self.logger.warning(f"Drawing without signature image: {e.detail}")
            return False

        if image.mode not in ("RGB", "RGBA", "L"):
            image = image.convert("RGBA")

        x, width = self.signature_area()
        draw_w, draw_h = fit_image(
            image.width, image.height,
            width * self.layout.signature_image_width_ratio,
            self.layout.signature_image_max_height,
        )
        pdf.drawImage(ImageReader(image), x + (width - draw_w) / 2, y,
                      width=draw_w, height=draw_h, mask="auto")
        return True

    def draw_signature_zone(self, pdf: canvas.Canvas, request: RenderRequest) -> None:
        """
        City/date line, client signature and accountant signature.

        Positions are fixed from the bottom of the page and do not move with
        the content above them.
        """
        layout = self.layout
        subject = request.subject
        signer = request.signer

        date_text = f"{self.city}, {format_long_date(request.issued_on)}"
        self.draw_centered(pdf, date_text, layout.font_oblique, 9, layout.date_line_y, color=GRAY_TEXT)

        self.draw_signature_line(pdf, layout.client_line_y, subject.display_name,
                                 f"CNPJ {format_cnpj(subject.tax_id)}")

        self.draw_signature_image(pdf, request.signature_image, layout.accountant_line_y)
        accountant = (signer.name if signer and signer.name else DEFAULT_ACCOUNTANT)
        crc = signer.registration_code if signer else ""
        self.draw_signature_line(pdf, layout.accountant_line_y, accountant, crc)

    # -- tables ---------------------------------------------------------

    def draw_row(
        self,
        pdf: canvas.Canvas,
        x: float,
        top: float,
        width: float,
        cells: Sequence[Tuple[float, str, str]],
        font: str,
        heavy: bool = False,
        fill: Color = white,
    ) -> float:
        """
        One table row.

        cells are (x, text, align) with align 'left' or 'right'. Heavy rows
        (header, totals) get a thicker black border.
        """
        layout = self.layout
        if heavy:
            self.draw_box(pdf, x, top, width, layout.row_height, layout.heavy_border, fill)
        else:
            self.draw_box(pdf, x, top, width, layout.row_height, layout.light_border, fill, ROW_BORDER_GRAY)

        text_y = top - layout.row_height + (layout.row_height / 2 - 4)
        pdf.setFillColor(black)
        pdf.setFont(font, layout.table_font_size)
        for cell_x, text, align in cells:
            if align == "right":
                pdf.drawRightString(cell_x, text_y, text)
            else:
                pdf.drawString(cell_x, text_y, text)
        return top - layout.row_height

    def draw_separators(self, pdf: canvas.Canvas, xs: List[float], top: float, bottom: float) -> None:
        pdf.setStrokeColor(SEPARATOR_GRAY)
        pdf.setLineWidth(self.layout.light_border)
        for x in xs:
            pdf.line(x, bottom, x, top)

    def zebra(self, index: int) -> Color:
        """Alternating row background."""
        if index % 2 == 0:
            return white
        gray = self.layout.zebra_gray
        return Color(gray, gray, gray)
