"""
Monthly revenue (faturamento) report generator.
"""

from typing import List, Sequence, Tuple

from reportlab.pdfgen import canvas

from ..models import MonetaryLine, RenderRequest, ReportType
from ..utils.formatting import format_table_amount
from .base import BaseFreehandGenerator

REPORT_TITLE = "FATURAMENTO MENSAL"
LEGAL_DECLARATION = (
    "Declaramos, sob as penas da lei, especialmente das previsões do artigo 298 do "
    "Código Penal Brasileiro, nos incisos XX e XXIV do artigo 24 do Estatuto dos "
    "Conselhos Regionais de Contabilidade e Resolução CFC nº 825/98, que as "
    "informações abaixo transcritas constituem a expressão da verdade."
)


def revenue_cells(lines: Sequence[MonetaryLine]) -> Tuple[List[str], str]:
    """Value column texts for each line, plus the total text."""
    total = sum(line.amount for line in lines)
    return [format_table_amount(line.amount) for line in lines], format_table_amount(total)


class RevenueReportGenerator(BaseFreehandGenerator):
    """
    Draws the revenue declaration: company box, legal declaration, a
    two-column month/revenue table with totals and the signature zone.
    """

    @property
    def supported_report_types(self) -> List[ReportType]:
        return [ReportType.REVENUE, ReportType.REVENUE_BATCH]

    def document_title(self, request: RenderRequest) -> str:
        return f"Faturamento {request.period.range_label} - {request.subject.display_name}"

    def draw_page(self, pdf: canvas.Canvas, request: RenderRequest) -> None:
        layout = self.layout

        y = layout.page_height - layout.top_offset
        y = self.draw_header_box(pdf, request, y) - 8
        y = self.draw_paragraph_box(pdf, LEGAL_DECLARATION, y) - 50

        self.draw_centered(pdf, REPORT_TITLE, layout.font_bold, layout.title_size, y)
        y -= 20

        table_width = layout.content_width * layout.table_width_ratio
        col1 = layout.margin_x + (layout.content_width - table_width) / 2
        col2 = col1 + table_width * 0.5

        y = self.draw_row(
            pdf, col1, y, table_width,
            [(col1 + 8, "MÊS", "left"), (col2 + 8, "FATURAMENTO", "left")],
            layout.font_bold, heavy=True,
        )
        data_top = y

        values, total = revenue_cells(request.lines)
        for index, (line, value) in enumerate(zip(request.lines, values)):
            y = self.draw_row(
                pdf, col1, y, table_width,
                [(col1 + 8, line.label.upper(), "left"), (col2 + 8, value, "left")],
                layout.font_regular, fill=self.zebra(index),
            )

        y = self.draw_row(
            pdf, col1, y, table_width,
            [(col1 + 8, "TOTAL", "left"), (col2 + 8, total, "left")],
            layout.font_bold, heavy=True,
        )
        self.draw_separators(pdf, [col2], data_top, y)

        self.draw_signature_zone(pdf, request)
