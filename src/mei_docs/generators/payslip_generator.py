"""
Pro-labore payslip generator (freehand).

Used when the fillable payslip template is missing or cannot be loaded.
"""

from typing import List

from reportlab.pdfgen import canvas

from ..models import RenderRequest, ReportType
from ..utils.formatting import format_brl, format_cnpj, format_percent, format_table_amount
from ..utils.text_layout import wrap_text
from .base import BaseFreehandGenerator

RECEIPT_TITLE = "RECIBO DE PAGAMENTO DE PRÓ-LABORE"
RECEIPT_DECLARATION = (
    "Declaro ter recebido a importância líquida discriminada neste recibo, "
    "referente à retirada de pró-labore da competência indicada."
)

PAYSLIP_HEADER = ("CÓD", "DESCRIÇÃO", "REFERÊNCIA", "PROVENTOS", "DESCONTOS")
# column starts as fractions of the content width
PAYSLIP_COLUMNS = (0.0, 0.1, 0.5, 0.66, 0.83)


class PayslipGenerator(BaseFreehandGenerator):
    """
    Draws a pro-labore receipt: company box, earnings/deductions table,
    net amount and the fixed signature zone.
    """

    @property
    def supported_report_types(self) -> List[ReportType]:
        return [ReportType.PAYSLIP]

    def document_title(self, request: RenderRequest) -> str:
        return f"Holerite {request.period.first.competence} - {request.subject.display_name}"

    def draw_page(self, pdf: canvas.Canvas, request: RenderRequest) -> None:
        layout = self.layout
        values = request.pro_labore
        if values is None:
            raise ValueError("Payslip requires pro-labore values")

        y = layout.page_height - layout.top_offset
        self.draw_centered(pdf, RECEIPT_TITLE, layout.font_bold, layout.title_size, y)
        y -= 16
        self.draw_centered(pdf, f"COMPETÊNCIA: {request.period.first.competence}",
                           layout.font_regular, 10, y)
        y -= 14

        details = [f"CNPJ: {format_cnpj(request.subject.tax_id)}"]
        if request.subject.address:
            details.append(request.subject.address.upper())
        y = self.draw_header_box(pdf, request, y, details) - 24

        # Earnings / deductions table
        x = layout.margin_x
        width = layout.content_width
        cols = [x + width * c for c in PAYSLIP_COLUMNS]
        right_edge = x + width

        def cells(code, description, reference, earning, deduction):
            return [
                (cols[0] + 6, code, "left"),
                (cols[1] + 6, description, "left"),
                (cols[2] + 6, reference, "left"),
                (cols[4] - 6, earning, "right"),
                (right_edge - 6, deduction, "right"),
            ]

        header_cells = [(cols[i] + 6, label, "left") for i, label in enumerate(PAYSLIP_HEADER)]
        y = self.draw_row(pdf, x, y, width, header_cells, layout.font_bold, heavy=True)
        data_top = y

        rows = [
            ("001", "PRÓ-LABORE", "30 DIAS", format_table_amount(values.base), "-"),
            ("002", "INSS CONTRIBUINTE INDIVIDUAL", format_percent(values.inss_rate),
             "-", format_table_amount(values.inss_amount)),
        ]
        for index, row in enumerate(rows):
            y = self.draw_row(pdf, x, y, width, cells(*row), layout.font_regular, fill=self.zebra(index))

        y = self.draw_row(
            pdf, x, y, width,
            cells("", "TOTAIS", "", format_table_amount(values.base), format_table_amount(values.inss_amount)),
            layout.font_bold, heavy=True,
        )
        self.draw_separators(pdf, cols[1:], data_top, y)

        y -= 10
        net_text = f"VALOR LÍQUIDO A RECEBER: {format_brl(values.net_amount)}"
        self.draw_box(pdf, x, y, width, layout.row_height + 6, layout.heavy_border)
        pdf.setFont(layout.font_bold, 11)
        pdf.drawRightString(right_edge - 8, y - layout.row_height + 2, net_text)

        # Declaration just above the fixed signature zone
        declaration_y = layout.date_line_y + 30
        for i, line in enumerate(wrap_text(RECEIPT_DECLARATION, layout.font_regular, 9, width)):
            self.draw_centered(pdf, line, layout.font_regular, 9, declaration_y - i * 12)

        self.draw_signature_zone(pdf, request)
