"""
Payslip template filler.

Fills the fixed fields of the fillable payslip template with pypdf, then
flattens the form so the output is not interactive.
"""

import io
import re
from enum import Enum
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    TextStringObject,
)

from ..config import LayoutConfig
from ..errors import TemplateFieldSkipped, TemplateLoadFailed
from ..models import RenderedDocument, RenderRequest, RenderStrategy, ReportType
from ..utils.formatting import format_amount, format_cnpj, format_percent
from .base import BaseRenderer

INSS_CODE = "002"
INSS_DESCRIPTION = "INSS CONTRIBUINTE INDIVIDUAL"
BOLD_FONT_RESOURCE = "/MeiBold"

_DA_FONT = re.compile(r"/([^\s/]+)\s+([\d.]+)\s+Tf")


class TemplateField(Enum):
    """Named fields of the payslip template."""
    TAX_ID = "cnpj"
    ADDRESS = "endereco"
    LEGAL_NAME = "razao_social"
    REFERENCE_PERIOD = "competencia"
    BASE_AMOUNT = "salario_base"
    NET_AMOUNT = "valor_liquido"
    DEDUCTION_CODE = "desconto_codigo"
    DEDUCTION_DESCRIPTION = "desconto_descricao"
    DEDUCTION_REFERENCE = "desconto_referencia"
    DEDUCTION_AMOUNT = "desconto_valor"
    TOTAL_EARNINGS = "total_proventos"
    TOTAL_DEDUCTIONS = "total_descontos"


# field name -> (page index, widget annotation)
WidgetIndex = Dict[str, Tuple[int, DictionaryObject]]
FieldSetter = Callable[[], str]


class AcroFormTemplateRenderer(BaseRenderer):
    """
    Deterministic PDF form filler for the payslip template.

    Every field in TemplateField is set through its own setter; a field that
    is missing from the template or is not a text field is skipped without
    affecting the others.
    """

    def __init__(
        self,
        template_bytes: bytes,
        template_name: str = "holerite-template.pdf",
        layout: Optional[LayoutConfig] = None,
    ):
        self.template_bytes = template_bytes
        self.template_name = template_name
        super().__init__(layout)

    @property
    def strategy(self) -> RenderStrategy:
        return RenderStrategy.TEMPLATE

    @property
    def supported_report_types(self) -> List[ReportType]:
        return [ReportType.PAYSLIP]

    def load(self) -> PdfWriter:
        """
        Load the template into a writer.

        Raises:
            TemplateLoadFailed: unreadable bytes or a PDF without a form.
        """
        if not self.template_bytes:
            raise TemplateLoadFailed(self.template_name, TemplateLoadFailed.MISSING, "empty template")

        try:
            reader = PdfReader(io.BytesIO(self.template_bytes))
            fields = reader.get_fields()
        except (PyPdfError, ValueError, KeyError, TypeError, OSError) as e:
            raise TemplateLoadFailed(self.template_name, TemplateLoadFailed.UNREADABLE, str(e)) from e

        if not fields:
            raise TemplateLoadFailed(self.template_name, TemplateLoadFailed.NO_FORM)

        writer = PdfWriter()
        writer.clone_reader_document_root(reader)
        return writer

    def render(self, request: RenderRequest) -> RenderedDocument:
        return self.fill(self.load(), request)

    def fill(self, writer: PdfWriter, request: RenderRequest) -> RenderedDocument:
        """Set every template field, flatten and serialize."""
        if request.pro_labore is None:
            raise ValueError("Payslip template requires pro-labore values")

        widgets = self._index_widgets(writer)
        setters = self._build_setters(writer, widgets, request)

        filled: Dict[str, str] = {}
        skipped: List[str] = []
        for template_field in TemplateField:
            setter = setters.get(template_field)
            if setter is None:
                skipped.append(template_field.value)
                continue
            try:
                filled[template_field.value] = setter()
            except (TemplateFieldSkipped, PyPdfError, KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping field '{template_field.value}': {e}")
                skipped.append(template_field.value)

        self._flatten(writer, widgets, filled)

        buffer = io.BytesIO()
        writer.write(buffer)
        self.logger.info(
            f"Filled {len(filled)}/{len(TemplateField)} template fields for "
            f"{request.subject.display_name}"
        )
        return RenderedDocument(
            content=buffer.getvalue(),
            page_count=len(writer.pages),
            strategy=RenderStrategy.TEMPLATE,
            skipped_fields=tuple(skipped),
        )

    def field_values(self, request: RenderRequest) -> Dict[TemplateField, str]:
        """Text for every template field."""
        values = request.pro_labore
        subject = request.subject
        return {
            TemplateField.TAX_ID: format_cnpj(subject.tax_id),
            TemplateField.ADDRESS: subject.address.upper(),
            TemplateField.LEGAL_NAME: subject.display_name.upper(),
            TemplateField.REFERENCE_PERIOD: request.period.first.competence,
            TemplateField.BASE_AMOUNT: format_amount(values.base),
            TemplateField.NET_AMOUNT: format_amount(values.net_amount),
            TemplateField.DEDUCTION_CODE: INSS_CODE,
            TemplateField.DEDUCTION_DESCRIPTION: INSS_DESCRIPTION,
            TemplateField.DEDUCTION_REFERENCE: format_percent(values.inss_rate),
            TemplateField.DEDUCTION_AMOUNT: format_amount(values.inss_amount),
            TemplateField.TOTAL_EARNINGS: format_amount(values.base),
            TemplateField.TOTAL_DEDUCTIONS: format_amount(values.inss_amount),
        }

    def _build_setters(
        self,
        writer: PdfWriter,
        widgets: WidgetIndex,
        request: RenderRequest,
    ) -> Dict[TemplateField, FieldSetter]:
        setters: Dict[TemplateField, FieldSetter] = {}
        for template_field, value in self.field_values(request).items():
            if template_field is TemplateField.LEGAL_NAME:
                setters[template_field] = partial(self._set_legal_name, writer, widgets, template_field, value)
            elif template_field is TemplateField.NET_AMOUNT:
                setters[template_field] = partial(self._set_bold, writer, widgets, template_field, value)
            else:
                setters[template_field] = partial(self._set_text, writer, widgets, template_field, value)
        return setters

    def _index_widgets(self, writer: PdfWriter) -> WidgetIndex:
        """Map field names to the page and widget that shows them."""
        index: WidgetIndex = {}
        for page_number, page in enumerate(writer.pages):
            annotations = page.get("/Annots")
            if annotations is None:
                continue
            for annotation_ref in annotations.get_object():
                annotation = annotation_ref.get_object()
                if annotation.get("/Subtype") != "/Widget":
                    continue
                name = annotation.get("/T")
                if name is None and "/Parent" in annotation:
                    name = annotation["/Parent"].get_object().get("/T")
                if name is not None:
                    index.setdefault(str(name), (page_number, annotation))
        return index

    def _widget(self, widgets: WidgetIndex, template_field: TemplateField) -> Tuple[int, DictionaryObject]:
        entry = widgets.get(template_field.value)
        if entry is None:
            raise TemplateFieldSkipped(template_field.value, "not present in template")

        _, annotation = entry
        field_type = annotation.get("/FT")
        if field_type is None and "/Parent" in annotation:
            field_type = annotation["/Parent"].get_object().get("/FT")
        if field_type != "/Tx":
            raise TemplateFieldSkipped(template_field.value, f"not a text field ({field_type})")
        return entry

    def _set_text(
        self,
        writer: PdfWriter,
        widgets: WidgetIndex,
        template_field: TemplateField,
        value: str,
    ) -> str:
        page_number, _ = self._widget(widgets, template_field)
        writer.update_page_form_field_values(
            writer.pages[page_number],
            {template_field.value: value},
            auto_regenerate=False,
        )
        return value

    def _set_legal_name(
        self,
        writer: PdfWriter,
        widgets: WidgetIndex,
        template_field: TemplateField,
        value: str,
    ) -> str:
        """Long legal names: smaller fixed font, wider widget."""
        _, annotation = self._widget(widgets, template_field)
        self._restyle(writer, annotation, size=self.layout.legal_name_field_size)

        x1, y1, x2, y2 = [float(v) for v in annotation["/Rect"]]
        annotation[NameObject("/Rect")] = ArrayObject([
            FloatObject(x1), FloatObject(y1),
            FloatObject(x2 + self.layout.legal_name_width_boost), FloatObject(y2),
        ])
        return self._set_text(writer, widgets, template_field, value)

    def _set_bold(
        self,
        writer: PdfWriter,
        widgets: WidgetIndex,
        template_field: TemplateField,
        value: str,
    ) -> str:
        """Set the value, then redraw it in Helvetica-Bold."""
        self._set_text(writer, widgets, template_field, value)
        _, annotation = self._widget(widgets, template_field)
        self._ensure_bold_font(writer)
        self._restyle(writer, annotation, font=BOLD_FONT_RESOURCE)
        return self._set_text(writer, widgets, template_field, value)

    def _restyle(
        self,
        writer: PdfWriter,
        annotation: DictionaryObject,
        font: Optional[str] = None,
        size: Optional[float] = None,
    ) -> None:
        """Rewrite the widget's default appearance (font and/or size)."""
        da = annotation.get("/DA")
        if da is None and "/Parent" in annotation:
            da = annotation["/Parent"].get_object().get("/DA")
        if da is None:
            da = writer.root_object["/AcroForm"].get_object().get("/DA", "/Helv 0 Tf 0 g")

        da = str(da)
        match = _DA_FONT.search(da)
        current_font = f"/{match.group(1)}" if match else "/Helv"
        current_size = float(match.group(2)) if match else 0.0

        selector = f"{font or current_font} {size if size is not None else current_size:g} Tf"
        if match:
            da = _DA_FONT.sub(selector, da, count=1)
        else:
            da = f"{selector} 0 g"
        annotation[NameObject("/DA")] = TextStringObject(da)

    def _ensure_bold_font(self, writer: PdfWriter) -> None:
        """Register Helvetica-Bold in the form's default resources."""
        acroform = writer.root_object["/AcroForm"].get_object()
        if "/DR" not in acroform:
            acroform[NameObject("/DR")] = DictionaryObject()
        resources = acroform["/DR"].get_object()
        if "/Font" not in resources:
            resources[NameObject("/Font")] = DictionaryObject()
        fonts = resources["/Font"].get_object()

        if BOLD_FONT_RESOURCE not in fonts:
            fonts[NameObject(BOLD_FONT_RESOURCE)] = DictionaryObject({
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica-Bold"),
                NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
            })

    def _flatten(self, writer: PdfWriter, widgets: WidgetIndex, filled: Dict[str, str]) -> None:
        """Burn filled values into page content and drop the form."""
        by_page: Dict[int, Dict[str, str]] = {}
        for name, value in filled.items():
            page_number, _ = widgets[name]
            by_page.setdefault(page_number, {})[name] = value

        for page_number, values in by_page.items():
            writer.update_page_form_field_values(
                writer.pages[page_number],
                values,
                auto_regenerate=False,
                flatten=True,
            )

        writer.remove_annotations(subtypes="/Widget")
        if "/AcroForm" in writer.root_object:
            del writer.root_object["/AcroForm"]
