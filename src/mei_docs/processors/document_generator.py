"""
Single-document generation.

Resolves the effective period for one subject, builds the render request,
picks the rendering strategy and returns the finished PDF bytes with a
suggested file name. Nothing here touches the filesystem except the
template store.
"""

import logging
from datetime import date
from typing import Callable, Optional

from pypdf.errors import PyPdfError

from ..assets import SignatureLoader, TemplateStore
from ..config import GenerationConfig
from ..errors import NoEligiblePeriod, TemplateLoadFailed
from ..fillers.acroform import AcroFormTemplateRenderer
from ..fillers.base import select_strategy
from ..generators.freehand import FreehandRenderer
from ..models import (
    DocumentArtifact,
    FinancialData,
    MonthKey,
    PeriodWindow,
    ProLaboreValues,
    RenderedDocument,
    RenderRequest,
    RenderStrategy,
    ReportType,
    Signer,
    Subject,
)
from ..utils.formatting import safe_filename
from .aggregation import aggregate_monthly_revenue, compute_pro_labore, payslip_lines
from .period_policy import PeriodDecision, evaluate_period, resolve_closed_months

logger = logging.getLogger(__name__)

# (template bytes, template name, layout) -> template renderer
TemplateRendererFactory = Callable[..., AcroFormTemplateRenderer]
ConfirmPartial = Callable[[PeriodDecision], bool]


class DocumentGenerator:
    """
    Generates one document for one subject.

    The template strategy is tried only for report types that have a
    template asset; any load failure falls back to freehand drawing.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        template_store: Optional[TemplateStore] = None,
        signature_loader: Optional[SignatureLoader] = None,
        template_renderer_factory: Optional[TemplateRendererFactory] = None,
    ):
        self.config = config or GenerationConfig()
        self.logger = logging.getLogger(self.__class__.__name__)

        self.template_store = template_store or TemplateStore(self.config.templates_dir)
        self.signature_loader = signature_loader or SignatureLoader(self.config.signature_timeout)
        self.template_renderer_factory = template_renderer_factory or AcroFormTemplateRenderer
        self.freehand = FreehandRenderer(self.config.layout, self.config.city)

    def build_request(
        self,
        subject: Subject,
        period: PeriodWindow,
        financial_data: FinancialData,
        signer: Optional[Signer] = None,
        report_type: ReportType = ReportType.REVENUE,
        issued_on: Optional[date] = None,
    ) -> RenderRequest:
        """Turn already-fetched financial data into a render request."""
        if report_type is ReportType.PAYSLIP:
            if not isinstance(financial_data, ProLaboreValues):
                raise TypeError(f"Payslip needs ProLaboreValues, got {type(financial_data).__name__}")
            return RenderRequest(
                report_type=report_type,
                subject=subject,
                period=period,
                lines=payslip_lines(financial_data),
                signer=signer,
                issued_on=issued_on or date.today(),
                pro_labore=financial_data,
            )

        return RenderRequest(
            report_type=report_type,
            subject=subject,
            period=period,
            lines=aggregate_monthly_revenue(financial_data or (), period),
            signer=signer,
            issued_on=issued_on or date.today(),
        )

    def render(self, request: RenderRequest, allow_template: bool = True) -> RenderedDocument:
        """
        Render with the template when it loads, freehand otherwise.

        allow_template=False forces the freehand path.
        """
        template_name = request.report_type.template_name
        template_available = False
        template_loaded = False
        renderer = writer = None

        if template_name and allow_template:
            try:
                template_bytes = self.template_store.load(template_name)
                template_available = True
                renderer = self.template_renderer_factory(template_bytes, template_name, self.config.layout)
                writer = renderer.load()
                template_loaded = True
            except TemplateLoadFailed as e:
                self.logger.warning(f"{e}; drawing {request.subject.display_name} freehand")

        if select_strategy(template_available, template_loaded) is RenderStrategy.TEMPLATE:
            try:
                rendered = renderer.fill(writer, request)
            except PyPdfError as e:
                self.logger.warning(f"Template fill failed for {request.subject.display_name}: {e}; "
                                    f"drawing freehand")
            else:
                if rendered.skipped_fields:
                    self.logger.warning(f"Template fields skipped: {', '.join(rendered.skipped_fields)}")
                return rendered

        return self.freehand.render(request)

    def generate_one(
        self,
        subject: Subject,
        period: PeriodWindow,
        financial_data: FinancialData,
        signer: Optional[Signer] = None,
        report_type: ReportType = ReportType.REVENUE,
        issued_on: Optional[date] = None,
        allow_template: bool = True,
    ) -> DocumentArtifact:
        """
        Generate one subject's document.

        Args:
            subject: Business the document is for
            period: Requested months (truncated to the registration date)
            financial_data: Pro-labore values or revenue entries
            signer: Accountant; the signature image is fetched if needed
            report_type: Document kind
            issued_on: Date printed on the document (defaults to today)
            allow_template: Set False to force freehand drawing

        Returns:
            DocumentArtifact with the PDF bytes and a suggested file name

        Raises:
            NoEligiblePeriod: truncation left no month
        """
        decision = evaluate_period(subject, period)
        if decision.is_empty:
            raise NoEligiblePeriod(subject.display_name, decision.opening_label)
        if decision.excluded_count:
            self.logger.info(f"{subject.display_name}: {decision.excluded_count} month(s) before "
                             f"registration excluded")

        signer = self.signature_loader.resolve(signer)
        request = self.build_request(subject, decision.effective, financial_data, signer,
                                     report_type, issued_on)
        rendered = self.render(request, allow_template=allow_template)

        artifact = DocumentArtifact(
            filename=self.filename_for(report_type, subject, decision.effective),
            content=rendered.content,
            page_count=rendered.page_count,
            strategy=rendered.strategy,
        )
        self.logger.debug(f"Generated {artifact.filename} ({artifact.size} bytes, {rendered.strategy.value})")
        return artifact

    def filename_for(self, report_type: ReportType, subject: Subject, period: PeriodWindow) -> str:
        if report_type is ReportType.PAYSLIP:
            return safe_filename(report_type.file_prefix, subject.file_identifier, period.first.competence)
        return safe_filename(report_type.file_prefix, subject.file_identifier, period.range_label)

    def generate_payslip(
        self,
        subject: Subject,
        competence: MonthKey,
        values: Optional[ProLaboreValues] = None,
        signer: Optional[Signer] = None,
        issued_on: Optional[date] = None,
    ) -> DocumentArtifact:
        """Pro-labore receipt for one month; values default to the configured wage and rate."""
        if values is None:
            values = compute_pro_labore(self.config.minimum_wage, self.config.inss_rate)
        return self.generate_one(subject, PeriodWindow.single(competence), values, signer,
                                 ReportType.PAYSLIP, issued_on)

    def generate_revenue_report(
        self,
        subject: Subject,
        entries,
        signer: Optional[Signer] = None,
        months: int = 6,
        as_of: Optional[date] = None,
        confirm_partial: Optional[ConfirmPartial] = None,
    ) -> Optional[DocumentArtifact]:
        """
        Monthly revenue report over the last `months` closed months.

        When the registration date drops some months, confirm_partial is
        asked first; a False answer returns None.

        Raises:
            NoEligiblePeriod: the subject opened after the whole window
        """
        window = resolve_closed_months(months, as_of)
        decision = evaluate_period(subject, window)
        if decision.is_empty:
            raise NoEligiblePeriod(subject.display_name, decision.opening_label)

        if decision.needs_confirmation and confirm_partial is not None:
            if not confirm_partial(decision):
                self.logger.info(f"Partial period declined for {subject.display_name}")
                return None

        return self.generate_one(subject, decision.effective, entries, signer,
                                 ReportType.REVENUE, as_of)
