"""
Freehand renderer: dispatches a request to the generator for its report type.
"""

from typing import Dict, List, Optional

from ..config import LayoutConfig
from ..fillers.base import BaseRenderer
from ..models import RenderedDocument, RenderRequest, RenderStrategy, ReportType
from .base import BaseFreehandGenerator
from .payslip_generator import PayslipGenerator
from .revenue_report_generator import RevenueReportGenerator


class FreehandRenderer(BaseRenderer):
    """Draws any report type from primitives. Never needs external assets."""

    def __init__(self, layout: Optional[LayoutConfig] = None, city: str = "Sinop"):
        self.city = city
        super().__init__(layout)

    def _setup_renderer(self) -> None:
        revenue = RevenueReportGenerator(self.layout, self.city)
        self.generators: Dict[ReportType, BaseFreehandGenerator] = {
            ReportType.PAYSLIP: PayslipGenerator(self.layout, self.city),
            ReportType.REVENUE: revenue,
            ReportType.REVENUE_BATCH: revenue,
        }

    @property
    def strategy(self) -> RenderStrategy:
        return RenderStrategy.FREEHAND

    @property
    def supported_report_types(self) -> List[ReportType]:
        return list(self.generators)

    def render(self, request: RenderRequest) -> RenderedDocument:
        generator = self.generators[request.report_type]
        self.logger.debug(f"Drawing {request.report_type.value} with {generator}")
        return generator.render(request)
