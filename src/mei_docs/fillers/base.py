"""
Base abstract class for document renderers.

This module defines the contract shared by the two rendering strategies:
filling a fillable template and drawing the page freehand. Both turn a
RenderRequest into a RenderedDocument.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..config import LayoutConfig
from ..models import RenderedDocument, RenderRequest, RenderStrategy, ReportType

logger = logging.getLogger(__name__)


def select_strategy(template_available: bool, template_loaded: bool) -> RenderStrategy:
    """
    Pick the rendering strategy.

    The template is used only when the asset exists and loaded into a form;
    every other combination draws the document freehand.
    """
    if template_available and template_loaded:
        return RenderStrategy.TEMPLATE
    return RenderStrategy.FREEHAND


class BaseRenderer(ABC):
    """
    Abstract base class for all renderers.

    Subclasses produce a complete PDF for one RenderRequest. Layout values
    come from the LayoutConfig passed in, never from module globals.
    """

    def __init__(self, layout: Optional[LayoutConfig] = None):
        """
        Initialize the renderer.

        Args:
            layout: Page geometry and typography
        """
        self.layout = layout or LayoutConfig()
        self.logger = logging.getLogger(self.__class__.__name__)
        self._setup_renderer()

    def _setup_renderer(self) -> None:
        """Setup renderer-specific resources."""
        pass

    @property
    @abstractmethod
    def strategy(self) -> RenderStrategy:
        """Which strategy this renderer implements."""
        pass

    @property
    @abstractmethod
    def supported_report_types(self) -> List[ReportType]:
        """Report types this renderer can produce."""
        pass

    def can_render(self, request: RenderRequest) -> bool:
        return request.report_type in self.supported_report_types

    @abstractmethod
    def render(self, request: RenderRequest) -> RenderedDocument:
        """
        Render one document.

        Args:
            request: Subject, period, amounts and signer

        Returns:
            RenderedDocument with the PDF bytes
        """
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(strategy={self.strategy.value})"

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}("
                f"strategy={self.strategy.value}, "
                f"report_types={[t.value for t in self.supported_report_types]})")
