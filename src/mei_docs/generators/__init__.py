"""
Freehand document generators.

This module provides the reportlab generators used when a document has no
fillable template, or when the template cannot be loaded.
"""

from .base import BaseFreehandGenerator, fit_image
from .payslip_generator import PayslipGenerator
from .revenue_report_generator import RevenueReportGenerator, revenue_cells
from .freehand import FreehandRenderer

__all__ = [
    'BaseFreehandGenerator',
    'fit_image',
    'PayslipGenerator',
    'RevenueReportGenerator',
    'revenue_cells',
    'FreehandRenderer',
]
