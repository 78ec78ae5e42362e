"""
MEI document generation.

Produces pro-labore payslips and monthly revenue reports as PDF, either by
filling a fillable template or by drawing the page freehand, and merges
batches of them into a single deliverable.
"""

from .config import GenerationConfig, LayoutConfig, setup_logging
from .errors import (
    DocumentGenerationError,
    NoEligiblePeriod,
    SignatureAssetUnavailable,
    SubjectGenerationFailed,
    TemplateFieldSkipped,
    TemplateLoadFailed,
)
from .models import (
    BatchResult,
    BatchStatus,
    DocumentArtifact,
    MonetaryLine,
    MonthKey,
    PeriodWindow,
    ProLaboreValues,
    RenderRequest,
    RenderStrategy,
    ReportType,
    RevenueEntry,
    Signer,
    Subject,
)
from .processors.document_generator import DocumentGenerator
from .processors.pipeline import BatchPipeline

__version__ = "0.1.0"

__all__ = [
    'GenerationConfig',
    'LayoutConfig',
    'setup_logging',
    'DocumentGenerationError',
    'NoEligiblePeriod',
    'SignatureAssetUnavailable',
    'SubjectGenerationFailed',
    'TemplateFieldSkipped',
    'TemplateLoadFailed',
    'BatchResult',
    'BatchStatus',
    'DocumentArtifact',
    'MonetaryLine',
    'MonthKey',
    'PeriodWindow',
    'ProLaboreValues',
    'RenderRequest',
    'RenderStrategy',
    'ReportType',
    'RevenueEntry',
    'Signer',
    'Subject',
    'DocumentGenerator',
    'BatchPipeline',
]
