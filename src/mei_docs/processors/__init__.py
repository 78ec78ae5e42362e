"""
Generation processors: period policy, aggregation and the single-document
and batch pipelines.
"""

from .period_policy import PeriodDecision, evaluate_period, resolve_closed_months, truncate_for_registration
from .aggregation import (
    aggregate_monthly_revenue,
    build_pro_labore_records,
    compute_pro_labore,
    payslip_lines,
    sort_subjects,
)
from .document_generator import DocumentGenerator
from .pipeline import BatchPipeline, generate_batch

__all__ = [
    'PeriodDecision',
    'evaluate_period',
    'resolve_closed_months',
    'truncate_for_registration',
    'aggregate_monthly_revenue',
    'build_pro_labore_records',
    'compute_pro_labore',
    'payslip_lines',
    'sort_subjects',
    'DocumentGenerator',
    'BatchPipeline',
    'generate_batch',
]
