"""
Batch document pipeline.

Drives the single-document generator over a set of subjects, records
successes and failures independently and, for merge report types,
concatenates every page into one deliverable.
"""

import concurrent.futures
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from pypdf import PdfWriter

from ..config import GenerationConfig
from ..errors import DocumentGenerationError, SubjectGenerationFailed
from ..models import (
    BatchFailure,
    BatchResult,
    BatchStatus,
    DocumentArtifact,
    FinancialData,
    PeriodWindow,
    ReportType,
    Signer,
    Subject,
)
from ..utils.formatting import safe_filename
from .document_generator import DocumentGenerator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


@dataclass
class SubjectOutcome:
    """Result of generating one subject, before it is folded into the batch."""
    index: int
    subject: Subject
    artifact: Optional[DocumentArtifact] = None
    error: Optional[DocumentGenerationError] = None


class _BatchAccumulator:
    """
    Folds subject outcomes into a BatchResult.

    Owns the merged writer for the lifetime of one batch.
    """

    def __init__(self, result: BatchResult):
        self.result = result
        self.writer = PdfWriter() if result.report_type.merge_output else None

    def add(self, outcome: SubjectOutcome) -> None:
        if outcome.error is not None:
            self.result.failed.append(BatchFailure(outcome.subject, str(outcome.error)))
            return
        if self.writer is not None:
            # a document that cannot be merged must not leave pages behind
            PdfWriter().append(io.BytesIO(outcome.artifact.content))
            self.writer.append(io.BytesIO(outcome.artifact.content))
        self.result.succeeded.append((outcome.subject, outcome.artifact))

    def finish(self, filename: str) -> Optional[DocumentArtifact]:
        if self.writer is None or not self.result.succeeded:
            return None
        buffer = io.BytesIO()
        self.writer.write(buffer)
        return DocumentArtifact(
            filename=filename,
            content=buffer.getvalue(),
            page_count=len(self.writer.pages),
        )


class BatchPipeline:
    """
    Batch generation over many subjects.

    Subjects are processed in the order given. One subject failing never
    stops the batch; cancellation is checked between subjects.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        generator: Optional[DocumentGenerator] = None,
    ):
        self.config = config or GenerationConfig()
        self.generator = generator or DocumentGenerator(self.config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def generate_batch(
        self,
        subjects: Sequence[Subject],
        period: PeriodWindow,
        per_subject_data: Mapping[str, FinancialData],
        report_type: ReportType = ReportType.PAYSLIP,
        signer: Optional[Signer] = None,
        issued_on: Optional[date] = None,
        progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> BatchResult:
        """
        Generate one document per subject.

        Args:
            subjects: Subjects in canonical (output) order
            period: Requested window, truncated per subject
            per_subject_data: Financial data keyed by Subject.key
            report_type: Document kind; decides whether output is merged
            signer: Accountant signing every document
            issued_on: Date printed on the documents
            progress: Called with (done, total) after every subject
            should_cancel: Polled between subjects

        Returns:
            BatchResult with per-subject artifacts, failures and the merged
            document when the report type merges
        """
        subjects = list(subjects)
        result = BatchResult(report_type=report_type, total=len(subjects))
        result.status = BatchStatus.RUNNING
        issued_on = issued_on or date.today()
        self.logger.info(f"Starting {report_type.value} batch for {len(subjects)} subjects")

        # fetch the signature once for the whole batch
        signer = self.generator.signature_loader.resolve(signer)

        def generate(index: int, subject: Subject) -> SubjectOutcome:
            return self._generate_subject(index, subject, period, per_subject_data,
                                          report_type, signer, issued_on)

        if self.config.enable_parallel_processing and len(subjects) > 1:
            outcomes, cancelled = self._run_parallel(subjects, generate, result, progress, should_cancel)
        else:
            outcomes, cancelled = self._run_sequential(subjects, generate, result, progress, should_cancel)

        accumulator = _BatchAccumulator(result)
        for outcome in sorted(outcomes, key=lambda o: o.index):
            try:
                accumulator.add(outcome)
            except Exception as e:
                self.logger.warning(f"Could not merge {outcome.subject.display_name}: {e}")
                result.failed.append(BatchFailure(outcome.subject, f"merge failed: {e}"))

        result.merged = accumulator.finish(self.batch_filename(report_type, period))

        if cancelled:
            result.status = BatchStatus.CANCELLED
        elif result.failed:
            result.status = BatchStatus.PARTIALLY_FAILED
        else:
            result.status = BatchStatus.COMPLETED

        self.logger.info(f"Batch finished - {result.summary()}")
        return result

    def _generate_subject(
        self,
        index: int,
        subject: Subject,
        period: PeriodWindow,
        per_subject_data: Mapping[str, FinancialData],
        report_type: ReportType,
        signer: Optional[Signer],
        issued_on: date,
    ) -> SubjectOutcome:
        try:
            data = per_subject_data.get(subject.key)
            if data is None and report_type is ReportType.PAYSLIP:
                raise ValueError("no pro-labore record for this period")
            artifact = self.generator.generate_one(
                subject, period, data if data is not None else (), signer, report_type, issued_on
            )
            return SubjectOutcome(index, subject, artifact=artifact)
        except DocumentGenerationError as e:
            self.logger.warning(f"Skipping {subject.display_name}: {e}")
            return SubjectOutcome(index, subject, error=e)
        except Exception as e:
            self.logger.error(f"Generation failed for {subject.display_name}: {e}", exc_info=True)
            return SubjectOutcome(index, subject, error=SubjectGenerationFailed(subject.display_name, e))

    def _run_sequential(
        self,
        subjects: List[Subject],
        generate: Callable[[int, Subject], SubjectOutcome],
        result: BatchResult,
        progress: Optional[ProgressCallback],
        should_cancel: Optional[CancelCheck],
    ) -> Tuple[List[SubjectOutcome], bool]:
        outcomes = []
        for index, subject in enumerate(subjects):
            if should_cancel and should_cancel():
                self.logger.info(f"Batch cancelled after {result.done}/{result.total} subjects")
                return outcomes, True
            outcomes.append(generate(index, subject))
            self._advance(result, progress)
        return outcomes, False

    def _run_parallel(
        self,
        subjects: List[Subject],
        generate: Callable[[int, Subject], SubjectOutcome],
        result: BatchResult,
        progress: Optional[ProgressCallback],
        should_cancel: Optional[CancelCheck],
    ) -> Tuple[List[SubjectOutcome], bool]:
        """Generate concurrently; progress counts completions, not dispatches."""
        outcomes = []
        cancelled = False
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            futures = [executor.submit(generate, index, subject) for index, subject in enumerate(subjects)]
            for future in concurrent.futures.as_completed(futures):
                outcomes.append(future.result())
                self._advance(result, progress)
                if result.done < result.total and should_cancel and should_cancel():
                    self.logger.info(f"Batch cancelled after {result.done}/{result.total} subjects")
                    cancelled = True
                    break
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        return outcomes, cancelled

    def _advance(self, result: BatchResult, progress: Optional[ProgressCallback]) -> None:
        result.done += 1
        if progress:
            progress(result.done, result.total)

    def batch_filename(self, report_type: ReportType, period: PeriodWindow) -> str:
        """Name of the merged deliverable, e.g. Holerites_Lote_10_2026.pdf."""
        if report_type is ReportType.PAYSLIP:
            return safe_filename("Holerites", "Lote", period.first.competence)
        return safe_filename("Faturamento", "Lote", period.range_label)


def generate_batch(
    subjects: Sequence[Subject],
    period: PeriodWindow,
    per_subject_data: Mapping[str, FinancialData],
    report_type: ReportType = ReportType.PAYSLIP,
    signer: Optional[Signer] = None,
    config: Optional[GenerationConfig] = None,
    **kwargs,
) -> BatchResult:
    """Convenience wrapper around BatchPipeline.generate_batch."""
    return BatchPipeline(config).generate_batch(subjects, period, per_subject_data,
                                                report_type, signer, **kwargs)
