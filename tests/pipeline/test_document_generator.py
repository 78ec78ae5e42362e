"""
Tests for single-document generation: strategy choice, fallback,
period handling and file names.
"""

import logging
from datetime import date

import pytest
from pypdf.errors import PdfReadError

from mei_docs.assets import SignatureLoader
from mei_docs.config import GenerationConfig
from mei_docs.errors import NoEligiblePeriod
from mei_docs.fillers.acroform import AcroFormTemplateRenderer
from mei_docs.models import (
    MonthKey,
    PeriodWindow,
    RenderStrategy,
    ReportType,
    RevenueEntry,
    Signer,
)
from mei_docs.processors.aggregation import compute_pro_labore
from mei_docs.processors.document_generator import DocumentGenerator

OCTOBER = MonthKey(2026, 10)
ISSUED = date(2026, 10, 17)

ENTRIES = [
    RevenueEntry("2025-12-10", "150.50"),
    RevenueEntry("2026-01-05", 1000),
    RevenueEntry("2026-01-20", 234.5),
]


class UnreadableTemplateRenderer(AcroFormTemplateRenderer):
    def fill(self, writer, request):
        raise PdfReadError("stream ended unexpectedly")


def test_payslip_uses_template(config, subject, signer, read_text):
    artifact = DocumentGenerator(config).generate_payslip(subject, OCTOBER, signer=signer, issued_on=ISSUED)

    assert artifact.strategy is RenderStrategy.TEMPLATE
    assert artifact.filename == "Holerite_Padaria_Sao_Jose_12345678000195_10_2026.pdf"
    assert "1.256,68" in read_text(artifact.content)


def test_missing_template_falls_back_to_freehand(empty_config, subject, signer, caplog, read_text):
    with caplog.at_level(logging.WARNING):
        artifact = DocumentGenerator(empty_config).generate_payslip(subject, OCTOBER, signer=signer,
                                                                    issued_on=ISSUED)

    assert artifact.strategy is RenderStrategy.FREEHAND
    assert "RECIBO DE PAGAMENTO" in read_text(artifact.content)
    assert "holerite-template.pdf" in caplog.text


@pytest.mark.parametrize("template", [b"corrupted bytes", None])
def test_broken_template_falls_back(tmp_path, subject, template, plain_pdf):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "holerite-template.pdf").write_bytes(template if template is not None else plain_pdf)

    artifact = DocumentGenerator(GenerationConfig(templates_dir=templates)).generate_payslip(subject, OCTOBER)
    assert artifact.strategy is RenderStrategy.FREEHAND


def test_fill_error_falls_back(config, subject):
    generator = DocumentGenerator(config, template_renderer_factory=UnreadableTemplateRenderer)
    assert generator.generate_payslip(subject, OCTOBER).strategy is RenderStrategy.FREEHAND


def test_freehand_can_be_forced(config, subject):
    artifact = DocumentGenerator(config).generate_one(
        subject, PeriodWindow.single(OCTOBER), compute_pro_labore(), report_type=ReportType.PAYSLIP,
        allow_template=False,
    )
    assert artifact.strategy is RenderStrategy.FREEHAND


def test_revenue_report(config, subject, signer, read_text):
    artifact = DocumentGenerator(config).generate_revenue_report(
        subject, ENTRIES, signer, months=3, as_of=date(2026, 2, 15)
    )

    assert artifact.strategy is RenderStrategy.FREEHAND
    assert artifact.filename == "Faturamento_Padaria_Sao_Jose_12345678000195_nov_25_a_jan_26.pdf"
    text = read_text(artifact.content)
    assert "150,50" in text
    assert "1.234,50" in text
    assert "1.385,00" in text


def test_no_eligible_period(config, subject_factory):
    late = subject_factory(registration_date="01/03/2026")
    with pytest.raises(NoEligiblePeriod) as excinfo:
        DocumentGenerator(config).generate_revenue_report(late, ENTRIES, as_of=date(2026, 2, 15))
    assert excinfo.value.registration_label == "março/2026"


def test_partial_period_declined(config, subject_factory):
    recent = subject_factory(registration_date="2026-01-10")
    decisions = []

    def decline(decision):
        decisions.append(decision)
        return False

    result = DocumentGenerator(config).generate_revenue_report(
        recent, ENTRIES, months=3, as_of=date(2026, 2, 15), confirm_partial=decline
    )

    assert result is None
    assert decisions[0].excluded_count == 2
    assert decisions[0].opening_label == "janeiro/2026"


def test_partial_period_accepted(config, subject_factory, read_text):
    recent = subject_factory(registration_date="2026-01-10", trade_name="Loja Nova")
    artifact = DocumentGenerator(config).generate_revenue_report(
        recent, ENTRIES, as_of=date(2026, 2, 15), confirm_partial=lambda decision: True
    )

    assert artifact.filename == f"Faturamento_Loja_Nova_{recent.tax_id}_jan_26.pdf"
    text = read_text(artifact.content)
    assert "JAN/26" in text
    assert "DEZ/25" not in text


def test_signature_fetched_from_url(config, subject, signature_png, session_factory):
    url = "https://storage.example.com/sig.png"
    session = session_factory({url: (200, signature_png)})
    generator = DocumentGenerator(config, signature_loader=SignatureLoader(session=session))

    artifact = generator.generate_revenue_report(
        subject, ENTRIES, Signer("Ana", "CRC 1", signature_url=url), as_of=date(2026, 2, 15)
    )

    assert session.calls == [url]
    assert artifact.size > 0


def test_generation_is_repeatable(empty_config, subject, signer):
    generator = DocumentGenerator(empty_config)
    first = generator.generate_payslip(subject, OCTOBER, signer=signer, issued_on=ISSUED)
    second = generator.generate_payslip(subject, OCTOBER, signer=signer, issued_on=ISSUED)
    assert first.content == second.content


def test_template_generation_is_repeatable(config, subject, read_text):
    generator = DocumentGenerator(config)
    first = generator.generate_payslip(subject, OCTOBER, issued_on=ISSUED)
    second = generator.generate_payslip(subject, OCTOBER, issued_on=ISSUED)
    assert read_text(first.content) == read_text(second.content)


def test_payslip_needs_pro_labore_values(config, subject):
    with pytest.raises(TypeError):
        DocumentGenerator(config).build_request(subject, PeriodWindow.single(OCTOBER), ENTRIES,
                                                report_type=ReportType.PAYSLIP)


def test_revenue_window_defaults_to_six_months(config, subject):
    artifact = DocumentGenerator(config).generate_revenue_report(subject, ENTRIES, as_of=date(2026, 2, 15))
    assert artifact.filename == "Faturamento_Padaria_Sao_Jose_12345678000195_ago_25_a_jan_26.pdf"
