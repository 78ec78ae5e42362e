#!/usr/bin/env python3
"""
Command-line runner for MEI document generation.

Reads a JSON export of the record store (clients, financial entries,
pro-labore records and the accountant profile) and writes the generated
PDFs to an output directory.

Expected input keys: "clientes", "financeiro" (each with "clienteId"),
"pro_labores" (each with "clienteId"), "contador".
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from mei_docs import (
    DocumentArtifact,
    GenerationConfig,
    MonthKey,
    PeriodWindow,
    ProLaboreValues,
    ReportType,
    RevenueEntry,
    Signer,
    Subject,
    setup_logging,
)
from mei_docs.processors import (
    BatchPipeline,
    build_pro_labore_records,
    evaluate_period,
    resolve_closed_months,
    sort_subjects,
)


def load_export(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def group_entries(records: List[dict]) -> Dict[str, List[RevenueEntry]]:
    """Financial entries grouped by client id."""
    grouped: Dict[str, List[RevenueEntry]] = {}
    for record in records:
        grouped.setdefault(str(record.get("clienteId", "")), []).append(RevenueEntry.from_record(record))
    return grouped


def save_artifact(artifact: DocumentArtifact, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / artifact.filename
    target.write_bytes(artifact.content)
    return target


def ask_partial(decision) -> bool:
    print(f"\n⚠️ Empresa aberta em {decision.opening_label}: "
          f"{decision.excluded_count} mês(es) fora do período serão excluídos.")
    answer = input("Gerar apenas os meses disponíveis? [s/N] ").strip().lower()
    return answer in ("s", "sim", "y", "yes")


def confirm_partial_periods(subjects: List[Subject], period: PeriodWindow, assume_yes: bool) -> List[Subject]:
    """Subjects to generate; partial periods are confirmed one client at a time."""
    kept = []
    for subject in subjects:
        decision = evaluate_period(subject, period)
        if decision.needs_confirmation and not assume_yes:
            print(f"\n🏢 {subject.display_name}")
            if not ask_partial(decision):
                print(f"⏭️  {subject.display_name}: cancelado")
                continue
        kept.append(subject)
    return kept


def run_batch(args, config: GenerationConfig, subjects: List[Subject], data: dict, signer: Signer,
              report_type: ReportType) -> int:
    pipeline = BatchPipeline(config)

    if report_type is ReportType.PAYSLIP:
        if args.competence:
            month = MonthKey.from_key(args.competence)
        else:
            month = resolve_closed_months(1, args.as_of).first
        period = PeriodWindow.single(month)
        records = data.get("pro_labores")
        if records:
            per_subject = {str(r.get("clienteId", "")): ProLaboreValues.from_record(r) for r in records
                           if r.get("mesAno", month.competence) == month.competence}
        else:
            per_subject = build_pro_labore_records(subjects, config.minimum_wage, config.inss_rate)
    else:
        period = resolve_closed_months(args.months, args.as_of)
        per_subject = group_entries(data.get("financeiro", []))

    if report_type is ReportType.REVENUE:
        subjects = confirm_partial_periods(subjects, period, args.yes)
        if not subjects:
            print("\n⏭️  Nothing to generate")
            return 0

    def progress(done: int, total: int):
        print(f"  [{done}/{total}]", end="\r", flush=True)

    result = pipeline.generate_batch(subjects, period, per_subject, report_type, signer,
                                     issued_on=args.as_of, progress=progress)
    print()
    for artifact in result.artifacts:
        print(f"📄 {save_artifact(artifact, args.output_dir)}")
    for failure in result.failed:
        print(f"❌ {failure.subject.display_name}: {failure.reason}")

    print(f"\n📈 {result.summary()}")
    return 0 if result.succeeded_count > 0 else 1


def main():
    """Main entry point.

    Returns:
        int: Exit code (0 for success, 1 for failure).
    """
    parser = argparse.ArgumentParser(
        description="MEI document generation - payslips and monthly revenue reports"
    )
    parser.add_argument(
        '--report',
        choices=[t.value for t in ReportType],
        default=ReportType.PAYSLIP.value,
        help='Document kind: holerite (batch, merged), faturamento (one file per client) '
             'or faturamento_lote (batch, merged)'
    )
    parser.add_argument('--input', type=Path, required=True, help='JSON export of the record store')
    parser.add_argument('--output-dir', type=Path, default=Path("outputs"), help='Where PDFs are written')
    parser.add_argument('--months', type=int, choices=[6, 12], default=6,
                        help='Closed months in revenue reports')
    parser.add_argument('--competence', help='Payslip month, MM/YYYY (defaults to last closed month)')
    parser.add_argument(
        '--as-of',
        type=lambda s: datetime.strptime(s, "%Y-%m-%d").date(),
        help='Reference date YYYY-MM-DD (defaults to today)'
    )
    parser.add_argument('--client', action='append', help='Only these client ids or CNPJs')
    parser.add_argument('--templates-dir', type=Path, help='Directory with fillable templates')
    parser.add_argument('--env-file', type=Path, help='Optional .env file')
    parser.add_argument('--parallel', action='store_true', help='Generate documents concurrently')
    parser.add_argument('--yes', action='store_true', help='Accept partial periods without asking')

    args = parser.parse_args()

    config = GenerationConfig.from_env(args.env_file)
    if args.templates_dir:
        config.templates_dir = args.templates_dir
    if args.parallel:
        config.enable_parallel_processing = True
    setup_logging(config.log_level)

    if not args.input.is_file():
        print(f"❌ Input not found: {args.input}")
        return 1

    data = load_export(args.input)
    subjects = [Subject.from_record(r) for r in data.get("clientes", [])]
    if args.client:
        wanted = set(args.client)
        subjects = [s for s in subjects if s.id in wanted or s.tax_id in wanted]
    subjects = sort_subjects([s for s in subjects if s.is_active])
    if not subjects:
        print("\n❌ No active clients to process")
        return 1

    signer = Signer.from_record(data["contador"]) if data.get("contador") else None
    report_type = ReportType(args.report)

    print("=" * 60)
    print("MEI DOCUMENT GENERATION")
    print(f"Report: {report_type.value} | Clients: {len(subjects)}")
    print("=" * 60)

    return run_batch(args, config, subjects, data, signer, report_type)


if __name__ == "__main__":
    sys.exit(main())
