"""
Tests for pro-labore computation and revenue aggregation.
"""

from decimal import Decimal

from mei_docs.models import MonthKey, PeriodWindow, RevenueEntry, Subject
from mei_docs.processors.aggregation import (
    aggregate_monthly_revenue,
    build_pro_labore_records,
    compute_pro_labore,
    payslip_lines,
    sort_subjects,
)


def test_pro_labore_defaults():
    values = compute_pro_labore()
    assert values.base == Decimal("1412.00")
    assert values.inss_amount == Decimal("155.32")
    assert values.net_amount == Decimal("1256.68")


def test_pro_labore_custom_rate():
    values = compute_pro_labore("1518", 11)
    assert values.inss_amount == Decimal("166.98")
    assert values.net_amount == Decimal("1351.02")


def test_records_only_for_active_subjects(subject_factory):
    active = subject_factory()
    inactive = subject_factory(status="Inativo")

    records = build_pro_labore_records([active, inactive])

    assert list(records) == [active.key]
    assert records[active.key].net_amount == Decimal("1256.68")


def test_payslip_lines():
    lines = payslip_lines(compute_pro_labore())
    assert [line.label for line in lines] == ["PRÓ-LABORE", "INSS CONTRIBUINTE INDIVIDUAL"]
    assert lines[1].amount == Decimal("155.32")


def test_monthly_revenue_sums_per_month():
    window = PeriodWindow((MonthKey(2025, 11), MonthKey(2025, 12), MonthKey(2026, 1)))
    entries = [
        RevenueEntry("2025-12-03", "100.25"),
        RevenueEntry("2025-12-20", 50.25),
        RevenueEntry("2026-01-15", 1000),
        RevenueEntry("2026-01-16", 999, kind="Despesa"),
        RevenueEntry("2025-10-31", 500),
        RevenueEntry("", 10),
    ]

    lines = aggregate_monthly_revenue(entries, window)

    assert [line.label for line in lines] == ["nov/25", "dez/25", "jan/26"]
    assert [line.amount for line in lines] == [Decimal("0.00"), Decimal("150.50"), Decimal("1000.00")]


def test_revenue_entry_from_record():
    entry = RevenueEntry.from_record({"data": "2026-01-15", "valor": 320.9, "tipo": "Receita"})
    assert entry.month_key == "2026-01"
    assert entry.amount == Decimal("320.9")


def test_sort_subjects_by_trade_name():
    subjects = [
        Subject("", "zeta", "1"),
        Subject("", "Álamo", "2"),
        Subject("", "beta", "3"),
        Subject("Alfa Ltda", "", "4"),
    ]
    assert [s.tax_id for s in sort_subjects(subjects)] == ["2", "4", "3", "1"]
