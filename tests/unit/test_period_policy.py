"""
Tests for closed-month windows and registration-date truncation.
"""

from datetime import date

import pytest

from mei_docs.models import MonthKey, PeriodWindow, Subject
from mei_docs.processors.period_policy import (
    evaluate_period,
    resolve_closed_months,
    truncate_for_registration,
)


def window(*keys):
    return PeriodWindow(tuple(MonthKey.from_key(k) for k in keys))


def test_three_closed_months():
    result = resolve_closed_months(3, date(2026, 2, 15))
    assert result.keys == ["2025-11", "2025-12", "2026-01"]
    assert result.labels == ["nov/25", "dez/25", "jan/26"]


def test_current_month_excluded_on_last_day():
    result = resolve_closed_months(1, date(2026, 3, 31))
    assert result.keys == ["2026-02"]


@pytest.mark.parametrize("count", [1, 2, 6, 12, 13, 25])
@pytest.mark.parametrize("as_of", [date(2026, 1, 1), date(2024, 3, 31), date(2025, 12, 15)])
def test_closed_months_properties(count, as_of):
    result = resolve_closed_months(count, as_of)
    months = list(result)

    assert len(months) == count
    assert all(a < b for a, b in zip(months, months[1:]))
    assert MonthKey.from_date(as_of) not in months

    previous = MonthKey(as_of.year - 1, 12) if as_of.month == 1 else MonthKey(as_of.year, as_of.month - 1)
    assert months[-1] == previous


def test_count_must_be_positive():
    with pytest.raises(ValueError):
        resolve_closed_months(0, date(2026, 2, 15))


def test_registered_mid_window_truncates():
    effective, excluded = truncate_for_registration(window("2025-11", "2025-12", "2026-01"), "2026-01-10")
    assert effective.keys == ["2026-01"]
    assert excluded == 2


@pytest.mark.parametrize("registration", ["2025-11-01", "01/11/2025", "15/03/2019", date(2020, 5, 5)])
def test_registered_before_window_is_unchanged(registration):
    requested = window("2025-11", "2025-12", "2026-01")
    effective, excluded = truncate_for_registration(requested, registration)
    assert effective == requested
    assert excluded == 0


def test_registered_after_window_empties_it():
    requested = window("2025-11", "2025-12", "2026-01")
    effective, excluded = truncate_for_registration(requested, "05/02/2026")
    assert len(effective) == 0
    assert excluded == 3


@pytest.mark.parametrize("registration", [None, "", "sem data", "99/99/9999"])
def test_unparseable_registration_fails_open(registration):
    requested = window("2025-11", "2025-12")
    assert truncate_for_registration(requested, registration) == (requested, 0)


def test_evaluate_period_decision():
    subject = Subject("Nova Empresa Ltda", "Nova", "12345678000195", registration_date="10/01/2026")
    decision = evaluate_period(subject, resolve_closed_months(3, date(2026, 2, 15)))

    assert decision.needs_confirmation
    assert not decision.is_empty
    assert decision.excluded_count == 2
    assert decision.effective.keys == ["2026-01"]
    assert decision.opening_label == "janeiro/2026"


def test_evaluate_period_without_truncation():
    subject = Subject("Antiga Ltda", "Antiga", "12345678000195", registration_date="01/01/2010")
    decision = evaluate_period(subject, resolve_closed_months(3, date(2026, 2, 15)))
    assert not decision.needs_confirmation
    assert decision.effective == decision.requested


def test_window_must_increase():
    with pytest.raises(ValueError):
        window("2026-01", "2025-12")
