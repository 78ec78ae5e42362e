"""
Summation of already-fetched records into document lines.

The record store does the querying; this module only aggregates what it is
given.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence, Tuple

from ..models import (
    MonetaryLine,
    MonthKey,
    PeriodWindow,
    ProLaboreValues,
    RevenueEntry,
    Subject,
)
from ..utils.formatting import fold_accents, to_cents, to_decimal

logger = logging.getLogger(__name__)

REVENUE_KIND = "Receita"
DEFAULT_MINIMUM_WAGE = Decimal("1412.00")
DEFAULT_INSS_RATE = Decimal("11")


def compute_pro_labore(base=DEFAULT_MINIMUM_WAGE, inss_rate=DEFAULT_INSS_RATE) -> ProLaboreValues:
    """INSS withheld at inss_rate percent of base; net is what remains."""
    base = to_cents(base)
    rate = to_decimal(inss_rate)
    inss = (base * rate / Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return ProLaboreValues(
        base=base,
        inss_rate=rate,
        inss_amount=inss,
        net_amount=base - inss,
    )


def build_pro_labore_records(
    subjects: Iterable[Subject],
    base=DEFAULT_MINIMUM_WAGE,
    inss_rate=DEFAULT_INSS_RATE,
) -> Dict[str, ProLaboreValues]:
    """One pro-labore per active subject, keyed by subject key."""
    values = compute_pro_labore(base, inss_rate)
    records = {}
    for subject in subjects:
        if not subject.is_active:
            logger.debug(f"Skipping inactive subject {subject.trade_name} ({subject.status})")
            continue
        records[subject.key] = values
    return records


def payslip_lines(values: ProLaboreValues) -> Tuple[MonetaryLine, ...]:
    """Earnings and deduction lines of a pro-labore payslip."""
    return (
        MonetaryLine("PRÓ-LABORE", values.base),
        MonetaryLine("INSS CONTRIBUINTE INDIVIDUAL", values.inss_amount),
    )


def aggregate_monthly_revenue(
    entries: Iterable[RevenueEntry],
    window: PeriodWindow,
) -> Tuple[MonetaryLine, ...]:
    """
    Sum revenue entries per window month.

    Entries of other kinds or outside the window are ignored. Months with no
    entries yield a zero line.

    Returns:
        One line per month, labelled with the month label, in window order.
    """
    totals: Dict[str, Decimal] = {month.key: Decimal("0") for month in window}

    for entry in entries:
        if entry.kind != REVENUE_KIND:
            continue
        key = entry.month_key
        if key in totals:
            totals[key] += entry.amount

    return tuple(MonetaryLine(month.label, totals[month.key]) for month in window)


def sort_subjects(subjects: Sequence[Subject]) -> List[Subject]:
    """Canonical batch order: trade name, ignoring case and accents."""
    return sorted(subjects, key=lambda s: fold_accents(s.trade_name or s.legal_name).casefold())


def month_from_competence(competence: str) -> MonthKey:
    """Parse MM/YYYY or YYYY-MM."""
    return MonthKey.from_key(competence)
