"""
Closed-month windows and registration-date truncation.

Everything here is pure. Callers decide what to do with a partial window
(an interactive caller asks for confirmation; a batch run just proceeds).
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..models import MonthKey, PeriodWindow, Subject
from ..utils.formatting import month_year_long, parse_registration_date


@dataclass(frozen=True)
class PeriodDecision:
    """Inputs for the partial-period decision of one subject."""
    requested: PeriodWindow
    effective: PeriodWindow
    excluded_count: int
    opened_on: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return len(self.effective) == 0

    @property
    def needs_confirmation(self) -> bool:
        """Some months were dropped but at least one remains."""
        return self.excluded_count > 0 and not self.is_empty

    @property
    def opening_label(self) -> Optional[str]:
        return month_year_long(self.opened_on) if self.opened_on else None


def resolve_closed_months(count: int, as_of: Optional[date] = None) -> PeriodWindow:
    """
    The `count` most recent fully elapsed months before as_of's month.

    The current month is never included, whatever the day of month.

    Returns:
        Window ordered oldest first.
    """
    if count < 1:
        raise ValueError(f"Window size must be at least 1, got {count}")

    as_of = as_of or date.today()
    last_closed = date(as_of.year, as_of.month, 1) - relativedelta(months=1)

    months = [
        MonthKey.from_date(last_closed - relativedelta(months=offset))
        for offset in range(count - 1, -1, -1)
    ]
    return PeriodWindow(tuple(months))


def truncate_for_registration(
    window: PeriodWindow,
    registration_date: Any,
) -> Tuple[PeriodWindow, int]:
    """
    Drop months that start before the subject's registration month.

    Only applies when the registration date is strictly after the start of
    the window's first month. An unparseable date leaves the window as is.

    Returns:
        (effective window, number of months dropped)
    """
    opened = parse_registration_date(registration_date)
    if opened is None or not window:
        return window, 0

    if opened <= window.first.start:
        return window, 0

    opening_month = MonthKey.from_date(opened)
    kept = tuple(month for month in window if month >= opening_month)
    return PeriodWindow(kept), len(window) - len(kept)


def evaluate_period(subject: Subject, window: PeriodWindow) -> PeriodDecision:
    """Apply registration truncation for one subject."""
    effective, excluded = truncate_for_registration(window, subject.registration_date)
    return PeriodDecision(
        requested=window,
        effective=effective,
        excluded_count=excluded,
        opened_on=subject.opened_on(),
    )
