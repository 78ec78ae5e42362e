"""
Currency and calendar formatting in the pt-BR conventions used on every
generated document.
"""

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from dateutil import parser as date_parser

Number = Union[int, float, Decimal, str]

MONTH_ABBREVIATIONS = (
    "jan", "fev", "mar", "abr", "mai", "jun",
    "jul", "ago", "set", "out", "nov", "dez",
)

MONTH_NAMES = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

CENTS = Decimal("0.01")
TABLE_ZERO = "-"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def to_decimal(value: Any) -> Decimal:
    """Convert a numeric value to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e


def to_cents(value: Any) -> Decimal:
    """Round a value to two decimal places, half up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(value: Number) -> str:
    """Format an amount as 1.234,50."""
    amount = to_cents(value)
    text = f"{abs(amount):,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    if amount < 0:
        return f"-{text}"
    return text


def format_brl(value: Number) -> str:
    """Format an amount as R$ 1.234,50."""
    return f"R$ {format_amount(value)}"


def format_table_amount(value: Number) -> str:
    """Table cell text: a dash for exactly zero, otherwise the amount."""
    if to_decimal(value) == 0:
        return TABLE_ZERO
    return format_amount(value)


def format_percent(value: Number) -> str:
    return f"{format_amount(value)}%"


def month_label(year: int, month: int) -> str:
    """Short month label, e.g. nov/25."""
    return f"{MONTH_ABBREVIATIONS[month - 1]}/{year % 100:02d}"


def month_year_long(value: date) -> str:
    """Long month label, e.g. janeiro/2026."""
    return f"{MONTH_NAMES[value.month - 1]}/{value.year}"


def format_long_date(value: date) -> str:
    """Date as written on signature lines, e.g. 17 de outubro de 2026."""
    return f"{value.day:02d} de {MONTH_NAMES[value.month - 1]} de {value.year}"


def competence_label(year: int, month: int) -> str:
    """Payslip reference period, e.g. 10/2026."""
    return f"{month:02d}/{year}"


def format_cnpj(value: str) -> str:
    """
    Format a CNPJ as XX.XXX.XXX/XXXX-XX.

    Accepts bare digits or an already formatted value. Incomplete input is
    returned unchanged.
    """
    digits = re.sub(r"\D", "", value or "")[:14]
    if len(digits) < 14:
        return value
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def parse_registration_date(value: Any) -> Optional[date]:
    """
    Parse a registration (opening) date.

    Accepts date objects, DD/MM/YYYY and ISO strings. Returns None when the
    value cannot be understood.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) < 8:
        return None

    text = value.strip()
    for fmt in ("%d/%m/%Y", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def fold_accents(text: str) -> str:
    """Strip diacritics, e.g. São José -> Sao Jose."""
    return unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")


def safe_filename(*parts: str, extension: str = "pdf") -> str:
    """
    Build a file name from parts.

    Accents are folded to ASCII first, then every run of characters outside
    [A-Za-z0-9] becomes a single underscore.
    """
    joined = "_".join(str(part) for part in parts if part)
    stem = _NON_ALNUM.sub("_", fold_accents(joined)).strip("_") or "documento"
    return f"{stem}.{extension}" if extension else stem
