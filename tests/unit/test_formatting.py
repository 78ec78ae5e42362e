"""
Tests for pt-BR currency, calendar and file-name formatting.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from mei_docs.utils.formatting import (
    competence_label,
    format_amount,
    format_brl,
    format_cnpj,
    format_long_date,
    format_percent,
    format_table_amount,
    month_label,
    month_year_long,
    parse_registration_date,
    safe_filename,
    to_cents,
)


@pytest.mark.parametrize("value, expected", [
    (1234.5, "1.234,50"),
    (Decimal("0.1"), "0,10"),
    (1412, "1.412,00"),
    ("1256.68", "1.256,68"),
    (Decimal("1234567.891"), "1.234.567,89"),
])
def test_format_amount(value, expected):
    assert format_amount(value) == expected


def test_rounding_is_half_up():
    assert to_cents("0.005") == Decimal("0.01")
    assert format_amount(Decimal("155.325")) == "155,33"


def test_format_amount_negative():
    assert format_amount(-10.5) == "-10,50"


def test_currency_label_form():
    assert format_brl(1412) == "R$ 1.412,00"


def test_zero_table_cell_is_a_dash():
    assert format_table_amount(0) == "-"
    assert format_table_amount(Decimal("0.00")) == "-"
    assert format_table_amount(150.5) == "150,50"
    # not zero once rounded for display, still not a dash
    assert format_table_amount(Decimal("0.01")) == "0,01"


def test_format_percent():
    assert format_percent(11) == "11,00%"


@pytest.mark.parametrize("year, month, expected", [
    (2025, 11, "nov/25"),
    (2025, 12, "dez/25"),
    (2026, 1, "jan/26"),
    (2009, 2, "fev/09"),
])
def test_month_label(year, month, expected):
    assert month_label(year, month) == expected


def test_long_dates():
    assert month_year_long(date(2026, 1, 10)) == "janeiro/2026"
    assert format_long_date(date(2026, 10, 17)) == "17 de outubro de 2026"
    assert format_long_date(date(2026, 3, 5)) == "05 de março de 2026"


def test_competence_label():
    assert competence_label(2026, 10) == "10/2026"
    assert competence_label(2026, 1) == "01/2026"


def test_format_cnpj():
    assert format_cnpj("12345678000195") == "12.345.678/0001-95"
    assert format_cnpj("12.345.678/0001-95") == "12.345.678/0001-95"
    assert format_cnpj("1234") == "1234"
    assert format_cnpj("") == ""


@pytest.mark.parametrize("value, expected", [
    ("10/01/2026", date(2026, 1, 10)),
    ("2026-01-10", date(2026, 1, 10)),
    (date(2026, 1, 10), date(2026, 1, 10)),
    (datetime(2026, 1, 10, 15, 30), date(2026, 1, 10)),
    ("", None),
    (None, None),
    ("31/02/2026", None),
    ("not a date at all", None),
])
def test_parse_registration_date(value, expected):
    assert parse_registration_date(value) == expected


def test_safe_filename_collapses_runs():
    assert safe_filename("Holerite", "Padaria São José", "10/2026") == "Holerite_Padaria_Sao_Jose_10_2026.pdf"
    assert safe_filename("Faturamento", "A  &  B", "nov/25-a-jan/26") == "Faturamento_A_B_nov_25_a_jan_26.pdf"


def test_safe_filename_without_extension():
    assert safe_filename("Lote", "", "x", extension="") == "Lote_x"
