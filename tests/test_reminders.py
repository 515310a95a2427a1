from datetime import date
from decimal import Decimal

import pytest

from rentflow.core.errors import RecordValidationError
from rentflow.core.reminders import clean_number, format_amount, format_date, render_template


@pytest.mark.parametrize(
    "pattern,expected",
    [
        ("dd MMM, yyyy", "05 Mar, 2024"),
        ("MM/dd/yyyy", "03/05/2024"),
        ("MMMM yyyy", "March 2024"),
        ("dd.MM.yy", "05.03.24"),
    ],
)
def test_format_date_patterns(pattern, expected):
    assert format_date(date(2024, 3, 5), pattern) == expected


def test_format_amount():
    assert format_amount(Decimal("12000")) == "12,000"
    assert format_amount(Decimal("1500.5")) == "1,500.50"


def test_unknown_placeholders_are_left_alone():
    text = render_template("Hi {tenantName}, see {unknown}", {"tenantName": "Alice"})
    assert text == "Hi Alice, see {unknown}"


def test_clean_number_strips_formatting():
    assert clean_number("+880 1712-345678") == "8801712345678"


def test_clean_number_requires_digits():
    with pytest.raises(RecordValidationError) as exc:
        clean_number("  ")
    assert exc.value.field == "phone"
