from datetime import date

import pytest

from src.timeclock.timeclock.common.validators import require_iso_date, require_non_empty
from src.timeclock.timeclock.core.exceptions import ValidationError


def test_require_iso_date_parses_and_trims():
    assert require_iso_date(" 2024-01-10 ", "date") == date(2024, 1, 10)


@pytest.mark.parametrize("value", [None, ""])
def test_require_iso_date_missing(value):
    with pytest.raises(ValidationError, match="missing date"):
        require_iso_date(value, "date")


@pytest.mark.parametrize("value", [20240110, ["2024-01-10"], "10/01/2024"])
def test_require_iso_date_rejects_non_iso_values(value):
    with pytest.raises(ValidationError, match="invalid date"):
        require_iso_date(value, "date")


def test_require_non_empty_rejects_blank_and_non_string():
    assert require_non_empty("  Alex ", "name") == "Alex"
    with pytest.raises(ValidationError, match="missing name"):
        require_non_empty("   ", "name")
    with pytest.raises(ValidationError, match="invalid name"):
        require_non_empty(42, "name")
