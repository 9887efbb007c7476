"""Tests for custom date validation."""

from datetime import date, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.services.custom_dates import (
    CustomDateError,
    build_custom_date,
    custom_date_start,
    validate_custom_date,
)


class TestValidateCustomDate:
    @given(st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 12, 31)))
    def test_accepts_any_calendar_date_in_range(self, value):
        assert validate_custom_date(value.day, value.month, value.year) == value

    @pytest.mark.parametrize(
        "day,month,year",
        [
            (None, 1, 2024),
            (1, None, 2024),
            (1, 1, None),
            (0, 1, 2024),
            (32, 1, 2024),
            (1, 13, 2024),
            (1, 1, 1999),
            (1, 1, 2101),
            (31, 2, 2024),
            (29, 2, 2023),
        ],
    )
    def test_rejects_invalid_input(self, day, month, year):
        with pytest.raises(CustomDateError):
            validate_custom_date(day, month, year)


class TestBuildCustomDate:
    def test_key_and_display(self):
        custom_date = build_custom_date(5, 3, 2024)

        assert custom_date.key == "2024-03-05"
        assert custom_date.display == "5 March 2024"
        assert custom_date.data == {}

    def test_start_is_local_midnight(self):
        custom_date = build_custom_date(5, 3, 2024)
        assert custom_date_start(custom_date) == int(datetime(2024, 3, 5).timestamp())
