"""Validation and construction of user-added custom start dates."""

from datetime import date, datetime

from src.models.catalog import get_month_name
from src.models.market_data import CustomDate

MIN_YEAR = 2000
MAX_YEAR = 2100


class CustomDateError(ValueError):
    """Raised when a custom date is malformed or already tracked."""


def validate_custom_date(day: int | None, month: int | None, year: int | None) -> date:
    """
    Validate day/month/year input.

    Args:
        day: Day of month, 1-31
        month: Month, 1-12
        year: Year, 2000-2100

    Returns:
        The corresponding date

    Raises:
        CustomDateError if any part is missing, out of range or the
        combination is not a calendar date
    """
    if not day or not month or not year:
        raise CustomDateError("Please enter a valid date (Day, Month, Year)")

    if not (1 <= day <= 31) or not (1 <= month <= 12) or not (MIN_YEAR <= year <= MAX_YEAR):
        raise CustomDateError("Please enter a valid date")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise CustomDateError(f"Please enter a valid date: {e}") from e


def build_custom_date(day: int | None, month: int | None, year: int | None) -> CustomDate:
    """Validate the input and build an empty CustomDate for it."""
    start = validate_custom_date(day, month, year)
    return CustomDate(
        key=start.isoformat(),
        display=f"{start.day} {get_month_name(start.month)} {start.year}",
    )


def custom_date_start(custom_date: CustomDate) -> int:
    """Unix seconds of local midnight at the start of the custom date."""
    start = date.fromisoformat(custom_date.key)
    return int(datetime(start.year, start.month, start.day).timestamp())
