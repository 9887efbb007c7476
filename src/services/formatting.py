"""Display formatting for percentage values and manual entries."""

import re

UNAVAILABLE_MARKER = "--"
ERROR_MARKER = "Error"

_LEADING_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def format_percentage(value: float | None) -> str:
    """Signed two-decimal percentage, or the unavailable marker for None."""
    if value is None:
        return UNAVAILABLE_MARKER
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"


def _parse_leading_float(text: str) -> float | None:
    match = _LEADING_FLOAT.match(text.strip())
    if not match:
        return None
    return float(match.group(0))


def parse_percentage(text: str | None) -> float | None:
    """Numeric value of a display string; None for markers and non-numeric text."""
    if not text:
        return None
    return _parse_leading_float(text.replace("%", "", 1))


def normalize_percentage_input(raw: str) -> str:
    """
    Normalize a manually typed value.

    Empty input and a lone "-" are kept as typed. Numeric input becomes a
    signed two-decimal percentage; anything else is returned trimmed.
    """
    value = raw.strip()
    if value in ("", "-"):
        return value
    number = _parse_leading_float(value.replace("%", "", 1))
    if number is None:
        return value
    return format_percentage(number)


def color_class(text: str | None) -> str:
    """CSS class for a display value: positive, negative or empty."""
    number = parse_percentage(text)
    if number is None:
        return ""
    if number > 0:
        return "positive"
    if number < 0:
        return "negative"
    return ""
