"""Static catalog of tracked symbols and performance windows."""

from src.models.market_data import PerformanceWindow, Symbol

STOCKS: tuple[Symbol, ...] = (
    Symbol("BAES.L", "BAE Systems (London)"),
    Symbol("RHM", "Rheinmetall (Germany)"),
    Symbol("LDOF.MI", "Leonardo (Milan)"),
    Symbol("TCFP.PA", "Thales (Paris)"),
    Symbol("RR.L", "Rolls-Royce (London)"),
    Symbol("SAABb.ST", "SAAB (Stockholm)"),
    Symbol("AIR.PA", "Airbus (Paris)"),
    Symbol("SAF.PA", "Safran (Paris)"),
    Symbol("MTXGn.DE", "MTU Aero Engines (Germany)"),
    Symbol("AM.PA", "Dassault Aviation (Paris)"),
)

WINDOWS: tuple[PerformanceWindow, ...] = (
    PerformanceWindow("1d", "1 Day", 1),
    PerformanceWindow("1w", "1 Week", 7),
    PerformanceWindow("3m", "3 Month", 90),
    PerformanceWindow("12m", "12 Month", 365),
    PerformanceWindow("ytd", "YTD"),
)

PERIODS: list[str] = [window.name for window in WINDOWS]
PERIOD_LABELS: dict[str, str] = {window.name: window.label for window in WINDOWS}

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def get_symbol(ticker: str) -> Symbol | None:
    """Look up a catalog entry by ticker."""
    for stock in STOCKS:
        if stock.ticker == ticker:
            return stock
    return None


def get_month_name(month: int) -> str:
    """Month name for a 1-based month number."""
    return MONTH_NAMES[month - 1]
