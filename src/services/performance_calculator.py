"""Performance calculator deriving period returns from a price series."""

import time
from collections.abc import Iterable
from datetime import datetime

from src.models.catalog import WINDOWS
from src.models.market_data import PerformanceResult, PerformanceWindow, PricePoint, PriceSeries
from src.utils.logger import StructuredLogger

SECONDS_PER_DAY = 86400
NEAREST_PRICE_TOLERANCE_SECONDS = 5 * SECONDS_PER_DAY


def start_of_year(now: float) -> int:
    """Unix seconds of local midnight on January 1 of the year containing ``now``."""
    year = datetime.fromtimestamp(now).year
    return int(datetime(year, 1, 1).timestamp())


def window_target(window: PerformanceWindow, now: float) -> int:
    """Timestamp the window compares the latest price against."""
    if window.days is None:
        return start_of_year(now)
    return int(now - window.days * SECONDS_PER_DAY)


def find_nearest_price(series: PriceSeries, target: float) -> PricePoint | None:
    """
    Find the priced point closest to ``target``.

    Points without a price are skipped. On equal distance the earlier point
    wins. The match is rejected unless it lies strictly within the tolerance.
    """
    best: PricePoint | None = None
    best_distance: float | None = None
    for point in series.points:
        if point.price is None:
            continue
        distance = abs(point.timestamp - target)
        if best_distance is None or distance < best_distance:
            best = point
            best_distance = distance

    if best is None or best_distance >= NEAREST_PRICE_TOLERANCE_SECONDS:
        return None
    return best


def latest_price(series: PriceSeries) -> float | None:
    """Last non-absent close of the series."""
    for point in reversed(series.points):
        if point.price is not None:
            return point.price
    return None


def percent_change(old: float | None, new: float | None) -> float | None:
    """Percentage change from ``old`` to ``new``; None when it cannot be computed."""
    if old is None or new is None or old == 0:
        return None
    return (new - old) / old * 100


def custom_performance(series: PriceSeries | None) -> float | None:
    """
    Change between the first and last priced points of the series.

    Returns None when the series has fewer than two priced points.
    """
    if series is None:
        return None
    valid = series.valid_points()
    if len(valid) < 2:
        return None
    return percent_change(valid[0].price, valid[-1].price)


class PerformanceCalculator:
    """Maps a price series onto a fixed set of performance windows."""

    def __init__(self, windows: Iterable[PerformanceWindow] = WINDOWS):
        self.windows = tuple(windows)
        self.logger = StructuredLogger("PerformanceCalculator")

    @property
    def window_names(self) -> list[str]:
        return [window.name for window in self.windows]

    def calculate(self, series: PriceSeries, now: float | None = None) -> PerformanceResult:
        """
        Compute one value per window.

        Args:
            series: Historical prices for a symbol
            now: Reference time in Unix seconds (defaults to the current time)

        Returns:
            PerformanceResult with an entry for every window
        """
        now = time.time() if now is None else now
        current = latest_price(series)
        values: dict[str, float | None] = {}

        for window in self.windows:
            match = find_nearest_price(series, window_target(window, now))
            values[window.name] = (
                percent_change(match.price, current) if match is not None else None
            )

        unavailable = [name for name, value in values.items() if value is None]
        if unavailable:
            self.logger.debug(
                f"Windows unavailable for {series.symbol}",
                context={"symbol": series.symbol, "windows": unavailable, "points": len(series)},
            )

        return PerformanceResult(symbol=series.symbol, values=values)

    def failed(self, symbol: str) -> PerformanceResult:
        """Result for a symbol whose fetch failed outright."""
        return PerformanceResult.failed(symbol, self.window_names)
