"""Tests for the performance calculator."""

from datetime import datetime

import pytest
from conftest import DAY, NOW, daily_series
from hypothesis import given
from hypothesis import strategies as st

from src.models.catalog import PERIODS, WINDOWS
from src.models.market_data import PerformanceWindow, PricePoint, PriceSeries
from src.services.formatting import format_percentage
from src.services.performance_calculator import (
    NEAREST_PRICE_TOLERANCE_SECONDS,
    PerformanceCalculator,
    custom_performance,
    find_nearest_price,
    latest_price,
    percent_change,
    start_of_year,
    window_target,
)


def series_of(*points, symbol="TEST"):
    return PriceSeries(symbol=symbol, points=[PricePoint(t, p) for t, p in points])


@st.composite
def series_and_target(draw):
    """Ascending series with optional gaps, and a target time near it."""
    timestamps = sorted(
        draw(st.lists(st.integers(min_value=0, max_value=60 * DAY), max_size=30))
    )
    prices = [
        draw(st.one_of(st.none(), st.floats(min_value=0.01, max_value=10000, allow_nan=False)))
        for _ in timestamps
    ]
    target = draw(st.integers(min_value=-10 * DAY, max_value=70 * DAY))
    return series_of(*zip(timestamps, prices)), target


class TestFindNearestPrice:
    """Tests for the nearest-price lookup."""

    @given(series_and_target())
    def test_nearest_price_minimizes_distance(self, data):
        """
        For any series and target, the match is the first priced point with the
        smallest distance, or None when that distance reaches the tolerance.
        """
        series, target = data
        candidates = [
            (abs(point.timestamp - target), index, point)
            for index, point in enumerate(series.points)
            if point.price is not None
        ]

        result = find_nearest_price(series, target)

        if not candidates:
            assert result is None
            return
        distance, _, expected = min(candidates, key=lambda c: (c[0], c[1]))
        if distance >= NEAREST_PRICE_TOLERANCE_SECONDS:
            assert result is None
        else:
            assert result is expected

    def test_skips_absent_prices(self):
        series = series_of((1000, None), (1000 + DAY, 50.0))
        assert find_nearest_price(series, 1000).price == 50.0

    def test_earlier_point_wins_tie(self):
        series = series_of((90, 1.0), (110, 2.0))
        assert find_nearest_price(series, 100).price == 1.0

    def test_distance_equal_to_tolerance_is_rejected(self):
        series = series_of((0, 10.0))
        assert find_nearest_price(series, NEAREST_PRICE_TOLERANCE_SECONDS) is None

    def test_distance_just_inside_tolerance_is_accepted(self):
        series = series_of((0, 10.0))
        assert find_nearest_price(series, NEAREST_PRICE_TOLERANCE_SECONDS - 1).price == 10.0

    def test_empty_series(self):
        assert find_nearest_price(series_of(), 0) is None


class TestPercentChange:
    def test_gain_formats_exactly(self):
        assert format_percentage(percent_change(100.0, 110.0)) == "+10.00%"

    def test_loss_formats_exactly(self):
        assert format_percentage(percent_change(100.0, 90.0)) == "-10.00%"

    def test_value(self):
        assert percent_change(100.0, 110.0) == pytest.approx(10.0)

    @pytest.mark.parametrize("old,new", [(None, 1.0), (1.0, None), (0.0, 5.0)])
    def test_unavailable_inputs(self, old, new):
        assert percent_change(old, new) is None


class TestWindowTargets:
    def test_fixed_lookback(self):
        window = PerformanceWindow("1w", "1 Week", 7)
        assert window_target(window, NOW) == NOW - 7 * DAY

    def test_ytd_is_local_midnight_january_first(self):
        expected = int(datetime(2024, 1, 1).timestamp())
        assert start_of_year(NOW) == expected
        assert window_target(PerformanceWindow("ytd", "YTD"), NOW) == expected


class TestPerformanceCalculator:
    """Tests for PerformanceCalculator.calculate."""

    def test_one_day_change(self):
        series = daily_series("RHM", [100.0, 110.0])
        result = PerformanceCalculator().calculate(series, now=NOW)

        assert result.values["1d"] == pytest.approx(10.0)
        # The oldest point is 6 days away from the 1 week target
        assert result.values["1w"] is None
        assert result.error is False

    def test_latest_price_is_last_non_absent(self):
        series = daily_series("RHM", [100.0, 120.0, None])
        assert latest_price(series) == 120.0

    def test_full_year_of_data(self):
        closes = [100.0] * 400 + [150.0]
        series = daily_series("BAES.L", closes)
        result = PerformanceCalculator().calculate(series, now=NOW)

        for period in PERIODS:
            assert result.values[period] == pytest.approx(50.0)

    @given(
        closes=st.lists(
            st.one_of(st.none(), st.floats(min_value=0.01, max_value=1000, allow_nan=False)),
            max_size=40,
        )
    )
    def test_one_entry_per_window(self, closes):
        """For any series, the result has exactly one entry per configured window."""
        result = PerformanceCalculator().calculate(daily_series("AIR.PA", closes), now=NOW)
        assert list(result.values) == [window.name for window in WINDOWS]

    def test_empty_series_is_all_unavailable(self):
        result = PerformanceCalculator().calculate(series_of(), now=NOW)
        assert all(value is None for value in result.values.values())

    def test_all_absent_series_is_all_unavailable(self):
        series = daily_series("AIR.PA", [None, None, None])
        result = PerformanceCalculator().calculate(series, now=NOW)
        assert all(value is None for value in result.values.values())

    def test_single_point_within_tolerance_of_target(self):
        series = series_of((NOW - DAY, 100.0))
        result = PerformanceCalculator().calculate(series, now=NOW)

        assert result.values["1d"] == pytest.approx(0.0)
        assert result.values["12m"] is None

    def test_failed_result_has_every_window(self):
        result = PerformanceCalculator().failed("RR.L")
        assert result.error is True
        assert result.values == {name: None for name in PERIODS}


class TestCustomPerformance:
    def test_first_to_last_valid_price(self):
        series = series_of((1 * DAY, 50.0), (2 * DAY, None), (3 * DAY, 60.0))
        assert format_percentage(custom_performance(series)) == "+20.00%"

    def test_fewer_than_two_usable_points(self):
        assert custom_performance(series_of((DAY, 50.0), (2 * DAY, None))) is None

    def test_missing_series(self):
        assert custom_performance(None) is None
