"""Tracker service: batch refresh, custom dates and manual entry."""

import time
from collections.abc import Callable

from src.models.catalog import PERIODS, STOCKS, get_symbol
from src.models.market_data import CustomDate, PerformanceResult, Symbol, TrackerSession
from src.services.custom_dates import CustomDateError, build_custom_date, custom_date_start
from src.services.formatting import (
    ERROR_MARKER,
    format_percentage,
    normalize_percentage_input,
    parse_percentage,
)
from src.services.performance_calculator import PerformanceCalculator, custom_performance
from src.services.price_fetcher import PriceFetcher
from src.services.rate_limiter import RequestThrottle
from src.utils.config import FetchConfig, config
from src.utils.event_store import REFRESH_COMPLETE, EventStore
from src.utils.logger import StructuredLogger
from src.utils.trace_context import traced


class RefreshInProgressError(RuntimeError):
    """Raised when a refresh is requested while another one is running."""


class TrackerService:
    """Drives fetches for the static catalog, one symbol at a time."""

    def __init__(
        self,
        fetcher: PriceFetcher | None = None,
        calculator: PerformanceCalculator | None = None,
        throttle: RequestThrottle | None = None,
        fetch_config: FetchConfig | None = None,
        event_store: EventStore | None = None,
        stocks: tuple[Symbol, ...] = STOCKS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the tracker service.

        Args:
            fetcher: Price fetcher (built from config when omitted)
            calculator: Performance calculator
            throttle: Delay enforced between symbol fetches
            fetch_config: Fetch settings (defaults to the global config)
            event_store: Optional event store for refresh events
            stocks: Symbols to track
            clock: Wall-clock source returning Unix seconds
        """
        self.fetch_config = fetch_config or config.fetch
        self.event_store = event_store
        self.fetcher = fetcher or PriceFetcher(
            fetch_config=self.fetch_config, event_store=event_store
        )
        self.calculator = calculator or PerformanceCalculator()
        self.throttle = throttle or RequestThrottle(self.fetch_config.request_delay_seconds)
        self.stocks = stocks
        self.clock = clock
        self.logger = StructuredLogger("TrackerService")

    def refresh_performance(self, session: TrackerSession) -> dict[str, PerformanceResult]:
        """
        Fetch every symbol and recompute its performance.

        A failed symbol is stored as an error result; the batch continues.

        Args:
            session: Caller-owned state receiving the results

        Returns:
            The session's performance cache

        Raises:
            RefreshInProgressError if the session is already loading
        """
        if session.loading:
            raise RefreshInProgressError("A refresh is already in progress")

        session.loading = True
        failures = 0
        start = time.perf_counter()
        try:
            with traced() as trace_id:
                self.logger.info(
                    "Starting performance refresh",
                    context={"trace_id": trace_id, "symbols": len(self.stocks)},
                )
                for stock in self.stocks:
                    result = self._refresh_symbol(stock)
                    if result.error:
                        failures += 1
                    session.performance[stock.ticker] = result

                duration_ms = (time.perf_counter() - start) * 1000
                self.logger.info(
                    "Finished performance refresh",
                    context={
                        "trace_id": trace_id,
                        "symbols": len(self.stocks),
                        "failed": failures,
                        "duration_ms": round(duration_ms, 1),
                    },
                )
                if self.event_store:
                    self.event_store.add_event(
                        REFRESH_COMPLETE,
                        "*",
                        context={"kind": "performance", "failed": failures},
                        duration_ms=duration_ms,
                        trace_id=trace_id,
                    )
        finally:
            session.loading = False

        return session.performance

    def _refresh_symbol(self, stock: Symbol) -> PerformanceResult:
        self.throttle.wait()
        series = self.fetcher.fetch_series(stock.ticker, range_=self.fetch_config.history_range)
        if series is None:
            return self.calculator.failed(stock.ticker)
        return self.calculator.calculate(series, now=self.clock())

    def add_custom_date(
        self, session: TrackerSession, day: int | None, month: int | None, year: int | None
    ) -> CustomDate:
        """
        Validate and append a custom date.

        Raises:
            CustomDateError if the date is invalid or already added
        """
        custom_date = build_custom_date(day, month, year)
        if session.find_custom_date(custom_date.key) is not None:
            raise CustomDateError("This date has already been added")
        session.custom_dates.append(custom_date)
        self.logger.info("Added custom date", context={"key": custom_date.key})
        return custom_date

    def remove_custom_date(self, session: TrackerSession, key: str) -> bool:
        """Remove a custom date; returns False when it was not tracked."""
        custom_date = session.find_custom_date(key)
        if custom_date is None:
            return False
        session.custom_dates.remove(custom_date)
        self.logger.info("Removed custom date", context={"key": key})
        return True

    def refresh_custom_date(self, session: TrackerSession, key: str) -> CustomDate:
        """
        Compute performance since a custom date for every symbol.

        Each symbol's value is the change between the first and last priced
        points fetched for [start of date, now].

        Raises:
            KeyError if the custom date is not tracked
            RefreshInProgressError if the session is already loading
        """
        custom_date = session.find_custom_date(key)
        if custom_date is None:
            raise KeyError(key)
        if session.loading:
            raise RefreshInProgressError("A refresh is already in progress")

        period1 = custom_date_start(custom_date)
        session.loading = True
        try:
            with traced() as trace_id:
                period2 = int(self.clock())
                self.logger.info(
                    f"Starting custom date refresh for {key}",
                    context={"trace_id": trace_id, "period1": period1, "period2": period2},
                )
                for stock in self.stocks:
                    self.throttle.wait()
                    series = self.fetcher.fetch_series(
                        stock.ticker, period1=period1, period2=period2
                    )
                    if series is None:
                        custom_date.data[stock.ticker] = ERROR_MARKER
                        continue
                    custom_date.data[stock.ticker] = format_percentage(custom_performance(series))
                if self.event_store:
                    self.event_store.add_event(
                        REFRESH_COMPLETE,
                        "*",
                        context={"kind": "custom_date", "key": key},
                        trace_id=trace_id,
                    )
        finally:
            session.loading = False

        return custom_date

    def set_manual_value(
        self, session: TrackerSession, ticker: str, period: str, raw: str
    ) -> PerformanceResult:
        """
        Store a manually entered percentage for one ticker and period.

        Empty input clears the value.

        Raises:
            KeyError for an unknown ticker or period
            ValueError when the input is not a percentage
        """
        if get_symbol(ticker) is None:
            raise KeyError(ticker)
        if period not in PERIODS:
            raise KeyError(period)

        value = _manual_number(raw)
        result = session.performance.get(ticker)
        if result is None or result.error:
            result = PerformanceResult(symbol=ticker, values={name: None for name in PERIODS})
            session.performance[ticker] = result
        result.values[period] = value
        return result

    def set_custom_value(
        self, session: TrackerSession, key: str, ticker: str, raw: str
    ) -> CustomDate:
        """Store a manually entered percentage for a custom date."""
        custom_date = session.find_custom_date(key)
        if custom_date is None:
            raise KeyError(key)
        if get_symbol(ticker) is None:
            raise KeyError(ticker)

        custom_date.data[ticker] = format_percentage(_manual_number(raw))
        return custom_date


def _manual_number(raw: str) -> float | None:
    normalized = normalize_percentage_input(raw)
    if normalized in ("", "-"):
        return None
    value = parse_percentage(normalized)
    if value is None:
        raise ValueError(f"Not a percentage: {raw!r}")
    return value
