"""Price fetcher that walks an ordered list of relay endpoints."""

import time
from typing import Any
from urllib.parse import quote, urlencode

import requests

from src.models.market_data import PriceSeries
from src.services.relay_endpoints import RelayEndpoint
from src.utils.config import FetchConfig, config
from src.utils.event_store import ENDPOINT_FAILED, FETCH_COMPLETE, EventStore
from src.utils.logger import StructuredLogger
from src.utils.trace_context import get_current_trace


class NoChartDataError(ValueError):
    """The provider answered but returned no chart result for the symbol."""


def parse_chart(payload: Any, symbol: str, source: str | None = None) -> PriceSeries:
    """
    Convert a ``v8/finance/chart`` payload into a PriceSeries.

    Args:
        payload: Decoded provider JSON
        symbol: Symbol the request was made for
        source: Name of the endpoint that produced the payload

    Returns:
        PriceSeries with one point per timestamp

    Raises:
        NoChartDataError: chart.result is missing or empty
        ValueError, KeyError, IndexError, TypeError: payload is malformed
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("chart") or {}, dict):
        raise TypeError("chart payload must be an object")
    results = (payload.get("chart") or {}).get("result")
    if not results:
        raise NoChartDataError(f"No chart data for {symbol}")

    result = results[0]
    timestamps = result["timestamp"]
    closes = result["indicators"]["quote"][0]["close"]
    if not isinstance(timestamps, list) or not isinstance(closes, list):
        raise TypeError("timestamp and close must be arrays")

    return PriceSeries.from_arrays(symbol, timestamps, closes, source=source)


class PriceFetcher:
    """Fetches historical close prices, falling back across relay endpoints."""

    def __init__(
        self,
        endpoints: list[RelayEndpoint] | None = None,
        fetch_config: FetchConfig | None = None,
        http: requests.Session | None = None,
        event_store: EventStore | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            endpoints: Ordered relay endpoints (defaults to configured relays)
            fetch_config: Fetch settings (defaults to the global config)
            http: HTTP session to issue requests with
            event_store: Optional store receiving one event per attempt
        """
        self.fetch_config = fetch_config or config.fetch
        self.endpoints = endpoints or [
            RelayEndpoint.from_config(relay) for relay in self.fetch_config.relays
        ]
        self.http = http or requests.Session()
        self.event_store = event_store
        self.logger = StructuredLogger("PriceFetcher")

    def build_target_url(
        self,
        symbol: str,
        range_: str | None = None,
        period1: int | None = None,
        period2: int | None = None,
        interval: str | None = None,
    ) -> str:
        """
        Build the provider URL for a symbol.

        Either ``range_`` or both ``period1`` and ``period2`` must be given.
        """
        params: dict[str, Any] = {"interval": interval or self.fetch_config.history_interval}
        if period1 is not None and period2 is not None:
            params["period1"] = int(period1)
            params["period2"] = int(period2)
        elif range_:
            params["range"] = range_
        else:
            raise ValueError("Either range_ or period1/period2 must be provided")

        base = self.fetch_config.quote_api_url.rstrip("/")
        return f"{base}/{quote(symbol, safe='')}?{urlencode(params)}"

    def fetch_series(
        self,
        symbol: str,
        range_: str | None = None,
        period1: int | None = None,
        period2: int | None = None,
        interval: str | None = None,
    ) -> PriceSeries | None:
        """
        Fetch a price series, trying each endpoint in order.

        Every call starts again from the first endpoint.

        Args:
            symbol: Ticker to fetch
            range_: Coarse range token such as "1y"
            period1: Start of an explicit range in Unix seconds
            period2: End of an explicit range in Unix seconds
            interval: Bar interval (defaults to HISTORY_INTERVAL)

        Returns:
            The first well-formed series, or None once every endpoint failed
        """
        target_url = self.build_target_url(symbol, range_, period1, period2, interval)
        trace_id = get_current_trace()
        start = time.perf_counter()

        for endpoint in self.endpoints:
            try:
                series = self._fetch_from(endpoint, target_url, symbol)
            except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
                self.logger.warning(
                    f"Endpoint {endpoint.name} failed for {symbol}",
                    context={
                        "trace_id": trace_id,
                        "symbol": symbol,
                        "endpoint": endpoint.name,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                self._record(
                    ENDPOINT_FAILED,
                    symbol,
                    {"endpoint": endpoint.name, "error_type": type(e).__name__},
                    trace_id=trace_id,
                )
                continue

            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.info(
                f"Fetched {len(series)} points for {symbol}",
                context={
                    "trace_id": trace_id,
                    "symbol": symbol,
                    "endpoint": endpoint.name,
                    "points": len(series),
                    "result": "success",
                },
            )
            self._record(
                FETCH_COMPLETE,
                symbol,
                {"status": "success", "endpoint": endpoint.name},
                duration_ms=duration_ms,
                trace_id=trace_id,
            )
            return series

        duration_ms = (time.perf_counter() - start) * 1000
        self.logger.error(
            f"All endpoints failed for {symbol}",
            context={
                "trace_id": trace_id,
                "symbol": symbol,
                "endpoints_tried": len(self.endpoints),
                "result": "failed",
            },
        )
        self._record(
            FETCH_COMPLETE,
            symbol,
            {"status": "failed", "endpoints_tried": len(self.endpoints)},
            duration_ms=duration_ms,
            trace_id=trace_id,
        )
        return None

    def _fetch_from(self, endpoint: RelayEndpoint, target_url: str, symbol: str) -> PriceSeries:
        response = self.http.get(
            endpoint.build_url(target_url), timeout=self.fetch_config.request_timeout
        )
        response.raise_for_status()
        payload = endpoint.unwrap(response.json())
        return parse_chart(payload, symbol, source=endpoint.name)

    def _record(
        self,
        event_type: str,
        symbol: str,
        context: dict[str, Any],
        duration_ms: float | None = None,
        trace_id: str | None = None,
    ) -> None:
        if self.event_store:
            self.event_store.add_event(
                event_type,
                symbol,
                context=context,
                duration_ms=duration_ms,
                trace_id=trace_id,
            )
