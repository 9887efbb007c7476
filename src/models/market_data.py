"""Market data models for tracked symbols, price series and performance results."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Symbol:
    """A tracked equity."""

    ticker: str
    company: str


@dataclass(frozen=True)
class PricePoint:
    """A single close price; price is None when the provider reports a gap."""

    timestamp: int
    price: float | None


@dataclass
class PriceSeries:
    """Historical close prices for one symbol, ascending by timestamp."""

    symbol: str
    points: list[PricePoint] = field(default_factory=list)
    source: str | None = None

    @classmethod
    def from_arrays(
        cls,
        symbol: str,
        timestamps: list[int],
        closes: list[float | None],
        source: str | None = None,
    ) -> "PriceSeries":
        """Build a series from the parallel arrays returned by the quote API."""
        if len(timestamps) != len(closes):
            raise ValueError(
                f"timestamp/close length mismatch: {len(timestamps)} != {len(closes)}"
            )
        points = [
            PricePoint(
                timestamp=int(ts),
                price=float(close) if close is not None else None,
            )
            for ts, close in zip(timestamps, closes)
        ]
        return cls(symbol=symbol, points=points, source=source)

    @property
    def timestamps(self) -> list[int]:
        return [point.timestamp for point in self.points]

    @property
    def prices(self) -> list[float | None]:
        return [point.price for point in self.points]

    def valid_points(self) -> list[PricePoint]:
        """Points that carry a price."""
        return [point for point in self.points if point.price is not None]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class PerformanceWindow:
    """A named lookback; days is None for year-to-date."""

    name: str
    label: str
    days: int | None = None


@dataclass
class PerformanceResult:
    """Percentage change per window for one symbol.

    A value of None means the window is unavailable. When error is set the
    whole fetch failed and every value is None.
    """

    symbol: str
    values: dict[str, float | None] = field(default_factory=dict)
    error: bool = False
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def failed(cls, symbol: str, window_names: list[str]) -> "PerformanceResult":
        return cls(
            symbol=symbol,
            values={name: None for name in window_names},
            error=True,
        )


@dataclass
class CustomDate:
    """A user-added start date and the per-ticker display value for it."""

    key: str  # YYYY-MM-DD
    display: str
    data: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"key": self.key, "display": self.display, "data": dict(self.data)}

    @classmethod
    def from_dict(cls, raw: dict) -> "CustomDate":
        return cls(
            key=raw["key"],
            display=raw.get("display", raw["key"]),
            data=dict(raw.get("data") or {}),
        )


@dataclass
class TrackerSession:
    """State owned by the caller: the performance cache and custom dates."""

    performance: dict[str, PerformanceResult] = field(default_factory=dict)
    custom_dates: list[CustomDate] = field(default_factory=list)
    loading: bool = False

    def find_custom_date(self, key: str) -> CustomDate | None:
        for custom_date in self.custom_dates:
            if custom_date.key == key:
                return custom_date
        return None
