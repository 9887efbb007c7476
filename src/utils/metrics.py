"""Metrics calculator for aggregating fetch events."""

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.utils.event_store import (
    ENDPOINT_FAILED,
    FETCH_COMPLETE,
    REFRESH_COMPLETE,
    EventStore,
)


@dataclass
class FetchMetrics:
    """Aggregated fetch statistics."""

    total_fetches: int
    successful_fetches: int
    failed_fetches: int
    success_rate: float
    average_fetch_duration_ms: float
    endpoint_failures: dict[str, int] = field(default_factory=dict)
    endpoint_wins: dict[str, int] = field(default_factory=dict)
    refresh_runs: int = 0
    uptime_seconds: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class MetricsCalculator:
    """Calculates fetch metrics from event store data."""

    def __init__(self, event_store: EventStore, start_time: datetime | None = None):
        """
        Initialize the metrics calculator.

        Args:
            event_store: The event store to calculate metrics from
            start_time: Optional start time for uptime calculation (defaults to now)
        """
        self.event_store = event_store
        self.start_time = start_time or datetime.now(timezone.utc)

    def calculate(self) -> FetchMetrics:
        events = self.event_store.get_all_events()

        fetches = [e for e in events if e.event_type == FETCH_COMPLETE]
        successful = [e for e in fetches if e.context.get("status") == "success"]
        failed_count = len(fetches) - len(successful)

        success_rate = len(successful) / len(fetches) * 100 if fetches else 0.0

        durations = [e.duration_ms for e in fetches if e.duration_ms is not None]
        average_duration = sum(durations) / len(durations) if durations else 0.0

        endpoint_failures = Counter(
            e.context.get("endpoint", "unknown")
            for e in events
            if e.event_type == ENDPOINT_FAILED
        )
        endpoint_wins = Counter(e.context.get("endpoint", "unknown") for e in successful)

        uptime = int((datetime.now(timezone.utc) - self.start_time).total_seconds())

        return FetchMetrics(
            total_fetches=len(fetches),
            successful_fetches=len(successful),
            failed_fetches=failed_count,
            success_rate=success_rate,
            average_fetch_duration_ms=average_duration,
            endpoint_failures=dict(endpoint_failures),
            endpoint_wins=dict(endpoint_wins),
            refresh_runs=len([e for e in events if e.event_type == REFRESH_COMPLETE]),
            uptime_seconds=uptime,
        )
