"""In-memory store of fetch events for the stats endpoint."""

import threading
import uuid
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

ENDPOINT_FAILED = "endpoint_failed"
FETCH_COMPLETE = "fetch_complete"
REFRESH_COMPLETE = "refresh_complete"


@dataclass
class Event:
    """A single recorded fetch event."""

    id: str
    timestamp: str
    trace_id: str | None
    event_type: str
    symbol: str
    context: dict[str, Any]
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class EventStore:
    """Bounded in-memory event log; the oldest events drop off first."""

    def __init__(self, max_size: int = 5000):
        self.max_size = max_size
        self._events: deque = deque(maxlen=max_size)
        self._lock = threading.RLock()

    def add_event(
        self,
        event_type: str,
        symbol: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
        trace_id: str | None = None,
    ) -> Event:
        """
        Record an event.

        Args:
            event_type: One of the module-level event type constants
            symbol: Ticker the event concerns ("*" for batch events)
            context: Optional context fields
            duration_ms: Optional duration in milliseconds
            trace_id: Trace of the refresh run

        Returns:
            The created Event object
        """
        with self._lock:
            event = Event(
                id=str(uuid.uuid4()),
                timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
                trace_id=trace_id,
                event_type=event_type,
                symbol=symbol,
                context=context or {},
                duration_ms=duration_ms,
            )
            self._events.append(event)
            return event

    def get_events_by_type(self, event_type: str) -> list[Event]:
        with self._lock:
            return [event for event in self._events if event.event_type == event_type]

    def get_events_by_trace(self, trace_id: str) -> list[Event]:
        with self._lock:
            return [event for event in self._events if event.trace_id == trace_id]

    def get_all_events(self) -> list[Event]:
        """All events in chronological order."""
        with self._lock:
            return list(self._events)

    def size(self) -> int:
        with self._lock:
            return len(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
