"""Persistence of the performance cache and custom dates as JSON blobs."""

import json
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from src.database.models import StoredBlob
from src.models.market_data import CustomDate, PerformanceResult, TrackerSession
from src.services.formatting import ERROR_MARKER, format_percentage, parse_percentage
from src.utils.logger import StructuredLogger

PERFORMANCE_KEY = "defenseStocksPerformance"
CUSTOM_DATES_KEY = "defenseStocksCustomDates"


class PerformanceStore:
    """Reads and writes the tracker state under fixed keys."""

    def __init__(self, db_session: Session):
        """
        Args:
            db_session: SQLAlchemy database session
        """
        self.db_session = db_session
        self.logger = StructuredLogger("PerformanceStore")

    def _read(self, key: str) -> Any | None:
        record = self.db_session.get(StoredBlob, key)
        if record is None:
            return None
        try:
            return json.loads(record.value)
        except json.JSONDecodeError as e:
            self.logger.warning(
                f"Ignoring unreadable blob {key}",
                context={"key": key},
                exception=e,
            )
            return None

    def _write(self, key: str, value: Any) -> None:
        record = self.db_session.get(StoredBlob, key)
        payload = json.dumps(value)
        if record is None:
            self.db_session.add(StoredBlob(key=key, value=payload))
        else:
            record.value = payload
            record.updated_at = datetime.utcnow()

    def save(self, session: TrackerSession) -> None:
        """Persist both the performance cache and the custom dates."""
        self._write(PERFORMANCE_KEY, serialize_performance(session.performance))
        self._write(CUSTOM_DATES_KEY, [d.to_dict() for d in session.custom_dates])
        self.db_session.commit()
        self.logger.debug(
            "Saved tracker state",
            context={
                "symbols": len(session.performance),
                "custom_dates": len(session.custom_dates),
            },
        )

    def load(self, session: TrackerSession | None = None) -> TrackerSession:
        """
        Load stored state into ``session`` (or a new one).

        Missing blobs leave the corresponding part empty.
        """
        session = session or TrackerSession()
        performance = self._read(PERFORMANCE_KEY)
        custom_dates = self._read(CUSTOM_DATES_KEY)

        session.performance = (
            deserialize_performance(performance) if isinstance(performance, dict) else {}
        )
        session.custom_dates = (
            [CustomDate.from_dict(raw) for raw in custom_dates if isinstance(raw, dict)]
            if isinstance(custom_dates, list)
            else []
        )
        return session

    def clear(self) -> None:
        """Delete both stored blobs."""
        for key in (PERFORMANCE_KEY, CUSTOM_DATES_KEY):
            record = self.db_session.get(StoredBlob, key)
            if record is not None:
                self.db_session.delete(record)
        self.db_session.commit()


def serialize_performance(performance: dict[str, PerformanceResult]) -> dict[str, dict[str, str]]:
    """Display strings per ticker and period, as the table shows them."""
    blob = {}
    for ticker, result in performance.items():
        blob[ticker] = {
            period: ERROR_MARKER if result.error else format_percentage(value)
            for period, value in result.values.items()
        }
    return blob


def deserialize_performance(blob: dict[str, Any]) -> dict[str, PerformanceResult]:
    performance = {}
    for ticker, periods in blob.items():
        if not isinstance(periods, dict):
            continue
        error = bool(periods) and all(text == ERROR_MARKER for text in periods.values())
        performance[ticker] = PerformanceResult(
            symbol=ticker,
            values={period: parse_percentage(text) for period, text in periods.items()},
            error=error,
        )
    return performance
