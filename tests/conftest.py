"""Pytest configuration and fixtures."""

import json
import os
import tempfile
from datetime import datetime

import pytest
import requests
from sqlalchemy import create_engine

from src.database.db import build_session_factory, get_db, init_db
from src.models.market_data import PriceSeries
from src.services.rate_limiter import RequestThrottle
from src.services.tracker_service import TrackerService

DAY = 86400
# Fixed reference time: 15 June 2024, noon local time
NOW = int(datetime(2024, 6, 15, 12, 0, 0).timestamp())


def chart_payload(timestamps, closes):
    """Quote API body for the given arrays."""
    return {
        "chart": {
            "result": [
                {
                    "timestamp": list(timestamps),
                    "indicators": {"quote": [{"close": list(closes)}]},
                }
            ],
            "error": None,
        }
    }


def wrapped_payload(payload):
    """Relay envelope carrying the provider JSON as a string."""
    return {"contents": json.dumps(payload), "status": {"http_code": 200}}


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, body=None, status_code=200, invalid_json=False):
        self.body = body
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.invalid_json:
            raise requests.JSONDecodeError("Expecting value", "<html>", 0)
        return self.body


class FakeHttp:
    """Routes GET requests to responses by URL prefix and records the calls."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                if isinstance(response, Exception):
                    raise response
                return response
        raise requests.ConnectionError(f"No route for {url}")


class FakeFetcher:
    """Returns canned series per ticker; None marks a failed fetch."""

    def __init__(self, series_by_ticker, default=None):
        self.series_by_ticker = series_by_ticker
        self.default = default
        self.calls = []

    def fetch_series(self, symbol, range_=None, period1=None, period2=None, interval=None):
        self.calls.append(
            {"symbol": symbol, "range": range_, "period1": period1, "period2": period2}
        )
        if symbol in self.series_by_ticker:
            return self.series_by_ticker[symbol]
        return self.default


def daily_series(symbol, closes, end=NOW):
    """One point per day ending at ``end``, oldest first."""
    count = len(closes)
    timestamps = [end - (count - 1 - i) * DAY for i in range(count)]
    return PriceSeries.from_arrays(symbol, timestamps, closes)


@pytest.fixture(scope="function")
def test_db():
    """Create a file-based test database."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    init_db(engine)

    yield engine

    engine.dispose()
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def test_session(test_db):
    """Create a test database session."""
    session = build_session_factory(test_db)()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def no_wait_throttle():
    return RequestThrottle(0, sleep=lambda seconds: None)


@pytest.fixture
def make_service(no_wait_throttle):
    """Factory for a TrackerService over a fake fetcher at the fixed time."""

    def _make(fetcher, **kwargs):
        kwargs.setdefault("throttle", no_wait_throttle)
        kwargs.setdefault("clock", lambda: NOW)
        return TrackerService(fetcher=fetcher, **kwargs)

    return _make


@pytest.fixture
def test_client(test_session, make_service):
    """Create a test client over a fake fetcher and the test database."""
    from fastapi.testclient import TestClient

    from main import create_app

    fetcher = FakeFetcher({}, default=daily_series("ANY", [100.0, 110.0]))
    app = create_app(tracker_service=make_service(fetcher), use_lifespan=False)

    def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)
    client.fetcher = fetcher
    yield client

    app.dependency_overrides.clear()
