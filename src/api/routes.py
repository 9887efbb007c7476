"""API routes for the performance table and custom dates."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from src.api.dependencies import (
    get_event_store,
    get_store,
    get_tracker_service,
    get_tracker_session,
)
from src.api.error_handlers import create_not_found_error, create_percentage_error
from src.api.html_view import performance_cell, render_page
from src.models.catalog import PERIOD_LABELS, PERIODS, STOCKS
from src.models.market_data import CustomDate, TrackerSession
from src.services.formatting import color_class
from src.services.storage_service import PerformanceStore
from src.services.tracker_service import TrackerService
from src.utils.event_store import EventStore
from src.utils.metrics import MetricsCalculator

router = APIRouter()
page_router = APIRouter()


class CustomDateCreate(BaseModel):
    """Request model for adding a custom date."""
    day: int | None = None
    month: int | None = None
    year: int | None = None


class ManualValue(BaseModel):
    """Request model for a manually entered percentage."""
    value: str


def _performance_payload(session: TrackerSession) -> dict:
    rows = []
    for stock in STOCKS:
        result = session.performance.get(stock.ticker)
        display = {period: performance_cell(result, period) for period in PERIODS}
        rows.append(
            {
                "ticker": stock.ticker,
                "company": stock.company,
                "error": bool(result and result.error),
                "values": {
                    period: (result.values.get(period) if result else None) for period in PERIODS
                },
                "display": display,
                "classes": {period: color_class(text) for period, text in display.items()},
                "updated_at": result.updated_at.isoformat() if result else None,
            }
        )
    return {"performance": rows, "loading": session.loading}


def _custom_date_payload(custom_date: CustomDate) -> dict:
    return {
        **custom_date.to_dict(),
        "classes": {ticker: color_class(text) for ticker, text in custom_date.data.items()},
    }


@page_router.get("/", response_class=HTMLResponse)
async def dashboard(session: TrackerSession = Depends(get_tracker_session)):
    """Render the performance table and custom date tables."""
    return HTMLResponse(render_page(session))


@router.get("/stocks")
async def get_stocks():
    """Tracked symbols and period labels."""
    return {
        "stocks": [{"ticker": s.ticker, "company": s.company} for s in STOCKS],
        "periods": [{"name": p, "label": PERIOD_LABELS[p]} for p in PERIODS],
    }


@router.get("/performance")
async def get_performance(session: TrackerSession = Depends(get_tracker_session)):
    """Cached performance for every tracked symbol."""
    return _performance_payload(session)


@router.post("/performance/refresh")
def refresh_performance(
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    """
    Fetch all symbols sequentially and recompute their performance.

    Returns:
        The refreshed performance table
    """
    service.refresh_performance(session)
    store.save(session)
    return _performance_payload(session)


@router.put("/performance/{ticker}/{period}")
def set_performance_value(
    ticker: str,
    period: str,
    body: ManualValue,
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    """Store a manually entered value for one cell."""
    try:
        result = service.set_manual_value(session, ticker, period, body.value)
    except KeyError as e:
        raise create_not_found_error("cell", f"{ticker}/{period}").to_http_exception() from e
    except ValueError as e:
        raise create_percentage_error(str(e)).to_http_exception() from e

    store.save(session)
    text = performance_cell(result, period)
    return {"ticker": ticker, "period": period, "display": text, "class": color_class(text)}


@router.get("/custom-dates")
async def list_custom_dates(session: TrackerSession = Depends(get_tracker_session)):
    return {"custom_dates": [_custom_date_payload(d) for d in session.custom_dates]}


@router.post("/custom-dates", status_code=status.HTTP_201_CREATED)
def add_custom_date(
    body: CustomDateCreate,
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    """Validate and add a custom date; CustomDateError maps to 400."""
    custom_date = service.add_custom_date(session, body.day, body.month, body.year)
    store.save(session)
    return _custom_date_payload(custom_date)


@router.delete("/custom-dates/{key}")
def remove_custom_date(
    key: str,
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    if not service.remove_custom_date(session, key):
        raise create_not_found_error("custom_date", key).to_http_exception()
    store.save(session)
    return {"message": "Custom date removed", "key": key}


@router.post("/custom-dates/{key}/refresh")
def refresh_custom_date(
    key: str,
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    """Fetch performance since the custom date for every symbol."""
    try:
        custom_date = service.refresh_custom_date(session, key)
    except KeyError as e:
        raise create_not_found_error("custom_date", key).to_http_exception() from e
    store.save(session)
    return _custom_date_payload(custom_date)


@router.put("/custom-dates/{key}/{ticker}")
def set_custom_date_value(
    key: str,
    ticker: str,
    body: ManualValue,
    session: TrackerSession = Depends(get_tracker_session),
    service: TrackerService = Depends(get_tracker_service),
    store: PerformanceStore = Depends(get_store),
):
    try:
        custom_date = service.set_custom_value(session, key, ticker, body.value)
    except KeyError as e:
        raise create_not_found_error("cell", f"{key}/{ticker}").to_http_exception() from e
    except ValueError as e:
        raise create_percentage_error(str(e)).to_http_exception() from e

    store.save(session)
    return _custom_date_payload(custom_date)


@router.delete("/data")
def clear_data(
    session: TrackerSession = Depends(get_tracker_session),
    store: PerformanceStore = Depends(get_store),
):
    """Drop the cache, the custom dates and their stored copies."""
    session.performance.clear()
    session.custom_dates.clear()
    store.clear()
    return {"message": "Data cleared"}


@router.get("/stats")
async def get_stats(request: Request, event_store: EventStore = Depends(get_event_store)):
    """Fetch metrics since startup."""
    calculator = MetricsCalculator(event_store, start_time=request.app.state.started_at)
    return calculator.calculate().to_dict()
