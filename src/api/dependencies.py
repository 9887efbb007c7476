"""FastAPI dependencies exposing the application-owned tracker state."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.database.db import get_db
from src.models.market_data import TrackerSession
from src.services.storage_service import PerformanceStore
from src.services.tracker_service import TrackerService
from src.utils.event_store import EventStore


def get_tracker_session(request: Request) -> TrackerSession:
    """The TrackerSession held on the application state."""
    return request.app.state.tracker_session


def get_tracker_service(request: Request) -> TrackerService:
    return request.app.state.tracker_service


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_store(db: Session = Depends(get_db)) -> PerformanceStore:
    """PerformanceStore bound to the request's database session."""
    return PerformanceStore(db)
