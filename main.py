"""Main application entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

from src.api.error_handlers import register_error_handlers
from src.api.routes import page_router, router
from src.database.db import SessionLocal, init_db
from src.models.market_data import TrackerSession
from src.services.price_fetcher import PriceFetcher
from src.services.scheduler_service import SchedulerService
from src.services.storage_service import PerformanceStore
from src.services.tracker_service import TrackerService
from src.utils.config import config
from src.utils.event_store import EventStore
from src.utils.logger import StructuredLogger

logger = StructuredLogger("App")


def _load_stored_state(session: TrackerSession) -> None:
    db = SessionLocal()
    try:
        PerformanceStore(db).load(session)
    finally:
        db.close()


def _scheduled_refresh(app: FastAPI) -> None:
    session = app.state.tracker_session
    app.state.tracker_service.refresh_performance(session)
    db = SessionLocal()
    try:
        PerformanceStore(db).save(session)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    try:
        config.validate()
    except ValueError as e:
        logger.critical("Configuration error", exception=e)
        raise
    init_db()
    _load_stored_state(app.state.tracker_session)

    scheduler = None
    if config.scheduler.enabled:
        scheduler = SchedulerService(
            lambda: _scheduled_refresh(app), timezone=config.scheduler.timezone
        )
        scheduler.schedule_refresh(config.scheduler.refresh_time)
    yield
    # Shutdown
    if scheduler:
        scheduler.stop()


def create_app(
    tracker_service: TrackerService | None = None,
    event_store: EventStore | None = None,
    use_lifespan: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application with its own tracker state.

    Args:
        tracker_service: Service to use (built from config when omitted)
        event_store: Event store shared with the fetcher
        use_lifespan: Run config validation, schema creation and scheduling on startup
    """
    app = FastAPI(
        title="European Defense Stocks Tracker",
        description="Price performance of European defense-sector equities",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    event_store = event_store or EventStore()
    app.state.event_store = event_store
    app.state.tracker_session = TrackerSession()
    app.state.tracker_service = tracker_service or TrackerService(
        fetcher=PriceFetcher(event_store=event_store), event_store=event_store
    )
    app.state.started_at = datetime.now(timezone.utc)

    register_error_handlers(app)
    app.include_router(router, prefix="/api", tags=["performance"])
    app.include_router(page_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
