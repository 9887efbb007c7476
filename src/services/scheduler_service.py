"""Scheduler service for the daily performance refresh."""

from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from src.utils.logger import StructuredLogger

structured_logger = StructuredLogger("SchedulerService")

REFRESH_JOB_ID = "daily_refresh"


class SchedulerService:
    """Runs a refresh callback once a day at a configured time."""

    def __init__(
        self,
        refresh_job: Callable[[], None],
        timezone: str = "UTC",
        scheduler: BackgroundScheduler | None = None,
    ):
        """
        Initialize scheduler service.

        Args:
            refresh_job: Callable performing a full refresh and save
            timezone: Timezone the refresh time is expressed in
            scheduler: APScheduler instance (a BackgroundScheduler by default)
        """
        self.refresh_job = refresh_job
        self.timezone = timezone
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone)
        self.is_running = False

    def schedule_refresh(self, refresh_time: str) -> None:
        """
        Set up the recurring refresh and start the scheduler.

        Args:
            refresh_time: Time of day in HH:MM format

        Raises:
            ValueError: If time format is invalid
        """
        self._validate_time_format(refresh_time)
        hour, minute = map(int, refresh_time.split(":"))

        self.scheduler.add_job(
            self._run_refresh,
            CronTrigger(hour=hour, minute=minute, timezone=self.timezone),
            id=REFRESH_JOB_ID,
            name="Daily Performance Refresh",
            replace_existing=True,
        )
        structured_logger.info(
            f"Scheduled daily refresh at {refresh_time}",
            context={"timezone": self.timezone},
        )

        if not self.is_running:
            self.scheduler.start()
            self.is_running = True

    def _run_refresh(self) -> None:
        # Job errors are logged, never raised into the scheduler thread.
        try:
            self.refresh_job()
        except Exception as e:
            structured_logger.error("Scheduled refresh failed", exception=e)

    def stop(self) -> None:
        """Shut the scheduler down if it is running."""
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            structured_logger.info("Scheduler stopped")

    @staticmethod
    def _validate_time_format(time_str: str) -> None:
        try:
            parts = time_str.split(":")
            if len(parts) != 2:
                raise ValueError(f"Invalid time format: {time_str}. Use HH:MM")
            hour, minute = int(parts[0]), int(parts[1])
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid time format: {time_str}. Use HH:MM") from e
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(f"Invalid time values: {time_str}")
