"""Request throttling for outbound quote API calls."""

import time
from collections.abc import Callable


class RequestThrottle:
    """
    Enforces a fixed minimum interval between consecutive outbound requests.

    The first call never waits. Each later call sleeps for whatever is left of
    the interval since the previous call returned.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            min_interval_seconds: Minimum spacing between requests
            clock: Monotonic time source
            sleep: Sleep function
        """
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must not be negative")
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None

    def wait(self) -> float:
        """
        Block until the next request may be issued.

        Returns:
            Seconds slept
        """
        slept = 0.0
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            remaining = self.min_interval_seconds - elapsed
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last_request = self._clock()
        return slept

    def reset(self) -> None:
        """Forget the previous request so the next wait returns immediately."""
        self._last_request = None
