"""Per-catalog request spacing for provider adapters."""

from __future__ import annotations

import time
from typing import Callable

from tagmatch.utils.logger import get_logger

logger = get_logger("utils.rate_limiter")


class RateLimiter:
    """Enforces a minimum interval between successive calls to one service.

    The engine itself is synchronous, so a single limiter is shared by the
    adapters of one run and handed to them explicitly.

    Usage:
        limiter = RateLimiter()
        limiter.wait("musicbrainz", 1.0)  # Waits if needed to respect 1 req/sec
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the limiter.

        Args:
            clock: Monotonic clock returning seconds.
            sleep: Function used to block for a number of seconds.
        """
        self._clock = clock
        self._sleep = sleep
        self._last_call: dict[str, float] = {}

    def wait(self, service_name: str, min_interval: float) -> float:
        """Block until enough time has passed since the last call to this service.

        Args:
            service_name: Identifier for the API service (e.g. "musicbrainz").
            min_interval: Minimum seconds between requests.

        Returns:
            Seconds actually slept (0.0 when no wait was needed).
        """
        sleep_time = 0.0
        last = self._last_call.get(service_name)
        if last is not None:
            elapsed = self._clock() - last
            if elapsed < min_interval:
                sleep_time = min_interval - elapsed

        if sleep_time > 0:
            logger.debug("Rate limit: sleeping %.2fs for %s", sleep_time, service_name)
            self._sleep(sleep_time)

        self._last_call[service_name] = self._clock()
        return sleep_time

    def reset(self, service_name: str | None = None) -> None:
        """Forget call history for one service, or for all of them."""
        if service_name is None:
            self._last_call.clear()
        else:
            self._last_call.pop(service_name, None)
