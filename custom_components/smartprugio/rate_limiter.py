"""Write rate limiting for SmartPrugio accessories."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .const import DEFAULT_MIN_CONTROL_INTERVAL_MS

if TYPE_CHECKING:
    from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)


class ControlRateLimiter:
    """Gate how often control commands may be sent for one accessory.

    Only accepted calls move the window; a rejected call has no side effects.
    """

    def __init__(
        self,
        min_interval_ms: float = DEFAULT_MIN_CONTROL_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            min_interval_ms: Minimum milliseconds between accepted writes.
            clock: Monotonic clock returning seconds.

        """
        self.min_interval = max(min_interval_ms, 0) / 1000
        self._clock = clock
        self._last_allowed: float | None = None

    def allow(self) -> bool:
        """Return True and open a new window if a write may be sent now."""
        now = self._clock()
        if (
            self._last_allowed is not None
            and now - self._last_allowed < self.min_interval
        ):
            _LOGGER.debug(
                "Control rate limited (%.3fs since last write, minimum %.3fs)",
                now - self._last_allowed,
                self.min_interval,
            )
            return False

        self._last_allowed = now
        return True
