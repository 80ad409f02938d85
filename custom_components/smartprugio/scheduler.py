"""Background task scheduling for SmartPrugio accessories.

Each accessory controller owns one TaskScheduler. Tasks are named so
callers can describe a new schedule without touching earlier ones:
scheduling never cancels a pending task, and runs of the same name may
overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval

from .const import DOMAIN

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from homeassistant.core import CALLBACK_TYPE, HomeAssistant

    Job = Callable[[], Awaitable[Any]]

_LOGGER = logging.getLogger(__name__)

POLL_TASK = "poll"
RECONCILE_TASK = "reconcile_after_write"


class TaskScheduler:
    """Run jobs once after a delay or repeatedly on an interval."""

    def __init__(self, hass: HomeAssistant, owner: str) -> None:
        """Initialize the scheduler.

        Args:
            hass: Home Assistant instance driving the interval timers.
            owner: Name used in log messages, usually the device id.

        """
        self._hass = hass
        self._owner = owner
        self._tasks: dict[str, set[asyncio.Task[None]]] = {}
        self._timers: list[CALLBACK_TYPE] = []
        self._shutdown = False

    def pending(self, name: str | None = None) -> int:
        """Return the number of unfinished tasks, optionally for one name."""
        if name is not None:
            return len(self._tasks.get(name, ()))
        return sum(len(tasks) for tasks in self._tasks.values())

    def schedule_once(
        self, name: str, delay: float, job: Job
    ) -> asyncio.Task[None] | None:
        """Run ``job`` once, ``delay`` seconds from now."""
        if self._shutdown:
            _LOGGER.debug("%s: scheduler stopped, dropping %s", self._owner, name)
            return None

        async def run_later() -> None:
            await asyncio.sleep(delay)
            await self._async_run(name, job)

        return self._track(name, asyncio.create_task(run_later()))

    def schedule_every(
        self, name: str, interval: float, job: Job
    ) -> CALLBACK_TYPE | None:
        """Run ``job`` every ``interval`` seconds until shutdown.

        Every run is started in its own background task, so a slow run
        never delays or cancels the next one.

        Returns:
            A function that stops the timer, or None once shut down.

        """
        if self._shutdown:
            _LOGGER.debug("%s: scheduler stopped, dropping %s", self._owner, name)
            return None

        @callback
        def _tick(now: datetime) -> None:
            if self._shutdown:
                return
            self._track(
                name,
                self._hass.async_create_background_task(
                    self._async_run(name, job),
                    f"{DOMAIN} {self._owner} {name}",
                ),
            )

        unsub = async_track_time_interval(
            self._hass,
            _tick,
            timedelta(seconds=interval),
            name=f"{DOMAIN} {self._owner} {name}",
            cancel_on_shutdown=True,
        )
        self._timers.append(unsub)
        _LOGGER.debug("%s: %s timer started (%ss)", self._owner, name, interval)
        return unsub

    async def async_shutdown(self) -> None:
        """Stop every timer, cancel every scheduled task and refuse new ones."""
        self._shutdown = True
        for unsub in self._timers:
            unsub()
        self._timers.clear()

        tasks = [task for tasks in self._tasks.values() for task in tasks]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        _LOGGER.debug("%s: cancelled %d scheduled tasks", self._owner, len(tasks))

    async def _async_run(self, name: str, job: Job) -> None:
        try:
            await job()
        except Exception:
            _LOGGER.exception("%s: scheduled task %s failed", self._owner, name)

    def _track(self, name: str, task: asyncio.Task[None]) -> asyncio.Task[None]:
        tasks = self._tasks.setdefault(name, set())
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        return task


class PollingScheduler:
    """Drive an accessory's reconcile routine on a fixed interval."""

    def __init__(
        self,
        scheduler: TaskScheduler,
        reconcile: Job,
        interval: float,
    ) -> None:
        self._scheduler = scheduler
        self._reconcile = reconcile
        self.interval = interval

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    def start(self) -> bool:
        """Start polling; returns False when polling is disabled."""
        if not self.enabled:
            _LOGGER.debug("Polling disabled")
            return False
        return (
            self._scheduler.schedule_every(POLL_TASK, self.interval, self._reconcile)
            is not None
        )
