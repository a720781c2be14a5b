"""Debounced scheduling of reconciliation passes.

All requests funnel through request(): a request made while another is
pending cancels the pending one and restarts the debounce window. Timeout
and schedule alarms are single-slot timers that feed request() when they
fire, so they obey the same debounce.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_INTERVAL = 0.1


class PassScheduler:
    """Coalesces bursts of requests into one delayed pass.

    Must be used from the event loop thread.
    """

    def __init__(
        self,
        callback: Callable[[], object],
        *,
        loop: asyncio.AbstractEventLoop,
        debounce_interval: float = DEFAULT_DEBOUNCE_INTERVAL,
    ) -> None:
        """Initialize scheduler.

        Args:
            callback: Runs one reconciliation pass.
            loop: Event loop that owns the timers.
            debounce_interval: Debounce window (seconds).
        """
        self._callback = callback
        self._loop = loop
        self._debounce_interval = debounce_interval

        self._pending: asyncio.TimerHandle | None = None
        self._timeout_timer: asyncio.TimerHandle | None = None
        self._schedule_timer: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request(self) -> None:
        """Request a pass after the debounce window."""
        if self._closed:
            return

        if self._pending is not None:
            self._pending.cancel()

        self._pending = self._loop.call_later(self._debounce_interval, self._fire)

    def _fire(self) -> None:
        self._pending = None
        if self._closed:
            return
        self._callback()

    def schedule_timeout(self, delay: float) -> None:
        """Request a pass once delay seconds have passed.

        An already armed earlier deadline is kept; a later one is replaced.
        """
        if self._closed:
            return
        if self._timeout_timer is not None:
            if self._timeout_timer.when() <= self._loop.time() + delay:
                return
            self._timeout_timer.cancel()
        _LOGGER.debug("Timeout pass in %.1fs", delay)
        self._timeout_timer = self._loop.call_later(delay, self._on_timeout)

    def _on_timeout(self) -> None:
        self._timeout_timer = None
        self.request()

    def arm_schedule_alarm(self, delay: float | None) -> None:
        """Re-arm the schedule boundary alarm; None disarms it."""
        if self._schedule_timer is not None:
            self._schedule_timer.cancel()
            self._schedule_timer = None
        if self._closed or delay is None:
            return
        self._schedule_timer = self._loop.call_later(delay, self._on_schedule_alarm)

    def _on_schedule_alarm(self) -> None:
        self._schedule_timer = None
        _LOGGER.debug("Alert schedule boundary reached")
        self.request()

    def cancel(self) -> None:
        """Cancel every pending timer and refuse further requests."""
        self._closed = True
        for handle in (self._pending, self._timeout_timer, self._schedule_timer):
            if handle is not None:
                handle.cancel()
        self._pending = None
        self._timeout_timer = None
        self._schedule_timer = None
