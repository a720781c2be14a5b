"""Arbitration engine: one reconciliation pass over live notifications.

A pass answers: "Which colors should be lit right now?"

It pulls live notifications, prunes them through the tracker, resolves a
color per notification, applies do-not-disturb and schedule gates, and
publishes the sorted, de-duplicated color set when it changed.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .collaborators import NotificationSource, Renderer
from .colors import ColorResolver, format_argb
from .environment import Environment, ScreenState
from .errors import NotificationAccessDenied
from .notification import ActiveNotification, NotificationRecord
from .settings import LightSettings, Mode
from .trace import ColorDecision, NullEmitter, PassTrace, TraceConfig, TraceEmitter
from .tracker import NotificationTracker

if TYPE_CHECKING:
    from .motion import PickupDismissal
    from .scheduler import PassScheduler

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassResult:
    """Outcome of one reconciliation pass.

    Attributes:
        colors: Current color set after the pass.
        changed: Whether the color set differs from the previous pass.
        mode: Policy mode used.
        dnd_active: Do-not-disturb gate state.
        schedule_active: Alert schedule gate state.
        timeout_ms: Seen timeout of the mode.
    """

    colors: tuple[int, ...]
    changed: bool
    mode: Mode
    dnd_active: bool
    schedule_active: bool
    timeout_ms: int


class ArbitrationEngine:
    """Owns the current color set and runs reconciliation passes.

    All state is guarded by one lock, so at most one pass runs at a time.
    """

    def __init__(
        self,
        source: NotificationSource,
        settings: LightSettings,
        environment: Environment,
        renderer: Renderer,
        scheduler: PassScheduler,
        *,
        tracker: NotificationTracker | None = None,
        resolver: ColorResolver | None = None,
        host_package: str | None = None,
        trace_config: TraceConfig | None = None,
        emitter: TraceEmitter | None = None,
    ) -> None:
        self._source = source
        self._settings = settings
        self._environment = environment
        self._renderer = renderer
        self._scheduler = scheduler
        self.tracker = tracker or NotificationTracker()
        self._resolver = resolver or ColorResolver(settings, host_package=host_package)
        self._trace_config = trace_config or TraceConfig()
        self._emitter = emitter or NullEmitter()

        self.motion: PickupDismissal | None = None
        self.user_present = False

        self._lock = threading.RLock()
        self._current_colors: tuple[int, ...] = ()
        self._active: list[ActiveNotification] = []
        self._enabled = settings.enabled

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def current_colors(self) -> tuple[int, ...]:
        with self._lock:
            return self._current_colors

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_currently_active_notifications(self) -> list[ActiveNotification]:
        """Snapshot of the notifications seen by the last pass."""
        with self._lock:
            return list(self._active)

    # -------------------------------------------------------------------------
    # Policy helpers
    # -------------------------------------------------------------------------

    def pickup_allowed(self) -> bool:
        mode = self._settings.get_mode(self._environment.is_charging(), self.user_present)
        return self._settings.is_seen_pickup_while(mode)

    def wants_motion_sensor(self) -> bool:
        with self._lock:
            has_colors = bool(self._current_colors)
        return self._enabled and has_colors and self.pickup_allowed()

    def refresh_enabled(self) -> bool:
        """Re-read the master switch. Returns True when it flipped."""
        with self._lock:
            enabled = self._settings.enabled
            if enabled == self._enabled:
                return False
            self._enabled = enabled
            return True

    # -------------------------------------------------------------------------
    # State mutation
    # -------------------------------------------------------------------------

    def mark_all_seen(self) -> None:
        with self._lock:
            self.tracker.mark_all_as_seen()

    def reset(self) -> None:
        """Forget all tracked state (listener connect/disconnect)."""
        with self._lock:
            self.tracker.clear()
            self._current_colors = ()
            self._active = []

    def apply(self) -> None:
        """Publish the current colors, or hide when disabled."""
        with self._lock:
            if self._enabled:
                self._renderer.show(list(self._current_colors))
            else:
                self._renderer.hide(True)
        if self.motion is not None:
            self.motion.update_subscription()

    def run_pass(self) -> PassResult:
        """Run one reconciliation pass."""
        with self._lock:
            return self._run_pass_locked()

    def _list_live(self) -> tuple[list[NotificationRecord], bool]:
        try:
            return list(self._source.list_live_notifications()), False
        except NotificationAccessDenied as err:
            _LOGGER.warning("Notification access denied: %s", err)
            return [], True

    def _run_pass_locked(self) -> PassResult:
        start_ns = time.perf_counter_ns()
        settings = self._settings
        env = self._environment
        now = env.now()

        screen = env.screen_state()
        screen_on = screen == ScreenState.ON
        mode = settings.get_mode(env.is_charging(), screen != ScreenState.DOZE)
        dnd_active = settings.respect_dnd and env.zen_mode() > 0
        schedule_active = settings.in_alert_schedule(now) or screen_on
        timeout_ms = settings.get_seen_timeout(mode)

        _LOGGER.debug(
            "Pass: mode=%s dnd=%s schedule=%s timeout=%d",
            mode.value,
            dnd_active,
            schedule_active,
            timeout_ms,
        )

        trace: PassTrace | None = None
        if self._trace_config.should_trace():
            trace = PassTrace.start(
                mode=mode.value,
                dnd_active=dnd_active,
                schedule_active=schedule_active,
                timeout_ms=timeout_ms,
                started_at=now,
            )

        live, denied = self._list_live()
        records = self.tracker.prune(
            live,
            screen_on and settings.seen_if_screen_on,
            timeout_ms,
        )

        colors: list[int] = []
        active: list[ActiveNotification] = []
        gated = dnd_active or not schedule_active
        for record in records:
            channel = record.channel_name
            resolution = self._resolver.resolve(record)
            active.append(ActiveNotification(record.package, channel, record.ticker))

            _LOGGER.debug(
                "%s [%s] (%s) --> %s / %s --> %s",
                record.key,
                record.package,
                channel,
                format_argb(resolution.channel_color),
                format_argb(record.accent_color),
                format_argb(resolution.color),
            )

            if trace is not None:
                trace.decisions.append(
                    ColorDecision(
                        key=record.key,
                        package=record.package,
                        channel=channel,
                        channel_color=resolution.channel_color,
                        accent_color=record.accent_color,
                        color=resolution.color,
                        suppressed=resolution.suppressed,
                        from_user=resolution.from_user,
                        gated=gated,
                    )
                )

            # Black means the user muted this channel
            if resolution.suppressed:
                continue
            if not gated and resolution.color not in colors:
                colors.append(resolution.color)

        self._active = active
        new_colors = tuple(sorted(colors))
        changed = new_colors != self._current_colors
        if changed:
            _LOGGER.debug(
                "Colors changed: %s",
                " ".join(format_argb(c) for c in new_colors) or "(none)",
            )
            self._current_colors = new_colors
            if self.motion is not None:
                self.motion.reset()
            self.apply()

        if new_colors and timeout_ms > 0:
            delay_ms = self.tracker.ms_until_next_expiry(timeout_ms)
            if delay_ms is None:
                delay_ms = timeout_ms
            self._scheduler.schedule_timeout(delay_ms / 1000.0)
        self._scheduler.arm_schedule_alarm(settings.seconds_until_schedule_change(now))

        if trace is not None:
            trace.live_count = len(live)
            trace.access_denied = denied
            trace.colors = new_colors
            trace.changed = changed
            trace.duration_us = (time.perf_counter_ns() - start_ns) // 1000
            self._emitter.emit(trace)

        return PassResult(
            colors=new_colors,
            changed=changed,
            mode=mode,
            dnd_active=dnd_active,
            schedule_active=schedule_active,
            timeout_ms=timeout_ms,
        )
