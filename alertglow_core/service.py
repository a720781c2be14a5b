"""Notification light service: lifecycle context for the engine.

The service is constructed by the host, connected when the host's
notification listener connects, and disconnected when it goes away. All
engine state lives on the service instance; nothing is process-global.

Usage:
    service = NotificationLightService(source, settings, environment, renderer, sensor)
    await service.connect()
    service.handle_event(ServiceEvent.NOTIFICATION_POSTED)
    colors = service.current_colors
    await service.disconnect()
"""

from __future__ import annotations

import asyncio
import logging

from .collaborators import MotionSensor, NotificationSource, Renderer
from .engine import ArbitrationEngine, PassResult
from .environment import Environment, ScreenState
from .events import EventContext, EventEffect, ServiceEvent, classify_event
from .motion import PICKUP_STATIONARY_MS, PickupDismissal
from .notification import ActiveNotification
from .scheduler import DEFAULT_DEBOUNCE_INTERVAL, PassScheduler
from .settings import LightSettings
from .trace import TraceConfig, TraceEmitter
from .tracker import NotificationTracker

_LOGGER = logging.getLogger(__name__)


class NotificationLightService:
    """Connects host events to the arbitration engine."""

    def __init__(
        self,
        source: NotificationSource,
        settings: LightSettings,
        environment: Environment,
        renderer: Renderer,
        motion_sensor: MotionSensor,
        *,
        host_package: str | None = None,
        debounce_interval: float = DEFAULT_DEBOUNCE_INTERVAL,
        pickup_stationary_ms: int = PICKUP_STATIONARY_MS,
        tracker: NotificationTracker | None = None,
        trace_config: TraceConfig | None = None,
        emitter: TraceEmitter | None = None,
    ) -> None:
        """Initialize service.

        Args:
            source: Host notification source
            settings: Settings store
            environment: Device state oracles
            renderer: Overlay renderer
            motion_sensor: Motion sensor driver
            host_package: Package id of the hosting application
            debounce_interval: Pass debounce window (seconds)
            pickup_stationary_ms: Stationary time before a pickup counts (ms)
            tracker: Notification tracker (a fresh one by default)
            trace_config: Pass tracing configuration
            emitter: Trace emitter
        """
        self._source = source
        self._settings = settings
        self._environment = environment
        self._renderer = renderer
        self._motion_sensor = motion_sensor
        self._host_package = host_package
        self._debounce_interval = debounce_interval
        self._pickup_stationary_ms = pickup_stationary_ms
        self._tracker = tracker or NotificationTracker()
        self._trace_config = trace_config
        self._emitter = emitter

        self._loop: asyncio.AbstractEventLoop | None = None
        self._scheduler: PassScheduler | None = None
        self._engine: ArbitrationEngine | None = None
        self._pickup: PickupDismissal | None = None
        self._connected = False
        self._last_result: PassResult | None = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def engine(self) -> ArbitrationEngine | None:
        return self._engine

    @property
    def current_colors(self) -> tuple[int, ...]:
        if self._engine is None:
            return ()
        return self._engine.current_colors

    @property
    def user_present(self) -> bool:
        return self._engine is not None and self._engine.user_present

    @property
    def last_result(self) -> PassResult | None:
        return self._last_result

    def get_currently_active_notifications(self) -> list[ActiveNotification]:
        if self._engine is None:
            return []
        return self._engine.get_currently_active_notifications()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Start tracking notifications on the running event loop."""
        if self._connected:
            return

        _LOGGER.info("Notification listener connected")
        self._loop = asyncio.get_running_loop()
        self._scheduler = PassScheduler(
            self._run_pass,
            loop=self._loop,
            debounce_interval=self._debounce_interval,
        )
        engine = ArbitrationEngine(
            self._source,
            self._settings,
            self._environment,
            self._renderer,
            self._scheduler,
            tracker=self._tracker,
            host_package=self._host_package,
            trace_config=self._trace_config,
            emitter=self._emitter,
        )
        self._pickup = PickupDismissal(
            self._motion_sensor,
            can_dismiss=engine.pickup_allowed,
            wanted=engine.wants_motion_sensor,
            on_pickup=self._on_pickup,
            stationary_threshold_ms=self._pickup_stationary_ms,
        )
        engine.motion = self._pickup
        engine.reset()
        engine.user_present = (
            self._environment.screen_state() == ScreenState.ON
            and not self._environment.is_locked()
        )
        self._engine = engine
        self._connected = True

        self._settings.add_listener(self._on_settings_changed)
        self.trigger()
        self._pickup.update_subscription()

    async def disconnect(self) -> None:
        """Stop tracking and hide the overlay."""
        if not self._connected:
            return

        _LOGGER.info("Notification listener disconnected")
        self._connected = False
        self._settings.remove_listener(self._on_settings_changed)
        if self._scheduler is not None:
            self._scheduler.cancel()
        if self._pickup is not None:
            self._pickup.detach()
        self._renderer.hide(True)
        if self._engine is not None:
            self._engine.reset()

        self._scheduler = None
        self._pickup = None
        self._engine = None
        self._loop = None

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def trigger(self) -> None:
        """Request re-evaluation (debounced)."""
        if not self._connected or self._scheduler is None:
            return
        self._scheduler.request()

    def trigger_threadsafe(self) -> None:
        """Request re-evaluation from a thread other than the event loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.trigger)

    def handle_event(self, event: ServiceEvent) -> EventEffect:
        """Apply an inbound event."""
        _LOGGER.debug("Event: %s", event.value)
        context = EventContext(
            locked=self._environment.is_locked(),
            seen_on_lockscreen=self._settings.seen_on_lockscreen,
            seen_on_user_present=self._settings.seen_on_user_present,
        )
        effect = classify_event(event, context)

        engine = self._engine
        if engine is not None:
            if effect.user_present is not None:
                engine.user_present = effect.user_present
            if effect.reload_settings and engine.refresh_enabled():
                engine.apply()
            if effect.mark_all_seen:
                engine.mark_all_seen()
            if effect.refresh_motion and self._pickup is not None:
                self._pickup.update_subscription()

        if effect.trigger:
            self.trigger()
        return effect

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_pass(self) -> None:
        if not self._connected or self._engine is None:
            return
        self._last_result = self._engine.run_pass()

    def _on_settings_changed(self) -> None:
        if self._connected:
            self.handle_event(ServiceEvent.SETTINGS_CHANGED)

    def _on_pickup(self) -> None:
        # Runs on the motion sensor thread
        if self._engine is not None:
            self._engine.mark_all_seen()
        self.trigger_threadsafe()
