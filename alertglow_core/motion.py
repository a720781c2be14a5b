"""Pickup dismissal: stationary-then-moving marks notifications seen."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .collaborators import MotionSensor, MotionState

_LOGGER = logging.getLogger(__name__)

# Stationary time required before movement counts as a pickup.
PICKUP_STATIONARY_MS = 10_000


class PickupDismissal:
    """Turns stationary-to-moving transitions into "mark all seen" events.

    Usage:
        pickup = PickupDismissal(
            sensor,
            can_dismiss=engine.pickup_allowed,
            wanted=engine.wants_motion_sensor,
            on_pickup=service.on_pickup,
        )
        pickup.update_subscription()
    """

    def __init__(
        self,
        sensor: MotionSensor,
        *,
        can_dismiss: Callable[[], bool],
        wanted: Callable[[], bool],
        on_pickup: Callable[[], None],
        stationary_threshold_ms: int = PICKUP_STATIONARY_MS,
    ) -> None:
        """Initialize pickup dismissal.

        Args:
            sensor: Motion sensor driver.
            can_dismiss: Whether the current mode allows pickup dismissal.
            wanted: Whether the sensor subscription is needed at all.
            on_pickup: Called when a pickup is detected.
            stationary_threshold_ms: Minimum stationary time before a pickup.
        """
        self._sensor = sensor
        self._can_dismiss = can_dismiss
        self._wanted = wanted
        self._on_pickup = on_pickup
        self._threshold_ms = stationary_threshold_ms

        self.state = MotionState.UNKNOWN
        self.stationary_for_ms = 0
        self._subscribed = False

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def on_motion(self, state: MotionState, duration_ms: int) -> bool:
        """Sensor callback. Returns whether updates are still wanted."""
        if state != self.state:
            _LOGGER.debug("Motion -> %s", state.value)
            self.state = state

        if state == MotionState.STATIONARY:
            self.stationary_for_ms = duration_ms
        else:
            if (
                state == MotionState.MOVING
                and self.stationary_for_ms >= self._threshold_ms
                and self._can_dismiss()
            ):
                _LOGGER.info("Pickup after %d ms stationary", self.stationary_for_ms)
                self._on_pickup()
            self.stationary_for_ms = 0

        wanted = self._wanted()
        if not wanted:
            self._subscribed = False
        return wanted

    def reset(self) -> None:
        """Restart stationary accounting."""
        self.stationary_for_ms = 0

    def update_subscription(self) -> None:
        """Subscribe or unsubscribe according to the current need."""
        if self._wanted():
            if not self._subscribed:
                self._sensor.start(self.on_motion)
                self._subscribed = True
        elif self._subscribed:
            self.detach()

    def detach(self) -> None:
        self._sensor.stop(self.on_motion)
        self._subscribed = False
