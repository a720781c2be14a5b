"""Contracts for the host, renderer and motion sensor.

Implementations live outside this package. The engine only depends on
these abstract interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from enum import Enum

from .notification import NotificationRecord


class MotionState(Enum):
    """Device motion as reported by the sensor driver."""

    UNKNOWN = "unknown"
    STATIONARY = "stationary"
    MOVING = "moving"


# Listener receives (state, duration in state in ms) and returns whether it
# still wants updates.
MotionListener = Callable[[MotionState, int], bool]


class NotificationSource(ABC):
    """Host notification service."""

    @abstractmethod
    def list_live_notifications(self) -> Sequence[NotificationRecord]:
        """Return every live notification.

        Raises:
            NotificationAccessDenied: If the host refuses access.
        """


class Renderer(ABC):
    """Overlay that paints colors around the display cutout."""

    @abstractmethod
    def show(self, colors: Sequence[int]) -> None:
        """Show the given colors. An empty sequence shows nothing."""

    @abstractmethod
    def hide(self, immediate: bool) -> None:
        """Hide the overlay."""


class MotionSensor(ABC):
    """Motion sensor driver."""

    @abstractmethod
    def start(self, listener: MotionListener) -> None:
        """Subscribe listener. Subscribing twice is a no-op."""

    @abstractmethod
    def stop(self, listener: MotionListener) -> None:
        """Unsubscribe listener."""
