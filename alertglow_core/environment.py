"""Environment oracles polled at the start of every pass."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ScreenState(Enum):
    """Display power state."""

    ON = "on"
    OFF = "off"
    DOZE = "doze"


class Environment(ABC):
    """Read-only view of device state."""

    @abstractmethod
    def is_charging(self) -> bool:
        """Whether the device is on a charger."""

    @abstractmethod
    def screen_state(self) -> ScreenState:
        """Current display state."""

    @abstractmethod
    def zen_mode(self) -> int:
        """Do-not-disturb level (0 = off)."""

    @abstractmethod
    def is_locked(self) -> bool:
        """Whether the lockscreen is showing."""

    def now(self) -> datetime:
        """Local wall-clock time, used for the alert schedule."""
        return datetime.now().astimezone()


@dataclass
class StaticEnvironment(Environment):
    """Environment backed by plain attributes.

    Useful for embedding hosts that push state in, and for tests.
    """

    charging: bool = False
    screen: ScreenState = ScreenState.OFF
    zen: int = 0
    locked: bool = True
    clock: datetime | None = field(default=None)

    def is_charging(self) -> bool:
        return self.charging

    def screen_state(self) -> ScreenState:
        return self.screen

    def zen_mode(self) -> int:
        return self.zen

    def is_locked(self) -> bool:
        return self.locked

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock
        return super().now()
