"""Pytest configuration and fixtures for alertglow_core tests."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from alertglow_core.collaborators import (
    MotionListener,
    MotionSensor,
    NotificationSource,
    Renderer,
)
from alertglow_core.environment import ScreenState, StaticEnvironment
from alertglow_core.errors import NotificationAccessDenied
from alertglow_core.notification import NotificationRecord
from alertglow_core.settings import LightSettings


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 1_000_000.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class FakeSource(NotificationSource):
    """Notification source backed by a list."""

    def __init__(self, records: Sequence[NotificationRecord] = ()) -> None:
        self.records = list(records)
        self.denied = False
        self.calls = 0

    def list_live_notifications(self) -> list[NotificationRecord]:
        self.calls += 1
        if self.denied:
            raise NotificationAccessDenied("no companion device association")
        return list(self.records)


class FakeRenderer(Renderer):
    """Records show/hide calls."""

    def __init__(self) -> None:
        self.shown: list[list[int]] = []
        self.hidden: list[bool] = []

    def show(self, colors: Sequence[int]) -> None:
        self.shown.append(list(colors))

    def hide(self, immediate: bool) -> None:
        self.hidden.append(immediate)


class FakeMotionSensor(MotionSensor):
    """Tracks subscribed listeners."""

    def __init__(self) -> None:
        self.listeners: list[MotionListener] = []
        self.starts = 0
        self.stops = 0

    def start(self, listener: MotionListener) -> None:
        self.starts += 1
        if listener not in self.listeners:
            self.listeners.append(listener)

    def stop(self, listener: MotionListener) -> None:
        self.stops += 1
        if listener in self.listeners:
            self.listeners.remove(listener)


def make_record(
    key: str,
    package: str = "com.example.chat",
    channel_id: str | None = "messages",
    light_color: int | None = 0xFF00FF00,
    accent_color: int = 0,
    ticker: str | None = None,
    post_time: int = 1,
) -> NotificationRecord:
    return NotificationRecord(
        key=key,
        package=package,
        channel_id=channel_id,
        light_color=light_color,
        accent_color=accent_color,
        ticker=ticker if ticker is not None else f"ticker {key}",
        post_time=post_time,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def motion_sensor() -> FakeMotionSensor:
    return FakeMotionSensor()


@pytest.fixture
def settings() -> LightSettings:
    return LightSettings()


@pytest.fixture
def environment() -> StaticEnvironment:
    """Screen off, locked, on battery, noon."""
    return StaticEnvironment(
        charging=False,
        screen=ScreenState.OFF,
        zen=0,
        locked=True,
        clock=datetime(2024, 5, 1, 12, 0),
    )


@pytest.fixture
def scheduler() -> MagicMock:
    """Stand-in for PassScheduler."""
    return MagicMock()
