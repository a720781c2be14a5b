"""Tests for light settings, alert schedule and YAML loading."""

from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

import pytest

from alertglow_core.colors import ColorOverride
from alertglow_core.errors import SettingsLoadError
from alertglow_core.settings import (
    AlertSchedule,
    LightSettings,
    Mode,
    ModePolicy,
    load_settings,
)

SETTINGS_YAML = """\
enabled: true
respect_dnd: false
seen_if_screen_on: false
seen_on_lockscreen: true
schedule:
  start: "07:00"
  end: "23:30"
modes:
  on_battery:
    seen_timeout_ms: 30000
    seen_pickup: true
  doze_on_charger:
    seen_timeout_ms: 60000
colors:
  com.example.chat:
    messages: "#FF00FF00"
    muted: "#000000"
"""


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(SETTINGS_YAML)
    return path


class TestModeSelection:
    """Mode follows charging and display state."""

    def test_select(self) -> None:
        assert Mode.select(charging=True, awake=True) == Mode.ON_CHARGER
        assert Mode.select(charging=False, awake=True) == Mode.ON_BATTERY
        assert Mode.select(charging=True, awake=False) == Mode.DOZE_ON_CHARGER
        assert Mode.select(charging=False, awake=False) == Mode.DOZE_ON_BATTERY

    def test_policy_queries(self) -> None:
        settings = LightSettings()
        settings.modes[Mode.ON_CHARGER] = ModePolicy(seen_timeout_ms=1_000, seen_pickup=True)

        assert settings.get_seen_timeout(Mode.ON_CHARGER) == 1_000
        assert settings.is_seen_pickup_while(Mode.ON_CHARGER)


class TestAlertSchedule:
    """Schedule window and boundary computation."""

    def test_same_day_window(self) -> None:
        schedule = AlertSchedule(start=time(7, 0), end=time(23, 0))
        assert schedule.is_active(time(7, 0))
        assert schedule.is_active(time(12, 0))
        assert not schedule.is_active(time(23, 0))
        assert not schedule.is_active(time(3, 0))

    def test_overnight_window(self) -> None:
        schedule = AlertSchedule(start=time(22, 0), end=time(7, 0))
        assert schedule.is_active(time(23, 0))
        assert schedule.is_active(time(6, 59))
        assert not schedule.is_active(time(12, 0))

    def test_equal_bounds_means_always(self) -> None:
        schedule = AlertSchedule(start=time(8, 0), end=time(8, 0))
        assert schedule.is_active(time(3, 0))
        assert schedule.seconds_until_change(datetime(2024, 5, 1, 12, 0)) is None

    def test_seconds_until_end(self) -> None:
        schedule = AlertSchedule(start=time(7, 0), end=time(23, 0))
        now = datetime(2024, 5, 1, 22, 30)
        assert schedule.seconds_until_change(now) == 1800.0

    def test_seconds_until_tomorrow_start(self) -> None:
        schedule = AlertSchedule(start=time(7, 0), end=time(23, 0))
        now = datetime(2024, 5, 1, 23, 0)
        assert schedule.seconds_until_change(now) == 8 * 3600.0

    def test_no_schedule_is_always_active(self) -> None:
        settings = LightSettings()
        now = datetime(2024, 5, 1, 3, 0)
        assert settings.in_alert_schedule(now)
        assert settings.seconds_until_schedule_change(now) is None


class TestColorOverrides:
    """Two-phase override contract."""

    def test_write_default_does_not_clobber_user_choice(self) -> None:
        settings = LightSettings()
        settings.set_user_color("pkg", "chan", 0xFF112233)

        settings.write_default_color("pkg", "chan", 0xFF445566)

        assert settings.read_color("pkg", "chan") == ColorOverride(0xFF112233, True)

    def test_write_default_notifies_only_on_change(self) -> None:
        settings = LightSettings()
        calls: list[int] = []
        settings.add_listener(lambda: calls.append(1))

        settings.write_default_color("pkg", "chan", 0xFF445566)
        settings.write_default_color("pkg", "chan", 0xFF445566)

        assert len(calls) == 1

    def test_clear_user_color(self) -> None:
        settings = LightSettings()
        settings.set_user_color("pkg", "chan", 0xFF112233)
        settings.clear_user_color("pkg", "chan")
        assert settings.read_color("pkg", "chan") is None

    def test_overrides_copy(self) -> None:
        settings = LightSettings()
        settings.set_user_color("pkg", "chan", 0xFF112233)
        settings.color_overrides().clear()
        assert settings.read_color("pkg", "chan") is not None


class TestListeners:
    """Change notification."""

    def test_update_notifies(self) -> None:
        settings = LightSettings()
        calls: list[int] = []
        settings.add_listener(lambda: calls.append(1))

        settings.update(enabled=False, respect_dnd=False)

        assert not settings.enabled
        assert not settings.respect_dnd
        assert calls == [1]

    def test_update_rejects_unknown(self) -> None:
        settings = LightSettings()
        with pytest.raises(AttributeError):
            settings.update(get_mode=None)
        with pytest.raises(AttributeError):
            settings.update(_colors={})

    def test_remove_listener(self) -> None:
        settings = LightSettings()
        calls: list[int] = []

        def listener() -> None:
            calls.append(1)

        settings.add_listener(listener)
        settings.add_listener(listener)
        settings.remove_listener(listener)
        settings.notify_changed()

        assert calls == []


class TestLoading:
    """YAML loading."""

    def test_load_settings(self, settings_file: Path) -> None:
        settings = load_settings(settings_file)

        assert settings.enabled
        assert not settings.respect_dnd
        assert not settings.seen_if_screen_on
        assert settings.seen_on_lockscreen
        assert not settings.seen_on_user_present
        assert settings.schedule == AlertSchedule(start=time(7, 0), end=time(23, 30))
        assert settings.get_seen_timeout(Mode.ON_BATTERY) == 30_000
        assert settings.is_seen_pickup_while(Mode.ON_BATTERY)
        assert settings.get_seen_timeout(Mode.DOZE_ON_CHARGER) == 60_000
        assert not settings.is_seen_pickup_while(Mode.DOZE_ON_CHARGER)
        # Untouched modes keep their defaults
        assert settings.is_seen_pickup_while(Mode.DOZE_ON_BATTERY)

    def test_load_user_colors(self, settings_file: Path) -> None:
        settings = load_settings(settings_file)

        assert settings.read_color("com.example.chat", "messages") == ColorOverride(
            0xFF00FF00, True
        )
        assert settings.read_color("com.example.chat", "muted") == ColorOverride(
            0xFF000000, True
        )

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(tmp_path / "missing.yaml")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        settings = load_settings(path)

        assert settings.enabled
        assert settings.schedule is None

    def test_unknown_mode(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("modes:\n  sideways: {seen_timeout_ms: 1}\n")

        with pytest.raises(SettingsLoadError, match="sideways"):
            load_settings(path)

    def test_bad_color(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text('colors:\n  pkg:\n    chan: "#12"\n')

        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_bad_time(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text('schedule: {start: "seven", end: "23:00"}\n')

        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(SettingsLoadError):
            load_settings(path)

    @pytest.mark.parametrize(
        "text",
        [
            "modes:\n  on_battery: {seen_timeout_ms: abc}\n",
            "modes:\n  on_battery: 5\n",
            "modes:\n  - on_battery\n",
            'schedule: {start: "07:00"}\n',
            "schedule: 7\n",
            "colors:\n  pkg:\n    chan: 1.5\n",
            "colors:\n  pkg: [red]\n",
            "colors: red\n",
        ],
        ids=[
            "timeout-not-a-number",
            "mode-not-a-mapping",
            "modes-not-a-mapping",
            "schedule-missing-end",
            "schedule-not-a-mapping",
            "color-float",
            "channels-not-a-mapping",
            "colors-not-a-mapping",
        ],
    )
    def test_malformed_values(self, tmp_path: Path, text: str) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(text)

        with pytest.raises(SettingsLoadError):
            load_settings(path)
