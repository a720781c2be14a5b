"""Light settings: policy modes, alert schedule and color overrides.

Settings are treated as data. They can be built in code or loaded from a
YAML file with load_settings(). Every mutation notifies registered
listeners so the engine can re-evaluate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from datetime import datetime, time, timedelta
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .colors import ColorOverride, OverrideStore, format_argb, parse_argb
from .errors import SettingsLoadError

_LOGGER = logging.getLogger(__name__)


class Mode(Enum):
    """Policy mode, selected from charging state and display state."""

    ON_CHARGER = "on_charger"
    ON_BATTERY = "on_battery"
    DOZE_ON_CHARGER = "doze_on_charger"
    DOZE_ON_BATTERY = "doze_on_battery"

    @classmethod
    def select(cls, charging: bool, awake: bool) -> Mode:
        if awake:
            return cls.ON_CHARGER if charging else cls.ON_BATTERY
        return cls.DOZE_ON_CHARGER if charging else cls.DOZE_ON_BATTERY


@dataclass(frozen=True)
class ModePolicy:
    """Per-mode policy.

    Attributes:
        seen_timeout_ms: Seen notifications stop lighting after this many
            milliseconds (0 disables expiry).
        seen_pickup: Picking up the device marks notifications seen.
    """

    seen_timeout_ms: int = 0
    seen_pickup: bool = False


@dataclass(frozen=True)
class AlertSchedule:
    """Daily window during which colors may be shown while the screen is off.

    Attributes:
        start: Start time (e.g., 07:00).
        end: End time (e.g., 23:00).
    """

    start: time
    end: time

    def is_active(self, current: time) -> bool:
        """Check if the schedule allows colors at the given time.

        Handles overnight windows (e.g., 22:00 to 07:00). Equal start and
        end means the whole day.
        """
        if self.start == self.end:
            return True
        if self.start < self.end:
            # Same-day window (e.g., 07:00 to 23:00)
            return self.start <= current < self.end
        # Overnight window (e.g., 22:00 to 07:00)
        return current >= self.start or current < self.end

    def seconds_until_change(self, now: datetime) -> float | None:
        """Seconds until the next start or end boundary, None if never."""
        if self.start == self.end:
            return None
        boundaries: list[datetime] = []
        for offset in (0, 1):
            day = now.date() + timedelta(days=offset)
            boundaries.append(datetime.combine(day, self.start, tzinfo=now.tzinfo))
            boundaries.append(datetime.combine(day, self.end, tzinfo=now.tzinfo))
        upcoming = min(b for b in boundaries if b > now)
        return (upcoming - now).total_seconds()


DEFAULT_MODES: dict[Mode, ModePolicy] = {
    Mode.ON_CHARGER: ModePolicy(),
    Mode.ON_BATTERY: ModePolicy(seen_pickup=True),
    Mode.DOZE_ON_CHARGER: ModePolicy(),
    Mode.DOZE_ON_BATTERY: ModePolicy(seen_pickup=True),
}


@dataclass
class LightSettings(OverrideStore):
    """In-memory settings store.

    Attributes:
        enabled: Master switch for showing colors.
        respect_dnd: Suppress colors while do-not-disturb is on.
        seen_if_screen_on: Notifications are seen while the screen is on.
        seen_on_lockscreen: Turning the screen on at the lockscreen marks
            notifications seen.
        seen_on_user_present: Unlocking marks notifications seen.
        schedule: Alert schedule (None means always).
        modes: Policy per mode.
    """

    enabled: bool = True
    respect_dnd: bool = True
    seen_if_screen_on: bool = True
    seen_on_lockscreen: bool = False
    seen_on_user_present: bool = False
    schedule: AlertSchedule | None = None
    modes: dict[Mode, ModePolicy] = field(default_factory=lambda: dict(DEFAULT_MODES))

    _colors: dict[tuple[str, str], ColorOverride] = field(
        default_factory=lambda: {}, repr=False
    )
    _listeners: list[Callable[[], None]] = field(default_factory=lambda: [], repr=False)

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register callback invoked after every settings change."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def notify_changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    def update(self, **changes: Any) -> None:
        """Change one or more policy fields and notify listeners."""
        known = {f.name for f in fields(self) if not f.name.startswith("_")}
        for name, value in changes.items():
            if name not in known:
                raise AttributeError(f"Unknown setting: {name}")
            setattr(self, name, value)
        self.notify_changed()

    # -------------------------------------------------------------------------
    # Policy queries
    # -------------------------------------------------------------------------

    def get_mode(self, charging: bool, awake: bool) -> Mode:
        return Mode.select(charging, awake)

    def policy_for(self, mode: Mode) -> ModePolicy:
        return self.modes.get(mode, DEFAULT_MODES[mode])

    def get_seen_timeout(self, mode: Mode) -> int:
        return self.policy_for(mode).seen_timeout_ms

    def is_seen_pickup_while(self, mode: Mode) -> bool:
        return self.policy_for(mode).seen_pickup

    def in_alert_schedule(self, now: datetime) -> bool:
        if self.schedule is None:
            return True
        return self.schedule.is_active(now.time())

    def seconds_until_schedule_change(self, now: datetime) -> float | None:
        if self.schedule is None:
            return None
        return self.schedule.seconds_until_change(now)

    # -------------------------------------------------------------------------
    # Color overrides
    # -------------------------------------------------------------------------

    def read_color(self, package: str, channel: str) -> ColorOverride | None:
        return self._colors.get((package, channel))

    def write_default_color(self, package: str, channel: str, color: int) -> None:
        key = (package, channel)
        current = self._colors.get(key)
        if current is not None and (current.user_set or current.color == color):
            return
        self._colors[key] = ColorOverride(color=color, user_set=False)
        _LOGGER.debug("Default color %s (%s) -> %s", package, channel, format_argb(color))
        self.notify_changed()

    def set_user_color(self, package: str, channel: str, color: int) -> None:
        """Pin a user-chosen color. Opaque black mutes the channel."""
        self._colors[(package, channel)] = ColorOverride(color=color, user_set=True)
        self.notify_changed()

    def clear_user_color(self, package: str, channel: str) -> None:
        if self._colors.pop((package, channel), None) is not None:
            self.notify_changed()

    def color_overrides(self) -> dict[tuple[str, str], ColorOverride]:
        """Copy of all stored overrides."""
        return dict(self._colors)


def _parse_time(time_str: str) -> time:
    """Parse HH:MM time string."""
    parts = str(time_str).split(":")
    try:
        return time(int(parts[0]), int(parts[1]))
    except (IndexError, ValueError) as err:
        raise SettingsLoadError(f"Invalid time: {time_str!r}") from err


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise SettingsLoadError(f"File not found: {path}")
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise SettingsLoadError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise SettingsLoadError(f"Expected a mapping in {path}")
    return data


def _parse_modes(data: Any) -> dict[Mode, ModePolicy]:
    if not isinstance(data, dict):
        raise SettingsLoadError(f"Expected a mapping of modes, got {data!r}")
    modes = dict(DEFAULT_MODES)
    for name, mode_data in data.items():
        try:
            mode = Mode(name)
        except ValueError as err:
            raise SettingsLoadError(f"Unknown mode: {name}") from err
        mode_data = mode_data or {}
        try:
            modes[mode] = ModePolicy(
                seen_timeout_ms=int(mode_data.get("seen_timeout_ms", 0)),
                seen_pickup=bool(mode_data.get("seen_pickup", False)),
            )
        except (AttributeError, TypeError, ValueError) as err:
            raise SettingsLoadError(f"Invalid mode {name}: {mode_data!r}") from err
    return modes


def _parse_schedule(data: Any) -> AlertSchedule:
    try:
        return AlertSchedule(start=_parse_time(data["start"]), end=_parse_time(data["end"]))
    except (KeyError, TypeError) as err:
        raise SettingsLoadError(f"Invalid schedule: {data!r}") from err


def settings_from_dict(data: dict[str, Any]) -> LightSettings:
    """Build settings from a parsed configuration mapping.

    Raises:
        SettingsLoadError: If a value has the wrong shape or type.
    """
    schedule = None
    if sched := data.get("schedule"):
        schedule = _parse_schedule(sched)

    settings = LightSettings(
        enabled=bool(data.get("enabled", True)),
        respect_dnd=bool(data.get("respect_dnd", True)),
        seen_if_screen_on=bool(data.get("seen_if_screen_on", True)),
        seen_on_lockscreen=bool(data.get("seen_on_lockscreen", False)),
        seen_on_user_present=bool(data.get("seen_on_user_present", False)),
        schedule=schedule,
        modes=_parse_modes(data.get("modes") or {}),
    )

    colors = data.get("colors") or {}
    if not isinstance(colors, dict):
        raise SettingsLoadError(f"Expected a mapping of colors, got {colors!r}")
    for package, channels in colors.items():
        if not isinstance(channels or {}, dict):
            raise SettingsLoadError(f"Expected a mapping of channels for {package}")
        for channel, value in (channels or {}).items():
            try:
                color = parse_argb(value)
            except ValueError as err:
                raise SettingsLoadError(f"{package} ({channel}): {err}") from err
            settings._colors[(str(package), str(channel))] = ColorOverride(
                color=color, user_set=True
            )

    return settings


def load_settings(path: Path) -> LightSettings:
    """Load light settings from a YAML file.

    Raises:
        SettingsLoadError: If the file is missing or holds invalid values.
    """
    settings = settings_from_dict(_load_yaml(path))
    _LOGGER.info("Loaded light settings from %s", path)
    return settings
