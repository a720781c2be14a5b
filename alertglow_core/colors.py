"""ARGB color helpers and per-notification color resolution.

Resolution order for a single notification:
1. Channel light color, or opaque black when no light was requested
2. Black light on a lit channel becomes white
3. White light borrows the notification accent color, dominant channel maxed
4. Stored user override wins over the computed color
5. Zero RGB means "muted" and the color is suppressed
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .notification import NotificationRecord


ALPHA_MASK = 0xFF000000
RGB_MASK = 0x00FFFFFF

BLACK = 0xFF000000
WHITE = 0xFFFFFFFF


def red(color: int) -> int:
    return (color >> 16) & 0xFF


def green(color: int) -> int:
    return (color >> 8) & 0xFF


def blue(color: int) -> int:
    return color & 0xFF


def rgb(color: int) -> int:
    """Strip alpha."""
    return color & RGB_MASK


def opaque(color: int) -> int:
    """Force full alpha on a color."""
    return (color | ALPHA_MASK) & 0xFFFFFFFF


def from_rgb(r: int, g: int, b: int) -> int:
    return ALPHA_MASK | (r << 16) | (g << 8) | b


def maximize_dominant(color: int) -> int:
    """Force the strongest RGB channel to 255, keeping the other two.

    Ties resolve to red, then green, then blue.
    """
    r, g, b = red(color), green(color), blue(color)
    if r >= g and r >= b:
        r = 255
    elif g >= r and g >= b:
        g = 255
    else:
        b = 255
    return from_rgb(r, g, b)


def format_argb(color: int | None) -> str:
    if color is None:
        return "#--------"
    return f"#{color & 0xFFFFFFFF:08X}"


def parse_argb(value: str | int) -> int:
    """Parse "#AARRGGBB", "#RRGGBB" or an integer into an ARGB int.

    Six-digit values are made opaque.

    Raises:
        ValueError: If the value is not a valid color.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid color: {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"Color out of range: {value!r}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid color: {value!r}")

    text = value.strip().lstrip("#")
    if text.lower().startswith("0x"):
        text = text[2:]
    if len(text) not in (6, 8):
        raise ValueError(f"Invalid color: {value!r}")
    parsed = int(text, 16)
    return opaque(parsed) if len(text) == 6 else parsed


@dataclass(frozen=True)
class ColorOverride:
    """Stored color for a (package, channel) pair.

    Attributes:
        color: ARGB color.
        user_set: True when explicitly chosen by the user; False for a
            default derived by a previous pass.
    """

    color: int
    user_set: bool = False


class OverrideStore(ABC):
    """Two-phase color override contract used by the resolver."""

    @abstractmethod
    def read_color(self, package: str, channel: str) -> ColorOverride | None:
        """Return the stored override, if any."""

    @abstractmethod
    def write_default_color(self, package: str, channel: str, color: int) -> None:
        """Store a derived default. Must not touch a user-set override."""


@dataclass(frozen=True)
class ColorResolution:
    """Outcome of resolving one notification.

    Attributes:
        color: Final ARGB color (always opaque).
        channel_color: Raw channel light color as reported.
        computed: Color derived from the notification before the store lookup.
        suppressed: True when the final RGB is zero (muted channel).
        from_user: True when a user override decided the color.
    """

    color: int
    channel_color: int | None
    computed: int
    suppressed: bool
    from_user: bool = False


class ColorResolver:
    """Maps a notification plus stored overrides into one ARGB color."""

    def __init__(self, store: OverrideStore, *, host_package: str | None = None) -> None:
        """Initialize resolver.

        Args:
            store: Override store consulted and updated on every resolve.
            host_package: Package id of the hosting application; its own
                notifications never borrow the accent color.
        """
        self._store = store
        self._host_package = host_package

    def compute(self, record: NotificationRecord) -> int:
        """Derive a color from the notification alone."""
        color = BLACK
        light = record.light_color if record.lights_requested else None
        if light is not None:
            color = light

            # Some producers pass black when they mean "default"
            if rgb(color) == 0:
                color = WHITE

            if (
                rgb(color) == RGB_MASK
                and rgb(record.accent_color) > 0
                and record.package != self._host_package
            ):
                color = maximize_dominant(record.accent_color)

        return opaque(color)

    def resolve(self, record: NotificationRecord) -> ColorResolution:
        channel = record.channel_name
        computed = self.compute(record)

        stored = self._store.read_color(record.package, channel)
        if stored is not None and stored.user_set:
            color = stored.color
            from_user = True
        else:
            color = computed
            from_user = False
            self._store.write_default_color(record.package, channel, computed)

        color = opaque(color)
        return ColorResolution(
            color=color,
            channel_color=record.light_color,
            computed=computed,
            suppressed=rgb(color) == 0,
            from_user=from_user,
        )
