"""Notification records as reported by the host, and derived snapshots.

Records are treated as read-only input. The engine never mutates them; it
only derives ActiveNotification snapshots for observers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# Channel name used when a notification carries no channel id.
LEGACY_CHANNEL = "legacy"

_CHANNEL_UNSAFE = re.compile(r"[^a-zA-Z0-9_:.-]")


def sanitize_channel_id(channel_id: str | None) -> str:
    """Normalize a channel id for use as a settings key.

    Returns LEGACY_CHANNEL when the notification has no channel.
    """
    if channel_id is None:
        return LEGACY_CHANNEL
    return _CHANNEL_UNSAFE.sub("_", channel_id)


@dataclass(frozen=True)
class NotificationRecord:
    """A live notification reported by the host.

    Attributes:
        key: Unique notification key.
        package: Owning package identifier.
        channel_id: Raw channel id (None for legacy notifications).
        light_color: Channel light color (ARGB), or None when the channel
            does not exist or has lights disabled.
        accent_color: Notification accent color (ARGB), 0 when absent.
        title: Display title.
        ticker: Ticker text.
        post_time: Post timestamp (epoch milliseconds).
    """

    key: str
    package: str
    channel_id: str | None = None
    light_color: int | None = None
    accent_color: int = 0
    title: str | None = None
    ticker: str | None = None
    post_time: int = 0

    @property
    def channel_name(self) -> str:
        """Sanitized channel name."""
        return sanitize_channel_id(self.channel_id)

    @property
    def lights_requested(self) -> bool:
        """Whether the notification's channel asks for a light."""
        return self.channel_id is not None and self.light_color is not None

    @property
    def fingerprint(self) -> tuple[Any, ...]:
        """Content fingerprint; a change means the notification was edited."""
        return (
            self.post_time,
            self.channel_id,
            self.light_color,
            self.accent_color,
            self.title,
            self.ticker,
        )


@dataclass(frozen=True)
class ActiveNotification:
    """Snapshot of a notification that took part in the last pass."""

    package: str
    channel_name: str
    ticker: str | None = None
