"""Error types for notification light arbitration.

Owned by the AlertGlow Core team.
"""

from __future__ import annotations


class AlertGlowError(Exception):
    """Base error for notification light arbitration failures."""


class NotificationAccessDenied(AlertGlowError):
    """The host refused to list live notifications."""


class SettingsLoadError(AlertGlowError):
    """Error loading light settings from a configuration file."""
