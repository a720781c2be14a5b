"""Notification light arbitration core.

Owned by the AlertGlow Core team.
"""

__version__ = "0.1.0"

from .collaborators import MotionSensor, MotionState, NotificationSource, Renderer
from .colors import ColorOverride, ColorResolution, ColorResolver
from .engine import ArbitrationEngine, PassResult
from .environment import Environment, ScreenState, StaticEnvironment
from .errors import AlertGlowError, NotificationAccessDenied, SettingsLoadError
from .events import EventContext, EventEffect, ServiceEvent, classify_event
from .motion import PickupDismissal
from .notification import (
    LEGACY_CHANNEL,
    ActiveNotification,
    NotificationRecord,
    sanitize_channel_id,
)
from .scheduler import PassScheduler
from .service import NotificationLightService
from .settings import AlertSchedule, LightSettings, Mode, ModePolicy, load_settings
from .tracker import NotificationTracker, TrackedEntry

__all__ = [
    "LEGACY_CHANNEL",
    "ActiveNotification",
    "AlertGlowError",
    "AlertSchedule",
    "ArbitrationEngine",
    "ColorOverride",
    "ColorResolution",
    "ColorResolver",
    "Environment",
    "EventContext",
    "EventEffect",
    "LightSettings",
    "Mode",
    "ModePolicy",
    "MotionSensor",
    "MotionState",
    "NotificationAccessDenied",
    "NotificationLightService",
    "NotificationRecord",
    "NotificationSource",
    "NotificationTracker",
    "PassResult",
    "PassScheduler",
    "PickupDismissal",
    "Renderer",
    "ScreenState",
    "ServiceEvent",
    "SettingsLoadError",
    "StaticEnvironment",
    "TrackedEntry",
    "__version__",
    "classify_event",
    "load_settings",
    "sanitize_channel_id",
]
