"""Inbound events and their effect on the engine.

Every callback from the host (notification traffic, display and lock
changes, settings changes, timers) is expressed as a ServiceEvent.
classify_event() is pure: it only decides what the event should cause.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ServiceEvent(Enum):
    """Events consumed by the notification light service."""

    NOTIFICATION_POSTED = "notification_posted"
    NOTIFICATION_REMOVED = "notification_removed"
    CHANNEL_MODIFIED = "channel_modified"
    CHANNEL_GROUP_MODIFIED = "channel_group_modified"
    RANKING_UPDATE = "ranking_update"
    INTERRUPTION_FILTER_CHANGED = "interruption_filter_changed"
    ZEN_MODE_CHANGED = "zen_mode_changed"
    AOD_STATE_CHANGED = "aod_state_changed"
    SETTINGS_CHANGED = "settings_changed"
    SCREEN_ON = "screen_on"
    SCREEN_OFF = "screen_off"
    USER_PRESENT = "user_present"
    TIMER_EXPIRED = "timer_expired"
    SCHEDULE_BOUNDARY = "schedule_boundary"


@dataclass(frozen=True)
class EventContext:
    """Inputs needed to classify an event.

    Attributes:
        locked: Whether the lockscreen is showing.
        seen_on_lockscreen: Policy: lockscreen marks notifications seen.
        seen_on_user_present: Policy: unlocking marks notifications seen.
    """

    locked: bool = False
    seen_on_lockscreen: bool = False
    seen_on_user_present: bool = False


@dataclass(frozen=True)
class EventEffect:
    """What an event should cause.

    Attributes:
        trigger: Request a reconciliation pass.
        mark_all_seen: Mark every tracked notification as seen first.
        user_present: New user-present state (None leaves it unchanged).
        reload_settings: Re-read the enabled flag.
        refresh_motion: Re-evaluate the motion sensor subscription.
    """

    trigger: bool = True
    mark_all_seen: bool = False
    user_present: bool | None = None
    reload_settings: bool = False
    refresh_motion: bool = False


def classify_event(event: ServiceEvent, context: EventContext) -> EventEffect:
    """Map an event to its effect."""
    if event == ServiceEvent.SCREEN_OFF:
        return EventEffect(user_present=False)

    if event == ServiceEvent.SCREEN_ON:
        # Screen on while locked means the lockscreen is showing
        return EventEffect(
            mark_all_seen=context.locked and context.seen_on_lockscreen,
        )

    if event == ServiceEvent.USER_PRESENT:
        return EventEffect(
            mark_all_seen=context.seen_on_user_present,
            user_present=True,
            refresh_motion=True,
        )

    if event == ServiceEvent.SETTINGS_CHANGED:
        return EventEffect(reload_settings=True)

    return EventEffect()
