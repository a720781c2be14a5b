"""Seen/unseen lifecycle tracking for live notifications.

The tracker remembers every notification observed in recent passes so that
an already-seen notification does not light up again as new, and so that
seen notifications can expire after the mode's timeout.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .notification import NotificationRecord


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass
class TrackedEntry:
    """Per-notification bookkeeping.

    Attributes:
        key: Notification key.
        first_seen_ms: When this occurrence was first observed.
        fingerprint: Content fingerprint at last observation.
        seen: Whether the user is considered to have seen it.
        seen_at_ms: When it was marked seen (None while unseen).
    """

    key: str
    first_seen_ms: float
    fingerprint: tuple[Any, ...]
    seen: bool = False
    seen_at_ms: float | None = None

    def mark_seen(self, now_ms: float) -> None:
        if self.seen:
            return
        self.seen = True
        self.seen_at_ms = now_ms

    def is_expired(self, now_ms: float, timeout_ms: int) -> bool:
        if timeout_ms <= 0 or not self.seen or self.seen_at_ms is None:
            return False
        return now_ms - self.seen_at_ms >= timeout_ms


class NotificationTracker:
    """Tracks which live notifications still contribute colors."""

    def __init__(self, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self._entries: dict[str, TrackedEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> TrackedEntry | None:
        return self._entries.get(key)

    def prune(
        self,
        live_records: Iterable[NotificationRecord],
        force_mark_seen: bool,
        timeout_ms: int,
    ) -> list[NotificationRecord]:
        """Reconcile tracked entries with the live set.

        Args:
            live_records: Every notification the host currently reports.
            force_mark_seen: Mark every live notification as seen.
            timeout_ms: Seen timeout for the current mode (<= 0 disables).

        Returns:
            Live records that still contribute colors.
        """
        now = self._clock()

        # Duplicate keys: last write wins
        latest: dict[str, NotificationRecord] = {}
        for record in live_records:
            latest[record.key] = record

        for key in [k for k in self._entries if k not in latest]:
            del self._entries[key]

        contributing: list[NotificationRecord] = []
        for key, record in latest.items():
            fingerprint = record.fingerprint
            entry = self._entries.get(key)
            if entry is None or entry.fingerprint != fingerprint:
                # An edited notification counts as new
                entry = TrackedEntry(key=key, first_seen_ms=now, fingerprint=fingerprint)
                self._entries[key] = entry

            if force_mark_seen:
                entry.mark_seen(now)

            if entry.is_expired(now, timeout_ms):
                continue
            contributing.append(record)

        return contributing

    def ms_until_next_expiry(self, timeout_ms: int) -> float | None:
        """Milliseconds until the earliest seen entry expires.

        Entries that already expired or are still unseen are ignored.
        """
        if timeout_ms <= 0:
            return None
        now = self._clock()
        pending = [
            entry.seen_at_ms + timeout_ms - now
            for entry in self._entries.values()
            if entry.seen_at_ms is not None and not entry.is_expired(now, timeout_ms)
        ]
        return min(pending, default=None)

    def mark_all_as_seen(self) -> None:
        now = self._clock()
        for entry in self._entries.values():
            entry.mark_seen(now)

    def clear(self) -> None:
        self._entries.clear()
