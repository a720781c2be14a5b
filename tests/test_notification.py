"""Tests for notification records and channel sanitizing."""

from __future__ import annotations

import pytest

from alertglow_core.notification import (
    LEGACY_CHANNEL,
    NotificationRecord,
    sanitize_channel_id,
)


@pytest.mark.parametrize(
    ("channel_id", "expected"),
    [
        ("messages", "messages"),
        ("com.example:chat-1_a", "com.example:chat-1_a"),
        ("group chat/1", "group_chat_1"),
        ("émoji✓", "_moji_"),
        ("", ""),
        (None, LEGACY_CHANNEL),
    ],
)
def test_sanitize_channel_id(channel_id: str | None, expected: str) -> None:
    assert sanitize_channel_id(channel_id) == expected


def test_lights_requested_needs_channel_and_color() -> None:
    assert NotificationRecord("k", "pkg", "chan", light_color=0).lights_requested
    assert not NotificationRecord("k", "pkg", "chan").lights_requested
    assert not NotificationRecord("k", "pkg", None, light_color=0xFFFFFFFF).lights_requested


def test_fingerprint_tracks_content() -> None:
    base = NotificationRecord("k", "pkg", "chan", ticker="one", post_time=1)
    same = NotificationRecord("k", "pkg", "chan", ticker="one", post_time=1)
    edited = NotificationRecord("k", "pkg", "chan", ticker="two", post_time=1)

    assert base.fingerprint == same.fingerprint
    assert base.fingerprint != edited.fingerprint
