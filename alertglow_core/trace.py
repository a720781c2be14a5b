"""Reconciliation pass traces for debugging and tuning.

Tracing is opt-in. A trace is emitted once the pass has published its
colors, so emitters see the final outcome and never delay the renderer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4


@dataclass
class TraceConfig:
    """Configuration for trace emission.

    Sampling is deterministic: with a rate of 0.25 every fourth pass is
    traced, which keeps traces comparable between runs.

    Attributes:
        enabled: Master switch for tracing (default: False)
        sample_rate: Fraction of passes to trace (0.0-1.0, default: 1.0)
    """

    enabled: bool = False
    sample_rate: float = 1.0
    _credit: float = field(default=0.0, init=False, repr=False)

    def should_trace(self) -> bool:
        if not self.enabled or self.sample_rate <= 0.0:
            return False
        self._credit += min(self.sample_rate, 1.0)
        if self._credit >= 1.0:
            self._credit -= 1.0
            return True
        return False


@dataclass
class ColorDecision:
    """How one notification's color was decided."""

    key: str
    package: str
    channel: str
    channel_color: int | None
    accent_color: int
    color: int
    suppressed: bool
    from_user: bool
    gated: bool


@dataclass
class PassTrace:
    """A complete record of one reconciliation pass."""

    trace_id: str
    started_at: datetime
    mode: str
    dnd_active: bool
    schedule_active: bool
    timeout_ms: int
    live_count: int
    access_denied: bool
    decisions: list[ColorDecision] = field(default_factory=list)
    colors: tuple[int, ...] = ()
    changed: bool = False
    duration_us: int = 0

    @classmethod
    def start(
        cls,
        *,
        mode: str,
        dnd_active: bool,
        schedule_active: bool,
        timeout_ms: int,
        started_at: datetime,
    ) -> PassTrace:
        return cls(
            trace_id=str(uuid4()),
            started_at=started_at,
            mode=mode,
            dnd_active=dnd_active,
            schedule_active=schedule_active,
            timeout_ms=timeout_ms,
            live_count=0,
            access_denied=False,
        )


class TraceEmitter(ABC):
    """Receives one trace per traced pass."""

    @abstractmethod
    def emit(self, trace: PassTrace) -> None:
        """Emit a pass trace. Must be non-blocking."""


class NullEmitter(TraceEmitter):
    def emit(self, trace: PassTrace) -> None:
        pass


class BufferEmitter(TraceEmitter):
    """Keeps the most recent pass traces in memory."""

    def __init__(self, max_size: int = 100) -> None:
        self._buffer: deque[PassTrace] = deque(maxlen=max_size)

    def emit(self, trace: PassTrace) -> None:
        self._buffer.append(trace)

    @property
    def traces(self) -> list[PassTrace]:
        return list(self._buffer)

    def last(self, n: int = 1) -> list[PassTrace]:
        return list(self._buffer)[-n:]

    def color_changes(self) -> list[PassTrace]:
        """Traces of passes that published a new color set."""
        return [trace for trace in self._buffer if trace.changed]

    def clear(self) -> None:
        self._buffer.clear()
