"""Structured announce event sink.

The announce pipeline reports what happens to each request through an
injected :class:`AnnounceObserver` instead of module-level loggers, so
tests can assert on the exact events emitted.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from cctracker.logging_config import get_correlation_id, get_logger


class AnnounceEventType(Enum):
    """Announce pipeline event types."""

    ANNOUNCE_RECEIVED = "announce_received"
    ANNOUNCE_REJECTED = "announce_rejected"
    ANNOUNCE_FAILED = "announce_failed"
    ANNOUNCE_COMPLETED = "announce_completed"


@dataclass
class AnnounceEvent:
    """One structured observation about an announce request."""

    event_type: AnnounceEventType
    info_hash: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    correlation_id: str | None = field(default_factory=get_correlation_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "event_type": self.event_type.value,
            "info_hash": self.info_hash,
            "timestamp": self.timestamp,
            "correlation_id": self.correlation_id,
            **self.data,
        }


@runtime_checkable
class AnnounceObserver(Protocol):
    def emit(self, event: AnnounceEvent) -> None: ...


class LoggingObserver:
    """Writes announce events to a logger, fields in ``extra``."""

    LEVELS = {
        AnnounceEventType.ANNOUNCE_RECEIVED: logging.DEBUG,
        AnnounceEventType.ANNOUNCE_REJECTED: logging.INFO,
        AnnounceEventType.ANNOUNCE_FAILED: logging.ERROR,
        AnnounceEventType.ANNOUNCE_COMPLETED: logging.DEBUG,
    }

    def __init__(self, logger: logging.Logger | None = None):
        """Initialize with the destination logger."""
        self.logger = logger or get_logger("announce")

    def emit(self, event: AnnounceEvent) -> None:
        """Log ``event`` at the level matching its type."""
        fields = event.to_dict()
        fields.pop("timestamp")
        self.logger.log(
            self.LEVELS[event.event_type],
            "%s: info_hash=%s",
            event.event_type.value,
            event.info_hash,
            extra={"announce": fields},
        )


class RecordingObserver:
    """Keeps every emitted event in memory."""

    def __init__(self) -> None:
        """Initialize with no events."""
        self.events: list[AnnounceEvent] = []

    def emit(self, event: AnnounceEvent) -> None:
        """Record ``event``."""
        self.events.append(event)

    def of_type(self, event_type: AnnounceEventType) -> list[AnnounceEvent]:
        """Return the recorded events of ``event_type``."""
        return [e for e in self.events if e.event_type is event_type]
