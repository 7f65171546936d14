"""Exception hierarchy for ccTracker.

Provides the error taxonomy shared by the announce pipeline, the storage
and policy collaborators and the HTTP surface.
"""

from __future__ import annotations

from typing import Any


class CCTrackerError(Exception):
    """Base exception for all ccTracker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize ccTracker error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(CCTrackerError):
    """Data validation errors (client-caused)."""


class AnnounceValidationError(ValidationError):
    """A single announce query parameter failed to parse."""

    def __init__(self, field: str, value: str | None, reason: str):
        """Initialize with the failing field, the raw value and the reason."""
        super().__init__(
            f"{field} is not parsable: {reason}",
            {"field": field, "value": value},
        )
        self.field = field
        self.value = value
        self.reason = reason


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class BencodeDecodeError(BencodeError):
    """Malformed bencoded input."""


class BencodeEncodeError(BencodeError):
    """Value cannot be represented in bencoding."""


class StorageError(CCTrackerError):
    """Swarm, torrent or manifest storage errors."""


class PolicyError(CCTrackerError):
    """Peer handout policy errors."""


class PolicyNotFoundError(PolicyError):
    """No policy is registered under the requested name."""


class EncodingError(CCTrackerError):
    """Announce response serialization errors."""


class AnnounceFailed(CCTrackerError):
    """Terminal failure of the announce pipeline at a given stage."""

    def __init__(self, stage: str, cause: CCTrackerError):
        """Initialize with the stage that failed and the underlying error."""
        super().__init__(str(cause), {"stage": stage})
        self.stage = stage
        self.cause = cause

    @property
    def is_client_error(self) -> bool:
        """Whether the failure was caused by the requester."""
        return isinstance(self.cause, ValidationError)
