"""Pydantic models for ccTracker.

Provides the announce data model (request event, canonical peer record,
response), the torrent/manifest metadata records and the configuration
sections.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PeerAnnounceEvent(BaseModel):
    """One inbound announce, fields as received.

    ``info_hash`` and ``peer_id`` are already hex-encoded; every other
    field is the raw query string value.
    """

    info_hash: str = Field(..., description="Hex-encoded torrent info hash")
    peer_id: str = Field(..., description="Hex-encoded peer ID")
    port: str = Field(default="", description="Declared listening port")
    ip: str = Field(default="", description="Declared IPv4 address as a signed 32-bit integer")
    dc: str = Field(default="", description="Datacenter / locality tag")
    uploaded: str = Field(default="", description="Cumulative bytes uploaded")
    downloaded: str = Field(default="", description="Cumulative bytes downloaded")
    left: str = Field(default="", description="Cumulative bytes remaining")
    event: str = Field(default="", description="Lifecycle event name")
    numwant: str | None = Field(None, description="Requested number of peers")

    model_config = {"frozen": True}


class PeerRecord(BaseModel):
    """Canonical state of one peer in one swarm."""

    info_hash: str = Field(..., description="Hex-encoded torrent info hash")
    peer_id: str = Field(..., description="Hex-encoded peer ID")
    ip: str = Field(..., description="Peer IP address in dotted-decimal form")
    port: int = Field(..., ge=0, le=INT64_MAX, description="Peer port number")
    dc: str = Field(default="", description="Datacenter / locality tag")
    bytes_uploaded: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    bytes_downloaded: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    bytes_left: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    event: str = Field(default="", description="Lifecycle event name")
    priority: int = Field(
        default=0,
        description="Handout priority assigned by the policy (lower is preferred)",
    )

    model_config = {"frozen": True}

    @property
    def key(self) -> tuple[str, str]:
        """Storage key of this record."""
        return (self.info_hash, self.peer_id)

    def __str__(self) -> str:
        """String representation of the peer record."""
        return f"{self.peer_id}@{self.ip}:{self.port}"


class AnnounceResponse(BaseModel):
    """Announce interval and the peers handed out to the requester."""

    interval: int = Field(..., gt=0, description="Seconds until the next announce")
    peers: list[PeerRecord] = Field(default_factory=list, description="Selected peers")


class TorrentInfo(BaseModel):
    """Torrent name to info hash mapping."""

    torrent_name: str = Field(..., min_length=1, description="Torrent name")
    info_hash: str = Field(..., min_length=1, description="Torrent info hash")


class Manifest(BaseModel):
    """Opaque JSON manifest stored under a tag name."""

    tag_name: str = Field(..., min_length=1, description="Tag name")
    manifest: str = Field(..., description="Manifest JSON document")
    flags: int = Field(default=0, description="Manifest flags")


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")  # nosec B104
    port: int = Field(default=8351, ge=1, le=65535, description="Listen port")


class AnnouncerConfig(BaseModel):
    """Announce endpoint configuration."""

    announce_interval: int = Field(
        default=3,
        gt=0,
        description="Interval in seconds returned to announcing peers",
    )


class PeerHandoutPolicyConfig(BaseModel):
    """Names of the registered priority and sampling policies to use."""

    priority: str = Field(default="default", description="Priority policy name")
    sampling: str = Field(default="default", description="Sampling policy name")

    @field_validator("priority", "sampling")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate policy name is not blank."""
        if not v.strip():
            msg = "Policy name cannot be empty"
            raise ValueError(msg)
        return v.strip()


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(default=False, description="Use structured logging")
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )
    rich_console: bool = Field(
        default=False,
        description="Render console logs with rich",
    )


class Config(BaseModel):
    """Main configuration model."""

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="HTTP server configuration",
    )
    announcer: AnnouncerConfig = Field(
        default_factory=AnnouncerConfig,
        description="Announce configuration",
    )
    peer_handout_policy: PeerHandoutPolicyConfig = Field(
        default_factory=PeerHandoutPolicyConfig,
        description="Peer handout policy configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
