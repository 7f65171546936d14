"""Peer handout policy interfaces."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cctracker.models import PeerRecord


@runtime_checkable
class HandoutPolicy(Protocol):
    """What the announce pipeline needs from a handout policy."""

    def assign_priority(
        self,
        requester_ip: str,
        requester_dc: str,
        peers: list[PeerRecord],
    ) -> None:
        """Annotate every entry of ``peers`` with a priority, in place."""
        ...

    def sample(self, peers: list[PeerRecord], limit: int) -> list[PeerRecord]:
        """Return at most ``limit`` peers."""
        ...


class PriorityPolicy(Protocol):
    def __call__(self, requester_ip: str, requester_dc: str, peer: PeerRecord) -> int: ...


class SamplingPolicy(Protocol):
    def __call__(self, peers: list[PeerRecord], limit: int) -> list[PeerRecord]: ...


class PeerHandoutPolicy:
    """Handout policy composed of a priority and a sampling function."""

    def __init__(self, priority: PriorityPolicy, sampling: SamplingPolicy):
        """Initialize with the two policy halves."""
        self.priority = priority
        self.sampling = sampling

    def assign_priority(
        self,
        requester_ip: str,
        requester_dc: str,
        peers: list[PeerRecord],
    ) -> None:
        """Replace each peer with a copy carrying its priority.

        Records are immutable, so the list slots are rebound rather than
        the records modified.
        """
        for i, peer in enumerate(peers):
            priority = self.priority(requester_ip, requester_dc, peer)
            peers[i] = peer.model_copy(update={"priority": priority})

    def sample(self, peers: list[PeerRecord], limit: int) -> list[PeerRecord]:
        """Select at most ``limit`` peers."""
        if limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise ValueError(msg)
        return self.sampling(peers, limit)
