"""Storage interfaces consumed by the tracker.

Backends signal any failure by raising :class:`~cctracker.exceptions.StorageError`
(or any other exception, which callers treat the same way).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cctracker.models import Manifest, PeerRecord, TorrentInfo


@runtime_checkable
class SwarmRepository(Protocol):
    """Peer record persistence."""

    async def update(self, record: PeerRecord) -> None:
        """Upsert ``record`` keyed by (info_hash, peer_id)."""
        ...

    async def read(self, info_hash: str) -> list[PeerRecord]:
        """Return the current members of the swarm, in no particular order."""
        ...


@runtime_checkable
class TorrentStore(Protocol):
    """Torrent name to info hash metadata."""

    async def read_torrent(self, name: str) -> TorrentInfo | None: ...

    async def create_torrent(self, info: TorrentInfo) -> None: ...


@runtime_checkable
class ManifestStore(Protocol):
    """Tag name to manifest blobs."""

    async def read_manifest(self, tag_name: str) -> Manifest | None: ...

    async def update_manifest(self, manifest: Manifest) -> None: ...
