"""In-memory storage backend.

Keeps swarms, torrents and manifests in process memory. Suitable for a
single tracker instance and for tests.
"""

from __future__ import annotations

import asyncio
import logging

from cctracker.exceptions import StorageError
from cctracker.models import Manifest, PeerRecord, TorrentInfo

logger = logging.getLogger(__name__)


class InMemorySwarmStore:
    """Dictionary-backed implementation of every storage interface."""

    def __init__(self) -> None:
        """Initialize empty stores."""
        # info_hash -> {peer_id -> record}
        self.swarms: dict[str, dict[str, PeerRecord]] = {}
        self.torrents: dict[str, TorrentInfo] = {}
        self.manifests: dict[str, Manifest] = {}
        self._lock = asyncio.Lock()

    async def update(self, record: PeerRecord) -> None:
        """Insert or replace the record for (info_hash, peer_id)."""
        async with self._lock:
            self.swarms.setdefault(record.info_hash, {})[record.peer_id] = record
        logger.debug("Updated peer %s in swarm %s", record, record.info_hash)

    async def read(self, info_hash: str) -> list[PeerRecord]:
        """Return a snapshot of the swarm."""
        async with self._lock:
            return list(self.swarms.get(info_hash, {}).values())

    async def read_torrent(self, name: str) -> TorrentInfo | None:
        """Look up a torrent by name."""
        async with self._lock:
            return self.torrents.get(name)

    async def create_torrent(self, info: TorrentInfo) -> None:
        """Register a torrent name.

        Raises:
            StorageError: if the name is already registered to another info hash.

        """
        async with self._lock:
            existing = self.torrents.get(info.torrent_name)
            if existing is not None and existing.info_hash != info.info_hash:
                msg = f"Torrent {info.torrent_name} already exists"
                raise StorageError(msg, {"info_hash": existing.info_hash})
            self.torrents[info.torrent_name] = info

    async def read_manifest(self, tag_name: str) -> Manifest | None:
        """Look up a manifest by tag name."""
        async with self._lock:
            return self.manifests.get(tag_name)

    async def update_manifest(self, manifest: Manifest) -> None:
        """Insert or replace the manifest for its tag name."""
        async with self._lock:
            self.manifests[manifest.tag_name] = manifest
