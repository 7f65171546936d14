"""Swarm, torrent and manifest storage."""

from cctracker.storage.base import ManifestStore, SwarmRepository, TorrentStore
from cctracker.storage.memory import InMemorySwarmStore

__all__ = [
    "InMemorySwarmStore",
    "ManifestStore",
    "SwarmRepository",
    "TorrentStore",
]
