"""ccTracker - announce tracker for peer discovery.

Peers report their transfer state to ``/announce`` and receive a sampled
list of swarm members to connect to, bencoded.
"""

from __future__ import annotations

from cctracker.announce import AnnounceOrchestrator, AnnounceStage
from cctracker.models import AnnounceResponse, PeerAnnounceEvent, PeerRecord

__version__ = "0.1.0"

__all__ = [
    "AnnounceOrchestrator",
    "AnnounceResponse",
    "AnnounceStage",
    "PeerAnnounceEvent",
    "PeerRecord",
    "__version__",
]
