"""Announce protocol handling: parsing, orchestration and response encoding."""

from cctracker.announce.encoder import encode_announce_response
from cctracker.announce.orchestrator import AnnounceOrchestrator, AnnounceStage
from cctracker.announce.parser import (
    parse_announce_event,
    parse_numwant,
    to_peer_record,
)

__all__ = [
    "AnnounceOrchestrator",
    "AnnounceStage",
    "encode_announce_response",
    "parse_announce_event",
    "parse_numwant",
    "to_peer_record",
]
