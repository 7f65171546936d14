"""Announce response encoding.

The response body is a bencoded dictionary::

    {"interval": <int>, "peers": [{"peer id": ..., "ip": ..., "port": ...}, ...]}

Only protocol-visible peer fields are written; datacenter tags, byte
counters, lifecycle events and priorities stay internal.
"""

from __future__ import annotations

from typing import Any

from cctracker.bencode import encode
from cctracker.exceptions import BencodeEncodeError, EncodingError
from cctracker.models import AnnounceResponse, PeerRecord

CONTENT_TYPE = "text/html"
CHARSET = "utf-8"


def peer_to_wire(peer: PeerRecord) -> dict[str, Any]:
    """Project a peer record onto its wire dictionary."""
    if not isinstance(peer, PeerRecord):
        msg = f"Cannot encode peer of type {type(peer).__name__}"
        raise EncodingError(msg)
    return {
        "peer id": peer.peer_id,
        "ip": peer.ip,
        "port": peer.port,
    }


def encode_announce_response(response: AnnounceResponse) -> bytes:
    """Serialize ``response`` to bencoded bytes.

    Raises:
        EncodingError: if any value cannot be represented.

    """
    payload = {
        "interval": response.interval,
        "peers": [peer_to_wire(peer) for peer in response.peers],
    }
    try:
        return encode(payload)
    except BencodeEncodeError as e:
        msg = f"Bencode marshalling has failed: {e}"
        raise EncodingError(msg) from e
