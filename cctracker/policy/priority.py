"""Priority policies.

Each policy maps (requester ip, requester dc, peer) to an integer
priority. Lower values are handed out first.
"""

from __future__ import annotations

import ipaddress

from cctracker.models import PeerRecord


def default_priority(requester_ip: str, requester_dc: str, peer: PeerRecord) -> int:
    """Give every peer the same priority."""
    return 0


def datacenter_priority(requester_ip: str, requester_dc: str, peer: PeerRecord) -> int:
    """Prefer peers in the requester's datacenter."""
    return 0 if peer.dc == requester_dc else 1


def _common_prefix_len(a: str, b: str) -> int:
    try:
        xor = int(ipaddress.IPv4Address(a)) ^ int(ipaddress.IPv4Address(b))
    except ipaddress.AddressValueError:
        return 0
    return 32 - xor.bit_length()


def ipv4_netmask_priority(requester_ip: str, requester_dc: str, peer: PeerRecord) -> int:
    """Prefer peers sharing a longer IPv4 prefix with the requester.

    The priority is the number of trailing bits that differ, so a peer on
    the same host gets 0 and an unrelated or unparsable address gets 32.
    """
    return 32 - _common_prefix_len(requester_ip, peer.ip)
