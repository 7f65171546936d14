"""Announce query parsing and validation.

Turns the raw query parameters of an announce request into a
:class:`PeerAnnounceEvent` and then into a :class:`PeerRecord`.
Numeric fields follow fixed-width decimal integer semantics: an optional
sign followed by ASCII digits, nothing else, within the documented range.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Mapping, Union

from cctracker.exceptions import AnnounceValidationError
from cctracker.models import PeerAnnounceEvent, PeerRecord

QueryValue = Union[str, bytes]

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
# 2**64 has 20 decimal digits
_MAX_DIGITS = 20

_TEXT_FIELDS = ("port", "ip", "dc", "uploaded", "downloaded", "left", "event")


def _as_bytes(value: QueryValue | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def _as_text(value: QueryValue | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        # Undecodable bytes survive as surrogates and re-encode unchanged
        return value.decode("utf-8", errors="surrogateescape")
    return value


def parse_signed(raw: str, field: str, bits: int) -> int:
    """Parse a signed decimal integer of the given bit width."""
    if not _SIGNED_RE.fullmatch(raw):
        raise AnnounceValidationError(field, raw, "invalid syntax")
    if len(raw.lstrip("+-").lstrip("0")) > _MAX_DIGITS:
        raise AnnounceValidationError(field, raw, "value out of range")
    value = int(raw)
    bound = 2 ** (bits - 1)
    if not -bound <= value < bound:
        raise AnnounceValidationError(field, raw, "value out of range")
    return value


def parse_unsigned(raw: str, field: str, bits: int) -> int:
    """Parse an unsigned decimal integer of the given bit width."""
    if not _UNSIGNED_RE.fullmatch(raw):
        raise AnnounceValidationError(field, raw, "invalid syntax")
    if len(raw.lstrip("+-").lstrip("0")) > _MAX_DIGITS:
        raise AnnounceValidationError(field, raw, "value out of range")
    value = int(raw)
    if value >= 2**bits:
        raise AnnounceValidationError(field, raw, "value out of range")
    return value


def narrow_to_int64(value: int) -> int:
    """Reinterpret an unsigned 64-bit value as two's-complement signed 64-bit."""
    value &= 0xFFFFFFFFFFFFFFFF
    return value - 2**64 if value >= 2**63 else value


def int32_to_ip(value: int) -> str:
    """Decode a signed 32-bit integer as a network-order IPv4 address."""
    return str(ipaddress.IPv4Address(value & 0xFFFFFFFF))


def parse_announce_event(query: Mapping[str, QueryValue]) -> PeerAnnounceEvent:
    """Build an announce event from query parameters.

    ``info_hash`` and ``peer_id`` are opaque byte strings and are
    hex-encoded here; all other fields are kept as received.

    Raises:
        AnnounceValidationError: if ``info_hash`` or ``peer_id`` is missing.

    """
    info_hash = _as_bytes(query.get("info_hash"))
    if not info_hash:
        raise AnnounceValidationError("info_hash", None, "missing value")
    peer_id = _as_bytes(query.get("peer_id"))
    if not peer_id:
        raise AnnounceValidationError("peer_id", None, "missing value")

    fields = {name: _as_text(query.get(name)) for name in _TEXT_FIELDS}
    numwant = query.get("numwant")
    return PeerAnnounceEvent(
        info_hash=info_hash.hex(),
        peer_id=peer_id.hex(),
        numwant=None if numwant is None else _as_text(numwant),
        **fields,
    )


def to_peer_record(event: PeerAnnounceEvent) -> PeerRecord:
    """Validate the numeric fields of ``event`` and build its peer record.

    Fields are checked in wire order (port, ip, downloaded, uploaded,
    left) and the first failure is raised. ``left`` is accepted over the
    full unsigned 64-bit range and narrowed to signed 64-bit, so values
    above 2**63 - 1 wrap to negative numbers.
    """
    port = parse_signed(event.port, "port", 64)
    if port < 0:
        raise AnnounceValidationError("port", event.port, "negative port")
    ip_value = parse_signed(event.ip, "ip", 32)
    downloaded = parse_signed(event.downloaded, "downloaded", 64)
    uploaded = parse_signed(event.uploaded, "uploaded", 64)
    left = parse_unsigned(event.left, "left", 64)

    return PeerRecord(
        info_hash=event.info_hash,
        peer_id=event.peer_id,
        ip=int32_to_ip(ip_value),
        port=port,
        dc=event.dc,
        bytes_uploaded=uploaded,
        bytes_downloaded=downloaded,
        bytes_left=narrow_to_int64(left),
        event=event.event,
    )


def parse_numwant(event: PeerAnnounceEvent) -> int | None:
    """Return the requested peer count, or None when the client sent none."""
    if event.numwant is None or event.numwant == "":
        return None
    return parse_unsigned(event.numwant, "numwant", 32)
