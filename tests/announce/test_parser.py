"""Tests for announce query parsing and validation."""

import pytest

from cctracker.announce.parser import (
    int32_to_ip,
    narrow_to_int64,
    parse_announce_event,
    parse_numwant,
    parse_signed,
    parse_unsigned,
    to_peer_record,
)
from cctracker.exceptions import AnnounceValidationError, ValidationError


class TestParseAnnounceEvent:
    """Test building PeerAnnounceEvent from query parameters."""

    def test_hex_encodes_identifiers(self, announce_query):
        """Test info_hash and peer_id are hex-encoded, the rest kept raw."""
        event = parse_announce_event(announce_query())
        assert event.info_hash == "4142"
        assert event.peer_id == "4344"
        assert event.port == "6881"
        assert event.ip == "2130706433"
        assert event.event == "started"
        assert event.numwant is None

    def test_binary_identifiers(self, announce_query):
        """Test non-printable raw bytes are hex-encoded byte for byte."""
        info_hash = bytes(range(20))
        event = parse_announce_event(announce_query(info_hash=info_hash, peer_id=b"\xff\x00"))
        assert event.info_hash == info_hash.hex()
        assert event.peer_id == "ff00"

    def test_bytes_text_fields_are_decoded(self, announce_query):
        """Test byte values of text fields become str."""
        event = parse_announce_event(announce_query(dc=b"dca", event=b"", port=b"1"))
        assert event.dc == "dca"
        assert event.event == ""
        assert event.port == "1"

    def test_non_utf8_text_fields_preserved(self, announce_query):
        """Test undecodable dc/event bytes round-trip unchanged."""
        event = parse_announce_event(announce_query(dc=b"dc\xff", event=b"\xfe"))
        assert event.dc.encode("utf-8", "surrogateescape") == b"dc\xff"
        assert event.event.encode("utf-8", "surrogateescape") == b"\xfe"
        assert to_peer_record(event).dc == event.dc

    def test_missing_optional_fields_are_empty(self, announce_query):
        """Test absent dc/event default to the empty string."""
        event = parse_announce_event(announce_query(dc=None, event=None))
        assert event.dc == ""
        assert event.event == ""

    @pytest.mark.parametrize("field", ["info_hash", "peer_id"])
    def test_missing_identifier_rejected(self, announce_query, field):
        """Test info_hash and peer_id are required."""
        with pytest.raises(AnnounceValidationError) as exc_info:
            parse_announce_event(announce_query(**{field: None}))
        assert exc_info.value.field == field

    def test_empty_identifier_rejected(self, announce_query):
        """Test an empty info_hash is treated as missing."""
        with pytest.raises(AnnounceValidationError):
            parse_announce_event(announce_query(info_hash=""))


class TestToPeerRecord:
    """Test numeric validation and record construction."""

    def test_reference_scenario(self, announce_query):
        """Test the canonical started announce."""
        record = to_peer_record(parse_announce_event(announce_query()))
        assert record.info_hash == "4142"
        assert record.peer_id == "4344"
        assert record.ip == "127.0.0.1"
        assert record.port == 6881
        assert record.dc == "sjc1"
        assert record.bytes_left == 1000
        assert record.bytes_uploaded == 0
        assert record.bytes_downloaded == 0
        assert record.event == "started"
        assert record.priority == 0

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("port", "abc"),
            ("port", ""),
            ("port", "-1"),
            ("port", "9223372036854775808"),
            ("ip", "1.2.3.4"),
            ("ip", "2147483648"),
            ("ip", ""),
            ("downloaded", "1e3"),
            ("downloaded", " 5"),
            ("uploaded", "1_000"),
            ("uploaded", "-9223372036854775809"),
            ("left", "-1"),
            ("left", "+5"),
            ("left", "18446744073709551616"),
        ],
    )
    def test_malformed_numeric_field(self, announce_query, field, value):
        """Test each malformed numeric field names itself in the error."""
        event = parse_announce_event(announce_query(**{field: value}))
        with pytest.raises(AnnounceValidationError) as exc_info:
            to_peer_record(event)
        assert exc_info.value.field == field
        assert isinstance(exc_info.value, ValidationError)
        assert field in str(exc_info.value)

    def test_first_bad_field_wins(self, announce_query):
        """Test fields are checked in order: port before ip."""
        event = parse_announce_event(announce_query(port="x", ip="y"))
        with pytest.raises(AnnounceValidationError) as exc_info:
            to_peer_record(event)
        assert exc_info.value.field == "port"

    def test_left_above_int64_wraps(self, announce_query):
        """Test left is reinterpreted as two's-complement signed 64-bit."""
        event = parse_announce_event(announce_query(left=str(2**64 - 1)))
        assert to_peer_record(event).bytes_left == -1

        event = parse_announce_event(announce_query(left=str(2**63)))
        assert to_peer_record(event).bytes_left == -(2**63)

    def test_negative_ip_integer(self, announce_query):
        """Test a negative int32 maps to the high half of the address space."""
        event = parse_announce_event(announce_query(ip="-1062731775"))
        assert to_peer_record(event).ip == "192.168.0.1"

    def test_signed_and_padded_values(self, announce_query):
        """Test explicit plus signs and leading zeros are accepted."""
        event = parse_announce_event(
            announce_query(port="+6881", downloaded="-5", uploaded="000000000000000000000042")
        )
        record = to_peer_record(event)
        assert record.port == 6881
        assert record.bytes_downloaded == -5
        assert record.bytes_uploaded == 42


class TestIntegerHelpers:
    """Test fixed-width integer helpers."""

    def test_parse_signed_bounds(self):
        """Test inclusive bounds of signed parsing."""
        assert parse_signed("2147483647", "ip", 32) == 2**31 - 1
        assert parse_signed("-2147483648", "ip", 32) == -(2**31)
        with pytest.raises(AnnounceValidationError):
            parse_signed("2147483648", "ip", 32)

    def test_parse_unsigned_bounds(self):
        """Test inclusive bounds of unsigned parsing."""
        assert parse_unsigned("18446744073709551615", "left", 64) == 2**64 - 1
        with pytest.raises(AnnounceValidationError):
            parse_unsigned("18446744073709551616", "left", 64)

    def test_huge_literal_rejected_without_conversion(self):
        """Test very long digit strings fail as out of range."""
        with pytest.raises(AnnounceValidationError, match="out of range"):
            parse_signed("9" * 5000, "port", 64)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, 0), (2**63 - 1, 2**63 - 1), (2**63, -(2**63)), (2**64 - 1, -1)],
    )
    def test_narrow_to_int64(self, value, expected):
        """Test two's-complement narrowing."""
        assert narrow_to_int64(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (2130706433, "127.0.0.1"),
            (0, "0.0.0.0"),
            (-1, "255.255.255.255"),
            (167772161, "10.0.0.1"),
        ],
    )
    def test_int32_to_ip(self, value, expected):
        """Test network-order IPv4 decoding."""
        assert int32_to_ip(value) == expected


class TestParseNumwant:
    """Test the optional peer count parameter."""

    def test_absent(self, announce_query):
        """Test no numwant means no limit."""
        assert parse_numwant(parse_announce_event(announce_query())) is None
        assert parse_numwant(parse_announce_event(announce_query(numwant=""))) is None

    def test_present(self, announce_query):
        """Test numwant is parsed."""
        assert parse_numwant(parse_announce_event(announce_query(numwant="7"))) == 7

    def test_malformed(self, announce_query):
        """Test malformed numwant is a validation error."""
        with pytest.raises(AnnounceValidationError) as exc_info:
            parse_numwant(parse_announce_event(announce_query(numwant="-2")))
        assert exc_info.value.field == "numwant"
