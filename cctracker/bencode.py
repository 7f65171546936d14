"""Bencoding codec for the tracker wire protocol.

Bencoding supports four types: byte strings (``<len>:<bytes>``),
integers (``i<n>e``), lists (``l...e``) and dictionaries (``d...e``)
whose keys are byte strings in sorted order.
"""

from __future__ import annotations

from typing import Any

from cctracker.exceptions import BencodeDecodeError, BencodeEncodeError

__all__ = [
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "decode",
    "encode",
]


class BencodeDecoder:
    """Decoder for a single bencoded value."""

    def __init__(self, data: bytes):
        """Initialize decoder over ``data``."""
        self.data = data
        self.pos = 0

    def decode(self) -> Any:
        """Decode the value at the current position."""
        if self.pos >= len(self.data):
            msg = "Unexpected end of data"
            raise BencodeDecodeError(msg)

        char = self.data[self.pos : self.pos + 1]
        if char == b"i":
            return self._decode_int()
        if char == b"l":
            return self._decode_list()
        if char == b"d":
            return self._decode_dict()
        if char.isdigit():
            return self._decode_string()

        msg = f"Invalid bencode token {char!r} at position {self.pos}"
        raise BencodeDecodeError(msg)

    def _decode_int(self) -> int:
        end = self.data.find(b"e", self.pos)
        if end == -1:
            msg = "Unterminated integer"
            raise BencodeDecodeError(msg)

        raw = self.data[self.pos + 1 : end]
        digits = raw[1:] if raw.startswith(b"-") else raw
        if not digits or not digits.isdigit():
            msg = f"Invalid integer {raw!r}"
            raise BencodeDecodeError(msg)
        if digits.startswith(b"0") and (len(digits) > 1 or raw.startswith(b"-")):
            msg = f"Invalid integer {raw!r}: leading zero"
            raise BencodeDecodeError(msg)

        self.pos = end + 1
        return int(raw)

    def _decode_string(self) -> bytes:
        colon = self.data.find(b":", self.pos)
        if colon == -1:
            msg = "Missing colon in string"
            raise BencodeDecodeError(msg)

        length_raw = self.data[self.pos : colon]
        if not length_raw.isdigit():
            msg = f"Invalid string length {length_raw!r}"
            raise BencodeDecodeError(msg)

        length = int(length_raw)
        start = colon + 1
        if start + length > len(self.data):
            msg = f"String length {length} exceeds available data"
            raise BencodeDecodeError(msg)

        self.pos = start + length
        return self.data[start : self.pos]

    def _decode_list(self) -> list[Any]:
        self.pos += 1
        result = []
        while self.data[self.pos : self.pos + 1] != b"e":
            if self.pos >= len(self.data):
                msg = "Unterminated list"
                raise BencodeDecodeError(msg)
            result.append(self.decode())
        self.pos += 1
        return result

    def _decode_dict(self) -> dict[bytes, Any]:
        self.pos += 1
        result = {}
        while self.data[self.pos : self.pos + 1] != b"e":
            if self.pos >= len(self.data):
                msg = "Unterminated dictionary"
                raise BencodeDecodeError(msg)
            key = self.decode()
            if not isinstance(key, bytes):
                msg = "Dictionary keys must be strings"
                raise BencodeDecodeError(msg)
            result[key] = self.decode()
        self.pos += 1
        return result


class BencodeEncoder:
    """Encoder producing bencoded bytes."""

    def encode(self, value: Any) -> bytes:
        """Encode ``value``.

        Raises:
            BencodeEncodeError: if ``value`` (or anything nested in it) is
                not a bytes, str, int, list, tuple or dict.

        """
        # bool is an int subclass but has no wire representation
        if isinstance(value, bool):
            msg = f"Cannot encode type {type(value).__name__}"
            raise BencodeEncodeError(msg)
        if isinstance(value, int):
            return b"i%de" % value
        if isinstance(value, (bytes, bytearray)):
            return b"%d:%s" % (len(value), bytes(value))
        if isinstance(value, str):
            return self.encode(value.encode("utf-8"))
        if isinstance(value, (list, tuple)):
            return b"l" + b"".join(self.encode(item) for item in value) + b"e"
        if isinstance(value, dict):
            return self._encode_dict(value)

        msg = f"Cannot encode type {type(value).__name__}"
        raise BencodeEncodeError(msg)

    def _encode_dict(self, value: dict[Any, Any]) -> bytes:
        items = []
        for key, item in value.items():
            if isinstance(key, str):
                key = key.encode("utf-8")
            elif not isinstance(key, bytes):
                msg = f"Dictionary keys must be strings, got {type(key).__name__}"
                raise BencodeEncodeError(msg)
            items.append((key, item))

        items.sort(key=lambda kv: kv[0])
        body = b"".join(self.encode(k) + self.encode(v) for k, v in items)
        return b"d" + body + b"e"


def decode(data: bytes) -> Any:
    """Decode a complete bencoded value, rejecting trailing data."""
    decoder = BencodeDecoder(data)
    value = decoder.decode()
    if decoder.pos != len(data):
        msg = f"Trailing data after position {decoder.pos}"
        raise BencodeDecodeError(msg)
    return value


def encode(value: Any) -> bytes:
    """Encode ``value`` to bencoded bytes."""
    return BencodeEncoder().encode(value)
