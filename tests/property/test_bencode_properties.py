"""Property-based tests for bencode encoding/decoding."""

from hypothesis import given
from hypothesis import strategies as st

from cctracker.bencode import decode, encode

bencodable = st.recursive(
    st.one_of(st.binary(), st.integers()),
    lambda children: st.one_of(
        st.lists(children),
        st.dictionaries(st.binary(), children),
    ),
    max_leaves=20,
)


class TestBencodeProperties:
    """Property-based tests for bencode operations."""

    @given(bencodable)
    def test_roundtrip(self, value):
        """Test decode(encode(x)) == x for any bencodable value."""
        assert decode(encode(value)) == value

    @given(st.text())
    def test_text_decodes_to_utf8_bytes(self, text):
        """Test text is encoded as its UTF-8 bytes."""
        assert decode(encode(text)) == text.encode("utf-8")

    @given(st.dictionaries(st.binary(), st.integers()))
    def test_encoding_is_order_independent(self, dct):
        """Test insertion order does not change the encoding."""
        reversed_dct = dict(reversed(list(dct.items())))
        assert encode(dct) == encode(reversed_dct)
