"""
Unit tests for zero-width text steganography.
"""

import pytest

from stegcodec import CapacityExceeded, FramingError, Message, NotFound
from stegcodec.bitstream import bytes_to_bits
from stegcodec.text import MARKERS, decode_text, encode_text, strip_markers, text_capacity


class TestTextSteganography:

    def test_quick_brown_fox(self):
        cover = "The quick brown fox"
        stego = encode_text(cover, "hi")

        inserted = sum(ch in MARKERS for ch in stego)
        assert inserted == 16  # (2 bytes + 2 marker bytes) * 8 bits / 2 bits per character
        assert len(stego) == 19 + inserted
        assert strip_markers(stego) == cover
        assert decode_text(stego) == Message(b"hi")

    def test_marker_follows_each_consumed_character(self):
        stego = encode_text("abcdefghijklmnop", "A")
        # "A" = 0x41 = 01 00 00 01
        assert stego[:8] == "a\u200cb\u200bc\u200bd\u200c"

    def test_unicode_round_trip(self, cover_text):
        message = "Привет, 世界 🌍"
        assert decode_text(encode_text(cover_text, message)).text == message

    def test_password_round_trip(self, cover_text, fast_cipher):
        stego = encode_text(cover_text, "meet at dawn", "s3cret", fast_cipher)
        assert decode_text(stego, "s3cret", fast_cipher).text == "meet at dawn"

    def test_wrong_password_is_not_found(self, cover_text, fast_cipher):
        stego = encode_text(cover_text, "meet at dawn", "s3cret", fast_cipher)
        result = decode_text(stego, "guess", fast_cipher)
        assert isinstance(result, NotFound)
        assert not result

    def test_capacity_boundary(self, cover_text):
        capacity = text_capacity(cover_text)
        assert decode_text(encode_text(cover_text, "x" * capacity)).data == b"x" * capacity
        with pytest.raises(CapacityExceeded):
            encode_text(cover_text, "x" * (capacity + 1))

    def test_short_cover(self):
        with pytest.raises(CapacityExceeded) as exc_info:
            encode_text("abc", "hello")
        assert exc_info.value.required == 28
        assert exc_info.value.available == 3

    def test_plain_text_is_not_found(self, cover_text):
        assert isinstance(decode_text(cover_text), NotFound)

    def test_markers_without_terminator(self):
        assert isinstance(decode_text("a\u200bb\u200dc\ufeff"), NotFound)

    def test_stray_markers_past_terminator(self, cover_text):
        # 0xFFFE appears, but the zero-width run continues past it
        bits = bytes_to_bits(b"junk\xff\xfe\x00")
        symbols = bits[0::2] * 2 + bits[1::2]
        text = "".join(ch + MARKERS[s] for ch, s in zip(cover_text, symbols)) + cover_text[len(symbols):]
        assert isinstance(decode_text(text), NotFound)

    def test_cover_with_markers_rejected(self):
        with pytest.raises(FramingError):
            encode_text("hidden\u200balready", "x")

    def test_cover_with_byte_order_mark_rejected(self, cover_text):
        with pytest.raises(FramingError):
            encode_text("\ufeff" + cover_text, "x")

    def test_deterministic_without_password(self, cover_text):
        assert encode_text(cover_text, "same") == encode_text(cover_text, "same")
