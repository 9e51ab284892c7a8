"""
Unit tests for bit framing and redundancy.
"""

import numpy as np
import pytest

from stegcodec.bitstream import (
    apply_redundancy,
    bits_to_bytes,
    bytes_to_bits,
    collapse_redundancy,
    frame_decode,
    frame_encode,
    frame_probe,
    marker_decode,
    marker_encode,
)
from stegcodec.errors import FramingError

MAGIC = b"TSTEGA1"


class TestBitPacking:
    """Byte <-> bit conversions."""

    def test_msb_first(self):
        assert bytes_to_bits(b"\x81").tolist() == [1, 0, 0, 0, 0, 0, 0, 1]

    def test_trailing_partial_byte_dropped(self):
        bits = np.concatenate([bytes_to_bits(b"A"), np.array([1, 1, 1], dtype=np.uint8)])
        assert bits_to_bytes(bits) == b"A"


class TestLengthPrefixedFrames:
    """Magic + u32 length framing."""

    def test_layout(self):
        bits = frame_encode(b"hi", MAGIC)
        assert len(bits) == (7 + 4 + 2) * 8
        assert bits_to_bytes(bits) == MAGIC + b"\x00\x00\x00\x02hi"

    def test_decode_round_trip(self):
        assert frame_decode(frame_encode(b"payload", MAGIC), MAGIC) == b"payload"

    def test_empty_payload(self):
        assert frame_decode(frame_encode(b"", MAGIC), MAGIC) == b""

    def test_magic_found_after_noise(self):
        noise = np.array([1, 0, 1, 1, 0], dtype=np.uint8)
        bits = np.concatenate([noise, frame_encode(b"xyz", MAGIC)])
        assert frame_decode(bits, MAGIC) == b"xyz"

    def test_missing_magic(self):
        assert frame_decode(np.zeros(400, dtype=np.uint8), MAGIC) is None

    def test_truncated_payload(self):
        bits = frame_encode(b"truncated", MAGIC)
        assert frame_decode(bits[:-1], MAGIC) is None

    def test_trailing_bits_ignored(self):
        bits = np.concatenate([frame_encode(b"ok", MAGIC), np.ones(13, dtype=np.uint8)])
        assert frame_decode(bits, MAGIC) == b"ok"

    def test_probe_reports_progress(self):
        bits = frame_encode(b"abcd", MAGIC)
        assert not frame_probe(bits[:20], MAGIC).found

        partial = frame_probe(bits[:7 * 8 + 10], MAGIC)
        assert partial.found and partial.length is None

        header = frame_probe(bits[:11 * 8], MAGIC)
        assert header.length == 4
        assert header.needed_bits == len(bits)
        assert not header.complete

        assert frame_probe(bits, MAGIC).complete


class TestRedundancy:
    """Triplicate bits and majority vote."""

    def test_repeats_in_order(self):
        bits = np.array([1, 0, 1], dtype=np.uint8)
        assert apply_redundancy(bits, 3).tolist() == [1, 1, 1, 0, 0, 0, 1, 1, 1]

    def test_one_flip_per_triplet_is_corrected(self):
        rng = np.random.default_rng(5)
        original = rng.integers(0, 2, size=256, dtype=np.uint8)
        redundant = apply_redundancy(original, 3)
        flips = np.arange(len(original)) * 3 + rng.integers(0, 3, size=len(original))
        redundant[flips] ^= 1
        assert np.array_equal(collapse_redundancy(redundant, 3), original)

    def test_two_flips_change_the_bit(self):
        assert collapse_redundancy(np.array([1, 1, 0], dtype=np.uint8), 3).tolist() == [1]
        assert collapse_redundancy(np.array([0, 0, 1], dtype=np.uint8), 3).tolist() == [0]

    def test_incomplete_group_truncated(self):
        bits = np.array([1, 1, 1, 0, 1], dtype=np.uint8)
        assert collapse_redundancy(bits, 3).tolist() == [1]

    def test_invalid_factor(self):
        with pytest.raises(ValueError):
            apply_redundancy(np.zeros(3, dtype=np.uint8), 0)


class TestMarkerFrames:
    """Optional magic + payload + 0xFFFE framing."""

    def test_round_trip(self):
        assert marker_decode(marker_encode(b"ok")) == b"ok"

    def test_marker_only_matches_on_byte_boundary(self):
        # 0x7F 0xFF 0x00 holds the marker bit pattern at a non-aligned offset
        bits = np.concatenate([bytes_to_bits(b"\x7f\xff\x00"), marker_encode(b"")])
        assert marker_decode(bits) == b"\x7f\xff\x00"

    def test_rejects_payload_containing_marker(self):
        with pytest.raises(FramingError):
            marker_encode(b"a\xff\xfeb")

    def test_missing_marker(self):
        assert marker_decode(np.zeros(64, dtype=np.uint8)) is None

    def test_magic_round_trip(self):
        bits = marker_encode(b"ok", b"ISTG")
        assert len(bits) == (4 + 2 + 2) * 8
        assert marker_decode(bits, b"ISTG") == b"ok"

    def test_magic_required_at_start(self):
        # Terminator present, magic missing or displaced
        assert marker_decode(bytes_to_bits(b"ok\xff\xfe"), b"ISTG") is None
        assert marker_decode(bytes_to_bits(b"\x00ISTGok\xff\xfe"), b"ISTG") is None
