"""
Bit-level framing shared by all codecs.

Bit streams are numpy ``uint8`` arrays holding 0/1 values, most significant
bit of each byte first. Two frame layouts are supported:

* length-prefixed: ``magic + u32 big-endian byte count + payload``
* marker-terminated: ``[magic] + payload + END_MARKER``, magic at bit 0
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .config import END_MARKER, LENGTH_BITS, MAX_PAYLOAD_LEN
from .errors import FramingError


def as_bytes(message: Union[str, bytes]) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


# ======================================================
# ---- Bit packing helpers ----
# ======================================================
def bytes_to_bits(data: bytes) -> np.ndarray:
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8))


def bits_to_bytes(bits: np.ndarray) -> bytes:
    """Pack bits into bytes, dropping a trailing partial byte."""
    n = (len(bits) // 8) * 8
    return np.packbits(np.asarray(bits[:n], dtype=np.uint8)).tobytes()


def find_bits(bits: np.ndarray, pattern: np.ndarray, start: int = 0) -> int:
    """Index of the first occurrence of ``pattern`` in ``bits`` at or after ``start``, or -1."""
    haystack = np.asarray(bits, dtype=np.uint8).tobytes()
    needle = np.asarray(pattern, dtype=np.uint8).tobytes()
    return haystack.find(needle, start)


# ======================================================
# ---- Redundancy ----
# ======================================================
def apply_redundancy(bits: np.ndarray, factor: int) -> np.ndarray:
    if factor < 1:
        raise ValueError("redundancy factor must be >= 1")
    return np.repeat(np.asarray(bits, dtype=np.uint8), factor)


def collapse_redundancy(bits: np.ndarray, factor: int) -> np.ndarray:
    """Majority vote over consecutive groups of ``factor`` bits.

    A trailing incomplete group is discarded.
    """
    if factor < 1:
        raise ValueError("redundancy factor must be >= 1")
    groups = len(bits) // factor
    ones = np.asarray(bits[:groups * factor], dtype=np.uint8).reshape(groups, factor).sum(axis=1)
    return (ones * 2 > factor).astype(np.uint8)


# ======================================================
# ---- Length-prefixed frames ----
# ======================================================
@dataclass
class FrameProbe:
    """Where a length-prefixed frame sits in a (possibly partial) bit stream.

    Attributes:
        offset: bit offset of the magic, -1 when not located
        length: declared payload length in bytes, None until the length field is readable
        needed_bits: bits the whole frame occupies from the stream start, None until known
        complete: True when the stream holds the whole payload
    """

    offset: int = -1
    length: Optional[int] = None
    needed_bits: Optional[int] = None
    complete: bool = False

    @property
    def found(self) -> bool:
        return self.offset >= 0


def frame_encode(payload: bytes, magic: bytes) -> np.ndarray:
    if len(payload) > MAX_PAYLOAD_LEN:
        raise FramingError(f"Payload of {len(payload)} bytes does not fit a 32-bit length field")
    header = magic + len(payload).to_bytes(LENGTH_BITS // 8, "big")
    return bytes_to_bits(header + payload)


def frame_probe(bits: np.ndarray, magic: bytes) -> FrameProbe:
    offset = find_bits(bits, bytes_to_bits(magic))
    if offset < 0:
        return FrameProbe()
    length_at = offset + len(magic) * 8
    if len(bits) < length_at + LENGTH_BITS:
        return FrameProbe(offset=offset)
    length = int.from_bytes(bits_to_bytes(bits[length_at:length_at + LENGTH_BITS]), "big")
    needed = length_at + LENGTH_BITS + length * 8
    return FrameProbe(offset=offset, length=length, needed_bits=needed, complete=len(bits) >= needed)


def frame_decode(bits: np.ndarray, magic: bytes) -> Optional[bytes]:
    """Payload of the first length-prefixed frame in ``bits``, or None when absent or truncated."""
    probe = frame_probe(bits, magic)
    if not probe.complete:
        return None
    start = probe.needed_bits - probe.length * 8
    return bits_to_bytes(bits[start:probe.needed_bits])


# ======================================================
# ---- Marker-terminated frames ----
# ======================================================
def marker_encode(payload: bytes, magic: bytes = b"") -> np.ndarray:
    if END_MARKER in payload:
        raise FramingError("Payload contains the end-marker byte sequence 0xFFFE")
    return bytes_to_bits(magic + payload + END_MARKER)


def marker_decode(bits: np.ndarray, magic: bytes = b"") -> Optional[bytes]:
    """
    Bytes between the leading magic and the first byte-aligned end marker.

    Returns None unless the stream starts with ``magic`` and holds a marker.
    """
    data = bits_to_bytes(bits)
    if not data.startswith(magic):
        return None
    end = data.find(END_MARKER, len(magic))
    if end < 0:
        return None
    return data[len(magic):end]
