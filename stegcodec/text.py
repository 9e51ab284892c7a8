"""
Text steganography with zero-width characters.

Each pair of frame bits becomes one invisible marker inserted after a cover
character:

    00 -> U+200B  zero width space
    01 -> U+200C  zero width non-joiner
    10 -> U+200D  zero width joiner
    11 -> U+FEFF  zero width no-break space

The frame is marker-terminated and the zero-width run ends exactly at the
marker, so decoding needs nothing but the markers.
"""

import logging
import math
from typing import Optional, Union

import numpy as np

from .bitstream import as_bytes, marker_decode, marker_encode
from .cipher import Cipher, encrypt_if_needed, reveal_payload
from .config import END_MARKER
from .errors import CapacityExceeded, FramingError
from .result import Message, NotFound

logger = logging.getLogger(__name__)

ZERO_WIDTH_SPACE = "\u200B"
ZERO_WIDTH_NON_JOINER = "\u200C"
ZERO_WIDTH_JOINER = "\u200D"
ZERO_WIDTH_NO_BREAK_SPACE = "\uFEFF"

# Index is the 2-bit symbol value
MARKERS = (ZERO_WIDTH_SPACE, ZERO_WIDTH_NON_JOINER, ZERO_WIDTH_JOINER, ZERO_WIDTH_NO_BREAK_SPACE)
_SYMBOLS = {ch: i for i, ch in enumerate(MARKERS)}


def text_capacity(cover_text: str) -> int:
    """Largest payload (bytes, after encryption) that fits ``cover_text``."""
    return max(0, len(cover_text) * 2 // 8 - len(END_MARKER))


def strip_markers(text: str) -> str:
    return "".join(ch for ch in text if ch not in _SYMBOLS)


def encode_text(
    cover_text: str,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> str:
    if any(ch in _SYMBOLS for ch in cover_text):
        raise FramingError("Cover text already contains zero-width marker characters")

    payload = encrypt_if_needed(as_bytes(message), password, cipher)
    bits = marker_encode(payload)
    symbols = bits.reshape(-1, 2) @ np.array([2, 1], dtype=np.uint8)

    needed = math.ceil(len(bits) / 2)
    if needed > len(cover_text):
        raise CapacityExceeded(needed, len(cover_text), unit="characters")

    out = []
    for ch, sym in zip(cover_text, symbols):
        out.append(ch)
        out.append(MARKERS[int(sym)])
    out.append(cover_text[needed:])

    logger.info(f"Text encode: {len(payload)} payload bytes in {needed}/{len(cover_text)} characters")
    return "".join(out)


def decode_text(
    stego_text: str,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> Union[Message, NotFound]:
    symbols = [_SYMBOLS[ch] for ch in stego_text if ch in _SYMBOLS]
    if not symbols:
        return NotFound("no zero-width characters in text")

    pairs = np.array(symbols, dtype=np.uint8)
    bits = np.stack([(pairs >> 1) & 1, pairs & 1], axis=1).reshape(-1)
    data = marker_decode(bits)
    # An encoded run ends exactly at the marker
    if data is not None and len(bits) != (len(data) + len(END_MARKER)) * 8:
        logger.debug(f"Text decode: marker at byte {len(data)} of {len(bits) // 8}, not a frame")
        return NotFound("zero-width characters do not form a frame")
    return reveal_payload(data, password, cipher)
