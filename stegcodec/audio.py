"""
Audio steganography over mono 16-bit PCM samples.

The payload is framed as ``USTEGA1 | u32 length | payload``, every bit is
written three times, and the redundant bits go into the LSB of samples picked
by the seeded index generator. At most 80% of the samples carry bits.
Decoding walks the same position sequence and stops as soon as the declared
length has been read.
"""

import logging
from itertools import islice
from typing import Callable, Optional, Union

import numpy as np

from .bitstream import (
    apply_redundancy,
    as_bytes,
    collapse_redundancy,
    frame_decode,
    frame_encode,
    frame_probe,
)
from .cipher import Cipher, encrypt_if_needed, reveal_payload
from .config import AUDIO_EMBEDDING_FRACTION, AUDIO_MAGIC, HEADER_OVERHEAD, LENGTH_BITS, REDUNDANCY
from .errors import CapacityExceeded
from .indices import derive_seed, iter_indices
from .result import Message, NotFound
from .utils_audio import decode_to_pcm, encode_from_pcm

logger = logging.getLogger(__name__)

# Redundant bits covering magic + length field
_HEADER_BITS = (len(AUDIO_MAGIC) * 8 + LENGTH_BITS) * REDUNDANCY


def _check_samples(samples: np.ndarray) -> np.ndarray:
    samples = np.asarray(samples)
    if samples.ndim != 1 or not np.issubdtype(samples.dtype, np.integer):
        raise ValueError("samples must be a 1-D integer PCM array")
    return samples


def usable_bits(sample_count: int) -> int:
    return int(sample_count * AUDIO_EMBEDDING_FRACTION)


def calculate_audio_capacity(samples: np.ndarray) -> int:
    """Largest payload (bytes, after encryption) the samples can carry."""
    usable = usable_bits(len(_check_samples(samples)))
    return max(0, usable // REDUNDANCY // 8 - HEADER_OVERHEAD)


def encode_audio(
    samples: np.ndarray,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> np.ndarray:
    """
    Hide ``message`` in the sample LSBs and return a modified copy.

    Raises:
        CapacityExceeded: if the redundant frame needs more than 80% of the samples
    """
    samples = _check_samples(samples)
    payload = encrypt_if_needed(as_bytes(message), password, cipher)
    bits = apply_redundancy(frame_encode(payload, AUDIO_MAGIC), REDUNDANCY)

    usable = usable_bits(len(samples))
    if len(bits) > usable:
        raise CapacityExceeded(len(bits), usable, unit="bits")

    positions = np.fromiter(
        iter_indices(derive_seed(password), len(samples), len(bits)), dtype=np.int64, count=len(bits)
    )
    out = samples.copy()
    out[positions] = (out[positions] & ~out.dtype.type(1)) | bits
    logger.info(f"Audio encode: {len(payload)} payload bytes as {len(bits)} bits over {len(samples)} samples")
    return out


def decode_audio(
    samples: np.ndarray,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> Union[Message, NotFound]:
    samples = _check_samples(samples)
    usable = usable_bits(len(samples))
    positions = iter_indices(derive_seed(password), len(samples), usable)

    # Read just enough positions for the header, then exactly what the
    # declared length needs; fall back to doubling while no header is known.
    collected = np.empty(0, dtype=np.uint8)
    want = min(_HEADER_BITS, usable)
    while True:
        chunk = np.fromiter(islice(positions, want - len(collected)), dtype=np.int64)
        collected = np.concatenate([collected, (samples[chunk] & 1).astype(np.uint8)])
        probe = frame_probe(collapse_redundancy(collected, REDUNDANCY), AUDIO_MAGIC)
        if probe.complete:
            logger.debug(f"Audio decode: frame complete after {len(collected)}/{usable} bits")
            break
        if len(collected) >= usable:
            break
        if probe.needed_bits is not None:
            want = min(probe.needed_bits * REDUNDANCY, usable)
        else:
            want = min(max(len(collected) * 2, _HEADER_BITS), usable)

    data = frame_decode(collapse_redundancy(collected, REDUNDANCY), AUDIO_MAGIC)
    return reveal_payload(data, password, cipher)


# ======================================================
# ---- WAV files ----
# ======================================================
def encode_audio_file(
    data: bytes,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> bytes:
    """Embed into an audio file (WAV, or any format ffmpeg reads) and return a mono 16-bit WAV."""
    if on_progress:
        on_progress(10)
    pcm = decode_to_pcm(data)
    if on_progress:
        on_progress(30)
    stego = encode_audio(pcm.samples, message, password, cipher)
    if on_progress:
        on_progress(80)
    out = encode_from_pcm(stego, pcm.sample_rate)
    if on_progress:
        on_progress(100)
    return out


def decode_audio_file(
    data: bytes,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> Union[Message, NotFound]:
    if on_progress:
        on_progress(10)
    pcm = decode_to_pcm(data)
    if on_progress:
        on_progress(30)
    result = decode_audio(pcm.samples, password, cipher)
    if on_progress:
        on_progress(100)
    return result


def audio_file_capacity(data: bytes) -> int:
    return calculate_audio_capacity(decode_to_pcm(data).samples)
