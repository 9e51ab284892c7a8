"""
Video steganography across a sequence of RGB(A) frames.

The frame is ``VSTEGA1 | u32 length | payload`` with 3x redundancy. Each video
frame gets its own seed (``seed:frame_index``) and contributes up to 30% of
its pixels, chosen by the index generator; bits go into the blue channel LSB.
"""

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .bitstream import apply_redundancy, as_bytes, collapse_redundancy, frame_decode, frame_encode, frame_probe
from .cipher import Cipher, encrypt_if_needed, reveal_payload
from .config import BLUE_CHANNEL, HEADER_OVERHEAD, LENGTH_BITS, REDUNDANCY, VIDEO_EMBEDDING_FRACTION, VIDEO_MAGIC
from .errors import CapacityExceeded
from .indices import derive_seed, iter_indices
from .result import Message, NotFound
from .utils import VideoTranscoder

logger = logging.getLogger(__name__)

_HEADER_BITS = (len(VIDEO_MAGIC) * 8 + LENGTH_BITS) * REDUNDANCY


def _check_frames(frames: Sequence[np.ndarray]) -> Tuple[int, int]:
    """Validate frames and return their (height, width)."""
    if not frames:
        raise ValueError("No frames")
    shape = frames[0].shape
    for f in frames:
        if not isinstance(f, np.ndarray) or f.dtype != np.uint8:
            raise TypeError("frames must be uint8 numpy arrays")
        if f.ndim != 3 or f.shape[2] < 3:
            raise ValueError(f"Unsupported frame shape {f.shape}")
        if f.shape != shape:
            raise ValueError("All frames must share one shape")
    return shape[0], shape[1]


def _frame_positions(seed: str, frame_index: int, pixel_count: int, count: int, width: int):
    px = np.fromiter(iter_indices(f"{seed}:{frame_index}", pixel_count, count), dtype=np.int64, count=count)
    return np.divmod(px, width)


def usable_bits(total_pixels: int) -> int:
    return int(total_pixels * VIDEO_EMBEDDING_FRACTION)


def bits_per_frame(pixel_count: int) -> int:
    return math.ceil(pixel_count * VIDEO_EMBEDDING_FRACTION)


def calculate_video_capacity(frames: Sequence[np.ndarray]) -> int:
    """Largest payload (bytes, after encryption) the frames can carry."""
    h, w = _check_frames(frames)
    usable = usable_bits(len(frames) * h * w)
    return max(0, usable // REDUNDANCY // 8 - HEADER_OVERHEAD)


def encode_video(
    frames: Sequence[np.ndarray],
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    inplace: bool = False,
) -> List[np.ndarray]:
    """
    Hide ``message`` in the blue channel LSBs of the frames.

    Args:
        frames: RGB or RGBA uint8 frames of one shape
        message: text (UTF-8) or bytes
        password: optional passphrase, also seeds pixel selection
        cipher: cipher used with ``password``
        inplace: modify the given frames instead of copies

    Returns:
        The stego frames, in order

    Raises:
        CapacityExceeded: if the redundant frame exceeds 30% of all pixels
    """
    h, w = _check_frames(frames)
    payload = encrypt_if_needed(as_bytes(message), password, cipher)
    bits = apply_redundancy(frame_encode(payload, VIDEO_MAGIC), REDUNDANCY)

    usable = usable_bits(len(frames) * h * w)
    if len(bits) > usable:
        raise CapacityExceeded(len(bits), usable, unit="bits")

    out = list(frames) if inplace else [f.copy() for f in frames]
    seed = derive_seed(password)
    per_frame = bits_per_frame(h * w)
    written = 0
    used_frames = 0
    for frame_index, frame in enumerate(out):
        if written >= len(bits):
            break
        take = min(per_frame, len(bits) - written)
        rows, cols = _frame_positions(seed, frame_index, h * w, take, w)
        frame[rows, cols, BLUE_CHANNEL] = (frame[rows, cols, BLUE_CHANNEL] & 0xFE) | bits[written:written + take]
        written += take
        used_frames += 1

    logger.info(
        f"Video encode: {len(payload)} payload bytes as {len(bits)} bits over {used_frames}/{len(frames)} frames"
    )
    return out


def decode_video(
    frames: Sequence[np.ndarray],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> Union[Message, NotFound]:
    h, w = _check_frames(frames)
    seed = derive_seed(password)
    per_frame = bits_per_frame(h * w)

    collected = []
    total = 0
    needed = None
    next_probe = _HEADER_BITS
    for frame_index, frame in enumerate(frames):
        rows, cols = _frame_positions(seed, frame_index, h * w, per_frame, w)
        collected.append((frame[rows, cols, BLUE_CHANNEL] & 1).astype(np.uint8))
        total += per_frame

        # Probe at doubling sizes until the declared length is known
        if needed is None and total >= next_probe:
            probe = frame_probe(collapse_redundancy(np.concatenate(collected), REDUNDANCY), VIDEO_MAGIC)
            if probe.needed_bits is not None:
                needed = probe.needed_bits * REDUNDANCY
            else:
                next_probe = total * 2
        if needed is not None and total >= needed:
            logger.debug(f"Video decode: frame complete after {frame_index + 1}/{len(frames)} frames")
            break

    data = frame_decode(collapse_redundancy(np.concatenate(collected), REDUNDANCY), VIDEO_MAGIC)
    return reveal_payload(data, password, cipher)


# ======================================================
# ---- Video files ----
# ======================================================
def encode_video_file(
    data: bytes,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    transcoder: Optional[VideoTranscoder] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> bytes:
    """
    Embed into a video file and return a lossless, silent video.

    ``transcoder`` is used as given and left open; when omitted a temporary
    one is created and closed before returning.
    """
    if transcoder is None:
        with VideoTranscoder() as owned:
            return encode_video_file(data, message, password, cipher, owned, on_progress)

    if on_progress:
        on_progress(10)
    clip = transcoder.extract_frames(data)
    if on_progress:
        on_progress(30)
    stego = encode_video(clip.frames, message, password, cipher, inplace=True)
    if on_progress:
        on_progress(80)
    out = transcoder.assemble_frames(stego, clip.fps, clip.width, clip.height)
    if on_progress:
        on_progress(100)
    return out


def decode_video_file(
    data: bytes,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    transcoder: Optional[VideoTranscoder] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> Union[Message, NotFound]:
    if transcoder is None:
        with VideoTranscoder() as owned:
            return decode_video_file(data, password, cipher, owned, on_progress)

    if on_progress:
        on_progress(10)
    clip = transcoder.extract_frames(data)
    if on_progress:
        on_progress(30)
    result = decode_video(clip.frames, password, cipher)
    if on_progress:
        on_progress(100)
    return result


def video_file_capacity(data: bytes, transcoder: Optional[VideoTranscoder] = None) -> int:
    if transcoder is None:
        with VideoTranscoder() as owned:
            return video_file_capacity(data, owned)
    return calculate_video_capacity(transcoder.extract_frames(data).frames)
