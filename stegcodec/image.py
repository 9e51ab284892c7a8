"""
Image steganography: one bit per pixel in the red channel LSB.

Pixel buffers are ``uint8`` arrays shaped ``(H, W, C)`` with at least three
channels, or flat RGBA buffers. Bits are written to pixels in scan order and
the frame is ``ISTG`` magic, payload, end marker.
"""

import logging
from typing import Callable, Optional, Union

import numpy as np

from .bitstream import as_bytes, marker_decode, marker_encode
from .cipher import Cipher, encrypt_if_needed, reveal_payload
from .config import IMAGE_MAGIC, IMAGE_OVERHEAD, RED_CHANNEL
from .errors import CapacityExceeded
from .result import Message, NotFound
from .utils import open_image_rgba, save_image_png

logger = logging.getLogger(__name__)


def _check_pixels(pixels: np.ndarray) -> int:
    """Validate a pixel buffer and return its pixel count."""
    if not isinstance(pixels, np.ndarray) or pixels.dtype != np.uint8:
        raise TypeError("pixels must be a uint8 numpy array")
    if pixels.ndim == 1:
        if pixels.size % 4:
            raise ValueError("flat pixel buffers must be RGBA (length divisible by 4)")
        return pixels.size // 4
    if pixels.ndim == 3 and pixels.shape[2] >= 3:
        return pixels.shape[0] * pixels.shape[1]
    raise ValueError(f"Unsupported pixel buffer shape {pixels.shape}")


def _red_lsbs(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 1:
        return pixels[RED_CHANNEL::4] & 1
    return pixels[:, :, RED_CHANNEL].reshape(-1) & 1


def _write_red_lsbs(pixels: np.ndarray, bits: np.ndarray) -> None:
    n = len(bits)
    if pixels.ndim == 1:
        sel = np.arange(n) * 4 + RED_CHANNEL
        pixels[sel] = (pixels[sel] & 0xFE) | bits
        return
    flat = np.arange(n)
    rows, cols = flat // pixels.shape[1], flat % pixels.shape[1]
    pixels[rows, cols, RED_CHANNEL] = (pixels[rows, cols, RED_CHANNEL] & 0xFE) | bits


def image_capacity(pixels: np.ndarray) -> int:
    """Largest payload (bytes, after encryption) the buffer can hold."""
    return max(0, _check_pixels(pixels) // 8 - IMAGE_OVERHEAD)


def encode_image(
    pixels: np.ndarray,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    inplace: bool = False,
) -> np.ndarray:
    """
    Hide ``message`` in the red channel LSBs of ``pixels``.

    Args:
        pixels: uint8 pixel buffer, (H, W, C>=3) or flat RGBA
        message: text (UTF-8) or bytes
        password: optional passphrase; the payload is encrypted when given
        cipher: cipher used with ``password``, defaults to PassphraseCipher
        inplace: write into ``pixels`` instead of a copy

    Returns:
        The stego pixel buffer

    Raises:
        CapacityExceeded: if the framed message has more bits than pixels
    """
    pixel_count = _check_pixels(pixels)
    payload = encrypt_if_needed(as_bytes(message), password, cipher)
    bits = marker_encode(payload, IMAGE_MAGIC)
    if len(bits) > pixel_count:
        raise CapacityExceeded(len(bits), pixel_count, unit="pixels")

    out = pixels if inplace else pixels.copy()
    _write_red_lsbs(out, bits)
    logger.info(f"Image encode: {len(payload)} payload bytes in {len(bits)}/{pixel_count} pixels")
    return out


def decode_image(
    pixels: np.ndarray,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
) -> Union[Message, NotFound]:
    _check_pixels(pixels)
    return reveal_payload(marker_decode(_red_lsbs(pixels), IMAGE_MAGIC), password, cipher)


# ======================================================
# ---- Image files ----
# ======================================================
def encode_image_file(
    data: bytes,
    message: Union[str, bytes],
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> bytes:
    """Embed into an encoded image (any Pillow format) and return PNG bytes."""
    if on_progress:
        on_progress(10)
    pixels = open_image_rgba(data)
    if on_progress:
        on_progress(30)
    stego = encode_image(pixels, message, password, cipher, inplace=True)
    if on_progress:
        on_progress(80)
    out = save_image_png(stego)
    if on_progress:
        on_progress(100)
    return out


def decode_image_file(
    data: bytes,
    password: Optional[str] = None,
    cipher: Optional[Cipher] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> Union[Message, NotFound]:
    if on_progress:
        on_progress(10)
    pixels = open_image_rgba(data)
    if on_progress:
        on_progress(30)
    result = decode_image(pixels, password, cipher)
    if on_progress:
        on_progress(100)
    return result


def image_file_capacity(data: bytes) -> int:
    return image_capacity(open_image_rgba(data))
