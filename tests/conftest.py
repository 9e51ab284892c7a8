# Shared fixtures for the stegcodec test-suite

import numpy as np
import pytest

from stegcodec import PassphraseCipher


@pytest.fixture(scope="session")
def fast_cipher():
    """Cipher with few KDF rounds so password tests stay quick."""
    return PassphraseCipher(iterations=1_000)


@pytest.fixture
def cover_text():
    return 3 * (
        "It was a bright cold day in April, and the clocks were striking thirteen. "
        "Winston Smith, his chin nuzzled into his breast in an effort to escape the "
        "vile wind, slipped quickly through the glass doors of Victory Mansions."
    )


@pytest.fixture
def rgba_image():
    """64x64 opaque RGBA noise."""
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    return arr


@pytest.fixture
def pcm_samples():
    """Two seconds of a 440 Hz tone with noise, 8 kHz mono int16."""
    rate = 8000
    t = np.arange(rate * 2) / rate
    rng = np.random.default_rng(3)
    wave = 8000 * np.sin(2 * np.pi * 440 * t) + rng.normal(0, 200, t.size)
    return wave.astype(np.int16)


@pytest.fixture
def video_frames():
    """Six 64x48 RGB frames."""
    rng = np.random.default_rng(11)
    return [rng.integers(0, 256, size=(48, 64, 3), dtype=np.uint8) for _ in range(6)]
