from dataclasses import dataclass

# Shared
DEFAULT_SEED = "default-seed"
REDUNDANCY = 3
LENGTH_BITS = 32
MAX_PAYLOAD_LEN = 0xFFFFFFFF

# Marker-terminated frames (text, image)
END_MARKER = b"\xff\xfe"
IMAGE_MAGIC = b"ISTG"
IMAGE_OVERHEAD = len(IMAGE_MAGIC) + len(END_MARKER)

# Length-prefixed frames (audio, video)
AUDIO_MAGIC = b"USTEGA1"
AUDIO_EMBEDDING_FRACTION = 0.8
VIDEO_MAGIC = b"VSTEGA1"
VIDEO_EMBEDDING_FRACTION = 0.3
HEADER_OVERHEAD = len(AUDIO_MAGIC) + LENGTH_BITS // 8

# Pixel channels
RED_CHANNEL = 0
BLUE_CHANNEL = 2

# Cipher
KDF_ITERATIONS = 200_000
SALT_LEN = 16
NONCE_LEN = 12
CIPHER_PREFIX = "sc1:"


@dataclass(frozen=True)
class VideoLimits:
    """Caps applied when decoding a video container into frames."""

    max_seconds: float = 30.0
    max_width: int = 640
    max_height: int = 480
    max_fps: float = 10.0
