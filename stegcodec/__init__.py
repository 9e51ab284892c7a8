# stegcodec/__init__.py
"""
stegcodec
---------
Steganographic codecs that hide a payload in text, images, PCM audio and video
frames, with optional password encryption.
"""

import logging

from .text import encode_text, decode_text, text_capacity, strip_markers
from .image import (
    encode_image, decode_image, image_capacity,
    encode_image_file, decode_image_file, image_file_capacity,
)
from .audio import (
    encode_audio, decode_audio, calculate_audio_capacity,
    encode_audio_file, decode_audio_file, audio_file_capacity,
)
from .video import (
    encode_video, decode_video, calculate_video_capacity,
    encode_video_file, decode_video_file, video_file_capacity,
)

from .bitstream import (
    apply_redundancy, collapse_redundancy,
    frame_encode, frame_decode,
    marker_encode, marker_decode,
)
from .cipher import Cipher, PassphraseCipher
from .config import VideoLimits
from .errors import (
    StegoError, CapacityExceeded, FramingError,
    CollaboratorFailure, WrongPasswordOrCorrupt,
)
from .indices import derive_seed, generate_indices
from .result import Message, NotFound
from .utils import VideoTranscoder, FrameSequence, open_image_rgba, save_image_png
from .utils_audio import PcmAudio, decode_to_pcm, encode_from_pcm

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # text
    "encode_text", "decode_text", "text_capacity", "strip_markers",
    # image
    "encode_image", "decode_image", "image_capacity",
    "encode_image_file", "decode_image_file", "image_file_capacity",
    # audio
    "encode_audio", "decode_audio", "calculate_audio_capacity",
    "encode_audio_file", "decode_audio_file", "audio_file_capacity",
    # video
    "encode_video", "decode_video", "calculate_video_capacity",
    "encode_video_file", "decode_video_file", "video_file_capacity",

    # framing and placement
    "apply_redundancy", "collapse_redundancy",
    "frame_encode", "frame_decode", "marker_encode", "marker_decode",
    "derive_seed", "generate_indices",
    # cipher
    "Cipher", "PassphraseCipher",
    # results and errors
    "Message", "NotFound",
    "StegoError", "CapacityExceeded", "FramingError",
    "CollaboratorFailure", "WrongPasswordOrCorrupt",
    # collaborators
    "VideoLimits", "VideoTranscoder", "FrameSequence",
    "open_image_rgba", "save_image_png",
    "PcmAudio", "decode_to_pcm", "encode_from_pcm",
]

__version__ = "0.1.0"
