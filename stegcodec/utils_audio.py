import io
import logging
import wave
from dataclasses import dataclass

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .errors import CollaboratorFailure

logger = logging.getLogger(__name__)


@dataclass
class PcmAudio:
    samples: np.ndarray  # mono int16
    sample_rate: int


def _read_wav(data: bytes) -> PcmAudio:
    with wave.open(io.BytesIO(data), "rb") as wf:
        n_channels, sampwidth, framerate, n_frames, _, _ = wf.getparams()
        raw = wf.readframes(n_frames)

    if sampwidth == 2:  # 16-bit PCM
        samples = np.frombuffer(raw, dtype="<i2").astype(np.int16)
    elif sampwidth == 1:  # 8-bit unsigned PCM
        samples = (np.frombuffer(raw, dtype=np.uint8).astype(np.int16) - 128) << 8
    else:
        raise CollaboratorFailure(f"Unsupported sample width: {sampwidth * 8} bits")

    samples = samples.reshape(-1, n_channels)[:, 0].copy()
    return PcmAudio(samples, framerate)


def _read_any(data: bytes) -> PcmAudio:
    """Decode any container ffmpeg understands, downmixed to mono 16-bit."""
    try:
        segment = AudioSegment.from_file(io.BytesIO(data))
    except (CouldntDecodeError, OSError, ValueError) as exc:
        raise CollaboratorFailure(f"Cannot decode audio: {exc}") from exc

    segment = segment.set_channels(1).set_sample_width(2)
    samples = np.array(segment.get_array_of_samples(), dtype=np.int16)
    return PcmAudio(samples, segment.frame_rate)


def decode_to_pcm(data: bytes) -> PcmAudio:
    """
    Read audio bytes into mono int16 samples.

    PCM WAV is read directly (first channel of multichannel input); anything
    else (mp3, ogg, flac, ...) goes through pydub/ffmpeg and is downmixed.
    """
    try:
        return _read_wav(data)
    except (wave.Error, EOFError) as exc:
        logger.debug(f"Not a PCM WAV ({exc}), trying ffmpeg")
    return _read_any(data)


def encode_from_pcm(samples: np.ndarray, sample_rate: int) -> bytes:
    """Write mono int16 samples as a 16-bit PCM WAV."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(samples.astype("<i2").tobytes())
    return buf.getvalue()
