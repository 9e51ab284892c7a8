import io
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import cv2  # requires opencv-python
import numpy as np
from PIL import Image

from .config import VideoLimits
from .errors import CollaboratorFailure

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, str, os.PathLike]


# ---------------- Image Helpers ----------------
def open_image_rgba(source: ImageSource) -> np.ndarray:
    """Decode an image (bytes or path) into an (H, W, 4) uint8 RGBA array."""
    fp = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        with Image.open(fp) as im:
            return np.array(im.convert("RGBA"))
    except OSError as exc:
        raise CollaboratorFailure(f"Cannot decode image: {exc}") from exc


def save_image_png(arr: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(arr.astype(np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


# ---------------- Video Helpers ----------------
@dataclass
class FrameSequence:
    """Decoded video: RGB uint8 frames of identical shape."""

    frames: List[np.ndarray]
    fps: float
    width: int
    height: int


class VideoTranscoder:
    """
    Converts video containers to frame sequences and back with OpenCV.

    The transcoder owns a temporary working directory (OpenCV reads and writes
    files, not buffers), so create it once, pass it to the video pipeline and
    close it when done, or use it as a context manager.

    Args:
        limits: duration, resolution and frame-rate caps applied on extraction
        fourcc: output codec, must be lossless for the embedded bits to survive
        suffix: output container extension
    """

    def __init__(self, limits: Optional[VideoLimits] = None, fourcc: str = "FFV1", suffix: str = ".avi"):
        self.limits = limits or VideoLimits()
        self.fourcc = fourcc
        self.suffix = suffix
        self._workdir: Optional[tempfile.TemporaryDirectory] = tempfile.TemporaryDirectory(prefix="stegcodec-")
        self._counter = 0

    def __enter__(self) -> "VideoTranscoder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._workdir is None

    def close(self) -> None:
        if self._workdir is not None:
            self._workdir.cleanup()
            self._workdir = None

    def _scratch_path(self, suffix: str) -> str:
        if self._workdir is None:
            raise CollaboratorFailure("VideoTranscoder is closed")
        self._counter += 1
        return os.path.join(self._workdir.name, f"clip_{self._counter:04d}{suffix}")

    def _fit(self, frame: np.ndarray) -> np.ndarray:
        h, w = frame.shape[:2]
        scale = min(1.0, self.limits.max_width / w, self.limits.max_height / h)
        if scale >= 1.0:
            return frame
        size = (max(1, int(w * scale)), max(1, int(h * scale)))
        return cv2.resize(frame, size, interpolation=cv2.INTER_AREA)

    def extract_frames(self, data: bytes, suffix: str = ".avi") -> FrameSequence:
        path = self._scratch_path(suffix)
        with open(path, "wb") as f:
            f.write(data)

        cap = cv2.VideoCapture(path)
        try:
            if not cap.isOpened():
                raise CollaboratorFailure("Cannot open video stream")
            src_fps = cap.get(cv2.CAP_PROP_FPS)
            if not src_fps or math.isnan(src_fps) or src_fps <= 0:
                src_fps = self.limits.max_fps
            fps = min(src_fps, self.limits.max_fps)
            step = src_fps / fps
            max_frames = max(1, int(self.limits.max_seconds * fps))

            frames = []
            src_index = 0
            next_pick = 0.0
            while len(frames) < max_frames:
                ret, frame = cap.read()
                if not ret:
                    break
                if src_index >= next_pick:
                    frames.append(self._fit(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)))
                    next_pick += step
                src_index += 1
        finally:
            cap.release()
            os.remove(path)

        if not frames:
            raise CollaboratorFailure("No frames extracted")
        h, w = frames[0].shape[:2]
        logger.info(f"Extracted {len(frames)} frames at {fps:g} fps, {w}x{h}")
        return FrameSequence(frames, fps, w, h)

    def assemble_frames(self, frames: Sequence[np.ndarray], fps: float, width: int, height: int) -> bytes:
        if not frames:
            raise ValueError("No frames to save")
        path = self._scratch_path(self.suffix)
        out = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*self.fourcc), fps, (width, height))
        if not out.isOpened():
            raise CollaboratorFailure(f"OpenCV cannot write {self.fourcc} video")
        try:
            for f in frames:
                if f.shape[:2] != (height, width):
                    raise ValueError(f"Frame shape {f.shape[:2]} does not match {height}x{width}")
                out.write(cv2.cvtColor(np.ascontiguousarray(f[:, :, :3]), cv2.COLOR_RGB2BGR))
        finally:
            out.release()

        with open(path, "rb") as f:
            data = f.read()
        os.remove(path)
        return data
