"""Exception types raised by the codecs and their collaborators."""

from typing import Any, Dict, Optional


class StegoError(Exception):
    """Base class for every error raised by stegcodec."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class CapacityExceeded(StegoError):
    """The framed message does not fit the usable units of the carrier."""

    def __init__(self, required: int, available: int, unit: str = "bits"):
        super().__init__(
            f"Message too large for this carrier: need {required} {unit}, have {available} {unit}",
            {"required": required, "available": available, "unit": unit},
        )
        self.required = required
        self.available = available
        self.unit = unit


class FramingError(StegoError, ValueError):
    """The payload cannot be represented in the codec's frame format."""


class CollaboratorFailure(StegoError):
    """A media or cipher collaborator failed before the codec could run."""


class WrongPasswordOrCorrupt(StegoError):
    """Decryption failed: wrong password or malformed ciphertext."""
