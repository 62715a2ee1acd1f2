"""Input layer - Audio decoding and file metadata."""

from .loader import AudioLoader, AudioDecodeError, AudioInfo

__all__ = [
    "AudioLoader",
    "AudioDecodeError",
    "AudioInfo",
]
