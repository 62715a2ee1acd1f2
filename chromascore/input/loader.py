"""Audio decoding for the offline host.

Everything that can fail about a file (missing, unsupported extension,
undecodable, empty) fails here, before a transcription session is touched.
"""

import numpy as np
import librosa
import soundfile as sf
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union


class AudioDecodeError(RuntimeError):
    """The audio file exists but could not be decoded."""


@dataclass(frozen=True)
class AudioInfo:
    """Container metadata read without decoding the samples."""

    path: Path
    format: str
    subtype: str
    channels: int
    sample_rate: int
    frames: int

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate if self.sample_rate else 0.0


class AudioLoader:
    """Decode audio files into mono float arrays at a fixed rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        target_sr: int = 44100,
        mono: bool = True,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Sample rate the feature stream is computed at
            mono: Downmix to one channel
            normalize: Peak-normalize the decoded signal
        """
        self.target_sr = target_sr
        self.mono = mono
        self.normalize = normalize

    def load(self, path: Union[str, Path]) -> Tuple[np.ndarray, int]:
        """
        Decode a file.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the extension is not supported
            AudioDecodeError: If the file cannot be decoded or holds no samples
        """
        path = self._check_path(path)

        try:
            audio, sr = librosa.load(str(path), sr=self.target_sr, mono=self.mono)
        except Exception as e:
            raise AudioDecodeError(f"Could not decode {path.name}: {e}") from e

        if audio.size == 0:
            raise AudioDecodeError(f"No audio samples in {path.name}")

        if self.normalize:
            audio = self._normalize(audio)
        return audio, sr

    def probe(self, path: Union[str, Path]) -> Optional[AudioInfo]:
        """
        Read container metadata.

        Returns:
            AudioInfo, or None for containers libsndfile cannot read
            (e.g. mp3/m4a on older builds)
        """
        path = self._check_path(path)
        try:
            info = sf.info(str(path))
        except RuntimeError:
            return None
        return AudioInfo(
            path=path,
            format=info.format,
            subtype=info.subtype,
            channels=info.channels,
            sample_rate=info.samplerate,
            frames=info.frames,
        )

    def _check_path(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")
        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )
        return path

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Peak-normalize to [-1, 1]."""
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio

    def get_duration(self, audio: np.ndarray, sr: Optional[int] = None) -> float:
        """Duration of a decoded signal in seconds."""
        return len(audio) / (sr or self.target_sr)
