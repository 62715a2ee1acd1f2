"""Feature extraction for audio analysis.

Produces the fixed-cadence stream of per-block feature records a live audio
graph would deliver: one FeatureFrame per processing block, carrying only the
feature fields requested by the active category plus the rolling raw-waveform
window used for pitch estimation.
"""

import numpy as np
import librosa
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional

from ..core import Category, DEFAULT_BLOCK_SIZE, DEFAULT_WAVEFORM_SIZE


@dataclass
class FeatureFrame:
    """One feature record; absent fields are None."""

    loudness: Optional[float] = None
    amplitude_spectrum: Optional[np.ndarray] = None
    spectral_centroid: Optional[float] = None
    chroma: Optional[np.ndarray] = None  # 12 values
    zero_crossing_rate: Optional[float] = None
    spectral_rolloff: Optional[float] = None
    perceptual_sharpness: Optional[float] = None
    waveform: Optional[np.ndarray] = None  # rolling time-domain window
    time: float = 0.0  # audio time at the end of the block


class FeatureExtractor:
    """Extracts block-wise audio features for transcription."""

    # Critical-band count used for the sharpness estimate
    N_BANDS = 24

    def __init__(
        self,
        sr: int = 44100,
        block_size: int = DEFAULT_BLOCK_SIZE,
        waveform_size: int = DEFAULT_WAVEFORM_SIZE,
        rolloff_percent: float = 0.99,
    ):
        """
        Initialize FeatureExtractor.

        Args:
            sr: Sample rate
            block_size: Samples per feature record (also the FFT size)
            waveform_size: Length of the raw window handed to pitch estimation
            rolloff_percent: Energy fraction for spectral rolloff
        """
        self.sr = sr
        self.block_size = block_size
        self.waveform_size = waveform_size
        self.rolloff_percent = rolloff_percent

    @property
    def block_duration(self) -> float:
        """Duration of one processing block in seconds."""
        return self.block_size / self.sr

    def frames(
        self,
        audio: np.ndarray,
        category: Category,
        include_waveform: Optional[bool] = None,
    ) -> Iterator[FeatureFrame]:
        """
        Stream feature records for a whole signal.

        Args:
            audio: Mono audio array
            category: Category whose requested feature set is extracted
            include_waveform: Attach the raw window (defaults to category.is_pitched)

        Yields:
            One FeatureFrame per complete block
        """
        requested = category.requested_features
        if include_waveform is None:
            include_waveform = category.is_pitched

        audio = np.asarray(audio, dtype=np.float32)
        n_blocks = len(audio) // self.block_size
        if n_blocks == 0:
            return

        blocks = librosa.util.frame(
            audio[: n_blocks * self.block_size],
            frame_length=self.block_size,
            hop_length=self.block_size,
        )
        spectra = self.amplitude_spectra(blocks)
        columns = self._compute(blocks, spectra, requested)

        for i in range(n_blocks):
            end = (i + 1) * self.block_size
            frame = FeatureFrame(time=end / self.sr)
            for name, values in columns.items():
                setattr(frame, name, values[i])
            if "amplitude_spectrum" in requested:
                frame.amplitude_spectrum = spectra[:, i]
            if include_waveform:
                frame.waveform = self._window(audio, end)
            yield frame

    def amplitude_spectra(self, blocks: np.ndarray) -> np.ndarray:
        """Magnitude spectrum of each block [n_bins, n_blocks]."""
        return np.abs(np.fft.rfft(blocks, axis=0))

    def _compute(
        self,
        blocks: np.ndarray,
        spectra: np.ndarray,
        requested: FrozenSet[str],
    ) -> dict:
        """Per-block scalar/vector features restricted to the requested set."""
        columns = {}

        if "loudness" in requested:
            columns["loudness"] = self._as_list(np.sqrt(np.mean(blocks ** 2, axis=0)))

        if "spectral_centroid" in requested:
            centroid = librosa.feature.spectral_centroid(
                S=spectra, sr=self.sr, n_fft=self.block_size
            )[0]
            columns["spectral_centroid"] = self._as_list(centroid)

        if "spectral_rolloff" in requested:
            rolloff = librosa.feature.spectral_rolloff(
                S=spectra, sr=self.sr, n_fft=self.block_size,
                roll_percent=self.rolloff_percent,
            )[0]
            columns["spectral_rolloff"] = self._as_list(rolloff)

        if "zero_crossing_rate" in requested:
            crossings = librosa.zero_crossings(blocks, axis=0)
            columns["zero_crossing_rate"] = self._as_list(crossings.mean(axis=0))

        if "chroma" in requested:
            chroma = librosa.feature.chroma_stft(
                S=spectra ** 2, sr=self.sr, n_fft=self.block_size, tuning=0.0
            )
            columns["chroma"] = [chroma[:, i] for i in range(chroma.shape[1])]

        if "perceptual_sharpness" in requested:
            columns["perceptual_sharpness"] = self._as_list(self.sharpness(spectra))

        return columns

    def sharpness(self, spectra: np.ndarray) -> np.ndarray:
        """
        Zwicker-style sharpness over mel bands standing in for critical bands.

        Args:
            spectra: Magnitude spectra [n_bins, n_blocks]

        Returns:
            Sharpness per block (0 for silent blocks)
        """
        bands = librosa.filters.mel(sr=self.sr, n_fft=self.block_size, n_mels=self.N_BANDS)
        specific = np.power(bands @ (spectra ** 2), 0.23)
        z = np.arange(1, self.N_BANDS + 1, dtype=np.float64)
        weights = np.where(z < 15, 1.0, 0.066 * np.exp(0.171 * z))
        total = specific.sum(axis=0)
        weighted = (specific * (z * weights)[:, None]).sum(axis=0)
        with np.errstate(divide="ignore", invalid="ignore"):
            sharp = np.where(total > 0, 0.11 * weighted / total, 0.0)
        return sharp

    def _window(self, audio: np.ndarray, end: int) -> np.ndarray:
        """Most recent waveform_size samples ending at `end`, zero padded."""
        start = end - self.waveform_size
        if start >= 0:
            return audio[start:end].copy()
        return np.concatenate([np.zeros(-start, dtype=audio.dtype), audio[:end]])

    @staticmethod
    def _as_list(values: np.ndarray) -> List[float]:
        return [float(v) for v in values]
