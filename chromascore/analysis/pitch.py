"""Pitch analysis utilities.

Fundamental-frequency estimation on a short time-domain window using
autocorrelation with parabolic peak refinement.
"""

import numpy as np
from typing import Optional, Tuple

from ..core import PITCH_NAMES


class PitchEstimator:
    """Estimate a fundamental frequency from one raw waveform window.

    Stateless: every call stands alone and a None result simply means
    "no pitch contribution this block".
    """

    def __init__(
        self,
        silence_rms: float = 0.01,
        trim_threshold: float = 0.2,
        min_length: int = 32,
    ):
        """
        Initialize PitchEstimator.

        Args:
            silence_rms: Windows quieter than this RMS are treated as silence
            trim_threshold: Amplitude under which leading/trailing samples are trimmed
            min_length: Minimum trimmed window length to attempt estimation
        """
        self.silence_rms = silence_rms
        self.trim_threshold = trim_threshold
        self.min_length = min_length

    def estimate(self, samples: np.ndarray, sample_rate: float) -> Optional[float]:
        """
        Estimate the fundamental frequency of a window.

        Args:
            samples: Time-domain samples (unsigned bytes or floats)
            sample_rate: Sample rate in Hz

        Returns:
            Fundamental frequency in Hz, or None if no pitch was found
        """
        buf = self._normalize(samples)
        if buf.size == 0:
            return None

        rms = np.sqrt(np.mean(buf ** 2))
        if rms < self.silence_rms:
            return None

        trimmed = self._trim(buf)
        size = trimmed.size
        if size < self.min_length:
            return None

        corr = self._autocorrelate(trimmed)

        # Walk past the zero-lag peak to the first local minimum
        d = 0
        while d < size - 1 and corr[d] > corr[d + 1]:
            d += 1

        tail = corr[d:]
        if tail.size == 0 or tail.max() <= -1.0:
            return None
        peak = d + int(np.argmax(tail))
        if peak <= 0:
            return None

        lag = self._refine_peak(corr, peak)
        return float(sample_rate / lag)

    def _normalize(self, samples: np.ndarray) -> np.ndarray:
        """Bring samples into [-1, 1]."""
        samples = np.asarray(samples)
        if samples.dtype == np.uint8:
            return (samples.astype(np.float64) - 128.0) / 128.0

        buf = samples.astype(np.float64)
        peak = np.abs(buf).max() if buf.size else 0.0
        if peak > 1.0:
            buf = buf / peak
        return buf

    def _trim(self, buf: np.ndarray) -> np.ndarray:
        """Trim leading/trailing runs above the edge threshold."""
        n = buf.size
        start, end = 0, n - 1
        half = (n + 1) // 2
        for i in range(half):
            if abs(buf[i]) < self.trim_threshold:
                start = i
                break
        for i in range(1, half):
            if abs(buf[n - i]) < self.trim_threshold:
                end = n - i
                break
        return buf[start:end]

    def _autocorrelate(self, trimmed: np.ndarray) -> np.ndarray:
        """Autocorrelation over lags [0, len)."""
        size = trimmed.size
        full = np.correlate(trimmed, trimmed, mode="full")
        return full[size - 1:]

    def _refine_peak(self, corr: np.ndarray, peak: int) -> float:
        """3-point parabolic interpolation around the peak lag."""
        if peak + 1 >= corr.size:
            return float(peak)
        y1, y2, y3 = corr[peak - 1], corr[peak], corr[peak + 1]
        a = (y1 + y3 - 2 * y2) / 2
        b = (y3 - y1) / 2
        if a == 0:
            return float(peak)
        refined = peak - b / (2 * a)
        return float(refined) if refined > 0 else float(peak)


def freq_to_midi(freq: float) -> float:
    """Convert frequency (Hz) to a fractional MIDI number."""
    return 69 + 12 * np.log2(freq / 440.0)


def midi_to_pitch_class(midi: float) -> str:
    """Pitch-class name of the nearest MIDI note."""
    return PITCH_NAMES[int(round(midi)) % 12]


def midi_to_octave(midi: float) -> int:
    """Scientific octave of the nearest MIDI note (MIDI 60 = C4)."""
    return int(np.floor(round(midi) / 12)) - 1


def freq_to_y_norm(freq: float, fmin: float = 80.0, fmax: float = 1200.0) -> float:
    """Log-frequency height, 0 at fmax (top) and 1 at fmin (bottom)."""
    f = min(fmax, max(fmin, freq))
    t = (np.log(f) - np.log(fmin)) / (np.log(fmax) - np.log(fmin))
    return float(1 - t)


def describe_frequency(freq: float) -> Tuple[str, int, float]:
    """
    Convert a frequency to (pitch class, octave, normalized height).

    Args:
        freq: Fundamental frequency in Hz

    Returns:
        Tuple of (pitch class, octave, y position)
    """
    midi = freq_to_midi(freq)
    return midi_to_pitch_class(midi), midi_to_octave(midi), freq_to_y_norm(freq)
