"""Tempo estimation and measure timing."""

import numpy as np
import librosa
from typing import Tuple

from ..core import DEFAULT_BPM


class TempoAnalyzer:
    """Pick a tempo for the measure grid when the user has not set one."""

    def __init__(self, hop_length: int = 512):
        self.hop_length = hop_length

    @staticmethod
    def estimate_from_duration(duration: float) -> float:
        """
        Coarse tempo guess from the recording length.

        Short pieces tend to be brisk, long ones slower.

        Args:
            duration: Recording length in seconds

        Returns:
            Tempo in BPM
        """
        if duration < 120:
            return 130.0
        if duration > 300:
            return 100.0
        return DEFAULT_BPM

    def detect(self, audio: np.ndarray, sr: int) -> Tuple[float, np.ndarray]:
        """
        Detect tempo and beat positions.

        Args:
            audio: Audio array
            sr: Sample rate

        Returns:
            Tuple of (tempo in BPM, beat times in seconds)
        """
        tempo, beats = librosa.beat.beat_track(
            y=audio,
            sr=sr,
            hop_length=self.hop_length,
        )

        beat_times = librosa.frames_to_time(beats, sr=sr, hop_length=self.hop_length)

        # Handle tempo as array (newer librosa versions)
        if isinstance(tempo, np.ndarray):
            tempo = float(tempo[0]) if len(tempo) > 0 else DEFAULT_BPM

        return float(tempo), beat_times


def measure_duration(bpm: float, beats_per_measure: int) -> float:
    """Seconds per measure: (60 / bpm) * beats."""
    if bpm <= 0:
        raise ValueError(f"BPM must be positive, got {bpm}")
    return (60.0 / bpm) * beats_per_measure
