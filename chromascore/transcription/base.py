"""Base classes for slice classification."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import numpy as np

from ..analysis.pitch import describe_frequency
from ..core import Category, Note, index_to_pitch
from .buffer import AveragedSlice


@dataclass(frozen=True)
class PitchReading:
    """Pitch class, octave and chroma bin resolved for one slice."""

    pitch_class: str
    octave: int
    y_position: Optional[float]  # None when the category derives height itself
    chroma_index: Optional[int] = None


def octave_from_centroid(centroid: float) -> int:
    """Coarse octave from spectral centroid bands."""
    if not centroid:
        return 4
    if centroid < 200:
        return 2
    if centroid < 400:
        return 3
    if centroid < 800:
        return 4
    if centroid < 1600:
        return 5
    return 6


def linear_map(value: float, in_lo: float, in_hi: float,
               out_lo: float, out_hi: float, clamp: bool = False) -> float:
    """Map value from [in_lo, in_hi] onto [out_lo, out_hi]."""
    t = (value - in_lo) / (in_hi - in_lo)
    if clamp:
        t = min(1.0, max(0.0, t))
    return out_lo + t * (out_hi - out_lo)


def centroid_height(centroid: float) -> float:
    """Height from spectral centroid: 200 Hz at 0.85 down to 4 kHz at 0.15."""
    return linear_map(centroid, 200, 4000, 0.85, 0.15, clamp=True)


class CategoryClassifier(ABC):
    """Turn one averaged slice into at most one Note.

    Classifiers are pure: the same slice always yields the same Note.
    """

    category: Category

    @abstractmethod
    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        """
        Classify one slice.

        Args:
            features: Averaged slice features
            slice_index: Subdivision the slice occupies

        Returns:
            A Note, or None when the slice is discarded
        """
        pass

    def resolve_pitch(self, features: AveragedSlice) -> Optional[PitchReading]:
        """
        Pitch from the fundamental if present, else from the dominant chroma bin.

        Returns:
            PitchReading, or None if neither source is available
        """
        if features.pitch_hz:
            pitch_class, octave, y_norm = describe_frequency(features.pitch_hz)
            return PitchReading(pitch_class, octave, y_norm)

        if features.chroma is not None and len(features.chroma) == 12:
            index = int(np.argmax(features.chroma))
            return PitchReading(
                index_to_pitch(index),
                octave_from_centroid(features.centroid),
                None,
                chroma_index=index,
            )
        return None
