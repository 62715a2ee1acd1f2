"""Time-quantized feature accumulation.

Feature records are bucketed into a (measure, subdivision) grid by the
playback clock. When a record lands in a later measure, the previous measure
is sealed: each of its slices is reduced to averages and handed on for
classification, in ascending subdivision order.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import numpy as np

from ..analysis.clock import PlaybackClock
from ..analysis.features import FeatureFrame
from ..analysis.tempo import measure_duration
from ..core import SUBDIVISIONS


@dataclass
class SliceAccumulator:
    """Raw feature samples collected for one (measure, subdivision) slice."""

    loudness: List[float] = field(default_factory=list)
    centroid: List[float] = field(default_factory=list)
    chroma: List[np.ndarray] = field(default_factory=list)
    rolloff: List[float] = field(default_factory=list)
    zcr: List[float] = field(default_factory=list)
    sharpness: List[float] = field(default_factory=list)
    flux: List[float] = field(default_factory=list)
    pitch_hz: List[float] = field(default_factory=list)

    def average(self) -> "AveragedSlice":
        """Reduce to per-feature means (empty lists average to 0)."""
        chroma = None
        if self.chroma:
            chroma = np.mean(np.vstack(self.chroma), axis=0)
        return AveragedSlice(
            loudness=_mean(self.loudness),
            centroid=_mean(self.centroid),
            flux=_mean(self.flux),
            zcr=_mean(self.zcr),
            sharpness=_mean(self.sharpness),
            rolloff=_mean(self.rolloff),
            pitch_hz=_mean(self.pitch_hz) if self.pitch_hz else None,
            chroma=chroma,
        )


@dataclass(frozen=True)
class AveragedSlice:
    """Averaged features of one slice, the input of every classifier."""

    loudness: float = 0.0
    centroid: float = 0.0
    flux: float = 0.0
    zcr: float = 0.0
    sharpness: float = 0.0
    rolloff: float = 0.0
    pitch_hz: Optional[float] = None
    chroma: Optional[np.ndarray] = None


@dataclass(frozen=True)
class SealedMeasure:
    """A measure whose slices are ready for classification."""

    index: int  # 0-based
    slices: Tuple[AveragedSlice, ...]


def _mean(values: List[float]) -> float:
    if not values:
        return 0.0
    return float(sum(values) / len(values))


def spectral_flux(current: np.ndarray, previous: np.ndarray) -> float:
    """Sum of positive bin-wise magnitude increases."""
    n = min(len(current), len(previous))
    diff = np.asarray(current[:n], dtype=np.float64) - np.asarray(previous[:n], dtype=np.float64)
    return float(np.clip(diff, 0.0, None).sum())


class FeatureBuffer:
    """Accumulate feature records per (measure, subdivision) slice."""

    def __init__(
        self,
        clock: PlaybackClock,
        bpm: float = 120.0,
        beats_per_measure: int = 4,
        subdivisions: int = SUBDIVISIONS,
    ):
        """
        Initialize FeatureBuffer.

        Args:
            clock: Clock the slice position is read from
            bpm: Tempo in BPM
            beats_per_measure: Beats per measure
            subdivisions: Slices per measure
        """
        self.clock = clock
        self.bpm = bpm
        self.beats_per_measure = beats_per_measure
        self.subdivisions = subdivisions
        self._buffers: Dict[int, List[SliceAccumulator]] = {}
        self._previous_spectrum: Optional[np.ndarray] = None
        self._last_sealed = -1
        self.current_measure_index = 0

    @property
    def measure_duration(self) -> float:
        return measure_duration(self.bpm, self.beats_per_measure)

    @property
    def pending_measures(self) -> List[int]:
        """Indices of measures with buffered, unsealed data."""
        return sorted(self._buffers)

    def locate(self, elapsed: float) -> Tuple[int, int]:
        """
        Map elapsed seconds to a grid position.

        Args:
            elapsed: Playback seconds

        Returns:
            Tuple of (measure index, subdivision index)
        """
        duration = self.measure_duration
        elapsed = max(0.0, elapsed)
        measure_index = int(np.floor(elapsed / duration))
        in_measure = elapsed - measure_index * duration
        slice_index = int(np.floor((in_measure / duration) * self.subdivisions))
        slice_index = min(self.subdivisions - 1, max(0, slice_index))
        return measure_index, slice_index

    def add(
        self,
        frame: FeatureFrame,
        fundamental_hz: Optional[float] = None,
    ) -> Optional[SealedMeasure]:
        """
        Append one feature record to the slice the clock points at.

        Args:
            frame: Feature record (absent fields are skipped)
            fundamental_hz: Optional pitch estimate for this record

        Returns:
            The previous measure, sealed, if this record crossed into a new
            measure; otherwise None
        """
        measure_index, slice_index = self.locate(self.clock.elapsed())
        slices = self._buffers.get(measure_index)
        if slices is None:
            slices = [SliceAccumulator() for _ in range(self.subdivisions)]
            self._buffers[measure_index] = slices
        acc = slices[slice_index]

        if frame.loudness is not None:
            acc.loudness.append(float(frame.loudness))
        if frame.spectral_centroid is not None:
            acc.centroid.append(float(frame.spectral_centroid))
        if frame.spectral_rolloff is not None:
            acc.rolloff.append(float(frame.spectral_rolloff))
        if frame.chroma is not None:
            acc.chroma.append(np.asarray(frame.chroma, dtype=np.float64))
        if frame.zero_crossing_rate is not None:
            acc.zcr.append(float(frame.zero_crossing_rate))
        if frame.perceptual_sharpness is not None:
            acc.sharpness.append(float(frame.perceptual_sharpness))
        if fundamental_hz:
            acc.pitch_hz.append(float(fundamental_hz))

        if frame.amplitude_spectrum is not None:
            spectrum = np.asarray(frame.amplitude_spectrum)
            if self._previous_spectrum is not None:
                acc.flux.append(spectral_flux(spectrum, self._previous_spectrum))
            self._previous_spectrum = spectrum

        self.current_measure_index = measure_index

        # Only the immediately preceding measure is considered; measures
        # skipped wholesale by a gap stay unsealed and are dropped.
        if measure_index - 1 > self._last_sealed:
            self._last_sealed = measure_index - 1
            sealed = self._seal(measure_index - 1)
            for stale in [i for i in self._buffers if i < measure_index - 1]:
                del self._buffers[stale]
            return sealed
        return None

    def seal_pending(self) -> Optional[SealedMeasure]:
        """Seal the newest unsealed measure (used for a trailing partial measure)."""
        candidates = [i for i in self._buffers if i > self._last_sealed]
        if not candidates:
            return None
        index = max(candidates)
        self._last_sealed = index
        return self._seal(index)

    def _seal(self, measure_index: int) -> Optional[SealedMeasure]:
        slices = self._buffers.pop(measure_index, None)
        if slices is None:
            return None
        return SealedMeasure(
            index=measure_index,
            slices=tuple(acc.average() for acc in slices),
        )

    def clear(self) -> None:
        """Discard all buffered slices and the flux history."""
        self._buffers.clear()
        self._previous_spectrum = None
        self._last_sealed = -1
        self.current_measure_index = 0
