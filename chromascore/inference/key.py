"""Key and mode detection - Identify the tonal center and per-measure mode.

Implements:
- A global tonic from a running histogram of dominant chroma bins
- Per-measure mode scoring against the seven diatonic presence templates
- Hue rotation that puts the detected tonic at 0 degrees
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import numpy as np

from ..core import PITCH_NAMES, Mode, index_to_pitch, tonic_hue
from ..core.theory import MODAL_TEMPLATES, PITCH_TO_SEMITONE


@dataclass
class KeyModeState:
    """Running key state for one recording."""

    histogram: Dict[str, int] = field(default_factory=dict)  # insertion ordered
    tonic: Optional[str] = None
    key_hue_offset: float = 0.0
    last_mode: Optional[Mode] = None

    @property
    def counts(self) -> np.ndarray:
        """Histogram as a 12-element array in chromatic order."""
        return np.array([self.histogram.get(p, 0) for p in PITCH_NAMES])


class KeyModeDetector:
    """Detect the song's tonic and each measure's mode.

    The tonic is global and monotone in evidence: every chroma observation
    adds one count. The mode is recomputed for each measure from that
    measure's own pitch classes only.
    """

    def __init__(self, min_pitch_classes: int = 3):
        """
        Initialize KeyModeDetector.

        Args:
            min_pitch_classes: Minimum pitch classes needed to name a mode
        """
        self.min_pitch_classes = min_pitch_classes
        self.state = KeyModeState()

    @property
    def tonic(self) -> Optional[str]:
        return self.state.tonic

    @property
    def key_hue_offset(self) -> float:
        return self.state.key_hue_offset

    def observe_chroma(self, chroma: Iterable[float]) -> str:
        """
        Count the dominant pitch class of one chroma vector.

        Args:
            chroma: 12-bin chroma vector

        Returns:
            The dominant pitch class
        """
        pitch_class = index_to_pitch(int(np.argmax(np.asarray(chroma))))
        self.observe(pitch_class)
        return pitch_class

    def observe(self, pitch_class: str) -> None:
        hist = self.state.histogram
        hist[pitch_class] = hist.get(pitch_class, 0) + 1

    def update_song_key(self) -> bool:
        """
        Recompute the tonic from the histogram.

        Returns:
            True if the tonic changed (and with it the key hue offset)
        """
        hist = self.state.histogram
        if not hist:
            return False

        # max() keeps the first of equal counts, i.e. insertion order
        tonic = max(hist, key=hist.get)
        if tonic == self.state.tonic:
            return False

        self.state.tonic = tonic
        self.state.key_hue_offset = -tonic_hue(tonic)
        return True

    def detect_mode(self, pitch_classes: List[str]) -> Optional[Mode]:
        """
        Score one measure's pitch classes against the modal templates.

        The presence vector is taken relative to the measure's most frequent
        pitch class; the template with most agreeing bits wins, earlier
        declared modes winning ties.

        Args:
            pitch_classes: Pitch classes of the measure's notes

        Returns:
            Best matching Mode, or None with too few pitch classes
        """
        pitch_classes = [p for p in pitch_classes if p]
        if len(pitch_classes) < self.min_pitch_classes:
            return None

        present = self.presence_vector(pitch_classes)

        best_mode, best_score = Mode.IONIAN, -1
        for mode, template in MODAL_TEMPLATES.items():
            score = sum(1 for a, b in zip(present, template) if a == b)
            if score > best_score:
                best_mode, best_score = mode, score

        self.state.last_mode = best_mode
        return best_mode

    @staticmethod
    def presence_vector(pitch_classes: List[str]) -> List[int]:
        """12-bit presence of pitch classes relative to the most frequent one."""
        freq: Dict[str, int] = {}
        for p in pitch_classes:
            freq[p] = freq.get(p, 0) + 1
        local_tonic = max(freq, key=freq.get)
        tonic_semi = PITCH_TO_SEMITONE.get(local_tonic, 0)

        present = [0] * 12
        for p in pitch_classes:
            semi = PITCH_TO_SEMITONE.get(p)
            if semi is not None:
                present[(semi - tonic_semi) % 12] = 1
        return present

    def reset(self) -> None:
        """Forget the histogram, tonic and hue offset."""
        self.state = KeyModeState()
