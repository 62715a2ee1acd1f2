"""Music theory tables shared by key detection, palettes and color resolution."""

import warnings
from enum import Enum
from typing import Dict, List, Optional

from .constants import PITCH_NAMES


class Mode(Enum):
    """The seven diatonic modes, in declaration (tie-break) order."""
    IONIAN = "ionian"
    DORIAN = "dorian"
    PHRYGIAN = "phrygian"
    LYDIAN = "lydian"
    MIXOLYDIAN = "mixolydian"
    AEOLIAN = "aeolian"
    LOCRIAN = "locrian"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Mode":
        """Look up a mode by name, falling back to ionian for unknown names."""
        if isinstance(name, Mode):
            return name
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            warnings.warn(f"Unknown mode {name!r}, using ionian")
            return cls.IONIAN


ENHARMONIC = {"Db": "C#", "Eb": "D#", "Gb": "F#", "Ab": "G#", "Bb": "A#"}

PITCH_TO_SEMITONE: Dict[str, int] = {name: i for i, name in enumerate(PITCH_NAMES)}
PITCH_TO_SEMITONE.update({flat: PITCH_TO_SEMITONE[sharp] for flat, sharp in ENHARMONIC.items()})

# Scale intervals from the tonic, in semitones
MODE_INTERVALS: Dict[Mode, List[int]] = {
    Mode.IONIAN: [0, 2, 4, 5, 7, 9, 11],
    Mode.DORIAN: [0, 2, 3, 5, 7, 9, 10],
    Mode.PHRYGIAN: [0, 1, 3, 5, 7, 8, 10],
    Mode.LYDIAN: [0, 2, 4, 6, 7, 9, 11],
    Mode.MIXOLYDIAN: [0, 2, 4, 5, 7, 9, 10],
    Mode.AEOLIAN: [0, 2, 3, 5, 7, 8, 10],
    Mode.LOCRIAN: [0, 1, 3, 5, 6, 8, 10],
}

# 12-bit presence templates relative to the tonic
MODAL_TEMPLATES: Dict[Mode, List[int]] = {
    mode: [1 if semitone in intervals else 0 for semitone in range(12)]
    for mode, intervals in MODE_INTERVALS.items()
}

# Hue of each pitch class, laid out around the circle of fifths
FIFTHS_BASE_HUE: Dict[str, int] = {
    "C": 0, "G": 30, "D": 60, "A": 90,
    "E": 150, "B": 195, "F#": 225, "C#": 255,
    "G#": 285, "D#": 310, "A#": 340, "F": 355,
}

# (hue, saturation, brightness) tint applied per mode
MODAL_TINTS: Dict[Mode, tuple] = {
    Mode.IONIAN: (12, 15, 8),
    Mode.MIXOLYDIAN: (8, 12, 5),
    Mode.LYDIAN: (18, 18, 12),
    Mode.DORIAN: (-5, 8, 2),
    Mode.AEOLIAN: (-12, -5, -5),
    Mode.PHRYGIAN: (-20, -10, -10),
    Mode.LOCRIAN: (-28, -20, -15),
}


def resolve_enharmonic(pitch_class: str) -> str:
    """Normalize a flat spelling to its sharp equivalent."""
    return ENHARMONIC.get(pitch_class, pitch_class)


def index_to_pitch(index: int) -> str:
    """Pitch-class name for a chroma/semitone index (wraps mod 12)."""
    return PITCH_NAMES[index % 12]


def tonic_hue(pitch_class: Optional[str]) -> int:
    """Circle-of-fifths hue of a tonic, 0 for unknown names."""
    if not pitch_class:
        return 0
    return FIFTHS_BASE_HUE.get(resolve_enharmonic(pitch_class), 0)
