"""Instrument categories and the canonical instrument vocabulary.

Each recording is made through one instrument-family lens (a Category).
Classifiers emit generic instrument names which are routed through a fixed
synonym table to the canonical identifiers used for coloring and rendering.
"""

import warnings
from enum import Enum
from typing import Dict, FrozenSet, Tuple


class Category(Enum):
    """Instrument-family lenses a recording can be transcribed through."""
    KEYS = "keys"
    PERCUSSION = "percussion"
    WIND = "wind"
    STRINGS = "strings"
    SYNTHS = "synths"

    @property
    def label(self) -> str:
        """Human-readable category name."""
        return CATEGORY_LABELS[self]

    @property
    def is_pitched(self) -> bool:
        """Pitched categories get a fundamental-frequency estimate per record."""
        return self is not Category.PERCUSSION

    @property
    def instruments(self) -> Tuple[str, ...]:
        return INSTRUMENTS_BY_CATEGORY[self]

    @property
    def requested_features(self) -> FrozenSet[str]:
        """Feature fields the extractor is asked for under this lens."""
        return FEATURES_BY_CATEGORY[self]

    @classmethod
    def from_name(cls, name) -> "Category":
        """Look up a category by name, falling back to keys for unknown names."""
        if isinstance(name, Category):
            return name
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            warnings.warn(f"Unknown category {name!r}, using keys")
            return cls.KEYS


CATEGORY_LABELS: Dict[Category, str] = {
    Category.KEYS: "Keys and Harmonics",
    Category.PERCUSSION: "Drums and Percussion",
    Category.WIND: "Wind and Brass",
    Category.STRINGS: "Guitar and Strings",
    Category.SYNTHS: "Synthesizers",
}

INSTRUMENTS_BY_CATEGORY: Dict[Category, Tuple[str, ...]] = {
    Category.KEYS: (
        "piano", "keyboard", "organ", "electricorgan", "rhodes", "yamaha",
        "mellotron", "stylophone", "melodica", "xylophone", "marimba",
        "glockenspiel", "tubularbells", "chime", "celesta",
    ),
    Category.PERCUSSION: (
        "kick", "bassdrum", "snare", "toms", "hihat", "crashsplash",
        "tambourine", "clap",
    ),
    Category.WIND: (
        "flute", "piccolo", "recorder", "whistle", "clarinet", "oboe",
        "bassoon", "trumpet",
    ),
    Category.STRINGS: (
        "acousticguitar", "electricguitar", "bass", "electricbass", "violin",
        "viola", "cello",
    ),
    Category.SYNTHS: ("synth", "pad", "lead", "bass_synth", "arpeggio"),
}

PERCUSSION_INSTRUMENTS = frozenset(INSTRUMENTS_BY_CATEGORY[Category.PERCUSSION])
SYNTH_INSTRUMENTS = frozenset(INSTRUMENTS_BY_CATEGORY[Category.SYNTHS])

# Generic detector names -> canonical instrument identifiers
INSTRUMENT_SYNONYMS: Dict[str, str] = {
    "piano": "piano", "organ": "electricorgan", "harpsichord": "keyboard",
    "accordion": "melodica", "kick": "bassdrum", "snare": "snare",
    "hihat": "hihat", "tom": "toms", "cymbal": "crashsplash",
    "percussion": "tambourine", "flute": "flute", "trumpet": "trumpet",
    "saxophone": "clarinet", "clarinet": "clarinet", "oboe": "oboe",
    "horn": "trumpet", "violin": "violin", "cello": "cello",
    "bass": "electricbass", "guitar": "acousticguitar", "viola": "viola",
    "harp": "acousticguitar", "synth": "synth", "pad": "pad", "lead": "lead",
    "bass_synth": "bass_synth", "arpeggio": "synth",
}

_BASE_FEATURES = frozenset({"loudness", "amplitude_spectrum"})
_TONAL_FEATURES = _BASE_FEATURES | {"spectral_centroid", "chroma"}

FEATURES_BY_CATEGORY: Dict[Category, FrozenSet[str]] = {
    Category.KEYS: _TONAL_FEATURES,
    Category.WIND: _TONAL_FEATURES,
    Category.STRINGS: _TONAL_FEATURES,
    Category.PERCUSSION: _BASE_FEATURES | {"zero_crossing_rate", "spectral_rolloff"},
    Category.SYNTHS: _TONAL_FEATURES | {"perceptual_sharpness"},
}


def map_instrument_name(detected: str) -> str:
    """Route a detected instrument name to its canonical identifier.

    Unmapped names pass through unchanged.
    """
    return INSTRUMENT_SYNONYMS.get(detected, detected)


def is_percussion(instrument: str) -> bool:
    return instrument in PERCUSSION_INSTRUMENTS


def is_synth(instrument: str) -> bool:
    return instrument in SYNTH_INSTRUMENTS
