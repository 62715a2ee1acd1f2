"""Score data classes - notes, measures and layers."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .constants import DEFAULT_BEATS_PER_MEASURE, PITCH_NAMES
from .instruments import Category
from .theory import Mode


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp a value into [lo, hi]."""
    return min(hi, max(lo, value))


@dataclass(frozen=True)
class ColorHSB:
    """Device-agnostic color descriptor (hue 0-360, saturation/brightness 0-100)."""

    h: float
    s: float
    b: float

    def __post_init__(self):
        object.__setattr__(self, "h", float(self.h) % 360.0)
        object.__setattr__(self, "s", clamp(float(self.s), 0.0, 100.0))
        object.__setattr__(self, "b", clamp(float(self.b), 0.0, 100.0))

    def to_dict(self) -> Dict[str, float]:
        """Wire format: {h, s, b}."""
        return {"h": self.h, "s": self.s, "b": self.b}


NEUTRAL_GRAY = ColorHSB(0, 0, 60)


@dataclass(frozen=True)
class Note:
    """One symbolic note event inside a measure slice."""

    instrument: str
    slice_index: int
    y_position: float = 0.5  # 0 = top, 1 = bottom
    pitch_class: Optional[str] = None
    octave: Optional[int] = None
    sustained: bool = False
    plucked: bool = False
    intensity: Optional[float] = None
    band_height: Optional[float] = None
    color: Optional[ColorHSB] = None
    color_right: Optional[ColorHSB] = None

    def __post_init__(self):
        object.__setattr__(self, "y_position", clamp(float(self.y_position), 0.0, 1.0))

    @property
    def pitch_name(self) -> Optional[str]:
        """Get note name (e.g., 'C4', 'A#3'), None for unpitched notes."""
        if self.pitch_class is None:
            return None
        if self.octave is None:
            return self.pitch_class
        return f"{self.pitch_class}{self.octave}"

    @property
    def midi_pitch(self) -> Optional[int]:
        """MIDI note number implied by pitch class and octave."""
        if self.pitch_class not in PITCH_NAMES or self.octave is None:
            return None
        return (self.octave + 1) * 12 + PITCH_NAMES.index(self.pitch_class)

    def to_dict(self) -> dict:
        return {
            "instrument": self.instrument,
            "slice": self.slice_index,
            "yPosition": self.y_position,
            "pitchClass": self.pitch_class,
            "octave": self.octave,
            "sustained": self.sustained,
            "plucked": self.plucked,
            "intensity": self.intensity,
            "bandHeight": self.band_height,
            "color": self.color.to_dict() if self.color else None,
            "colorRight": self.color_right.to_dict() if self.color_right else None,
        }


@dataclass(frozen=True)
class Measure:
    """Notes of one sealed measure, in slice order."""

    measure_number: int  # 1-based
    category: Category
    notes: Tuple[Note, ...] = ()
    mode: Optional[Mode] = None

    def notes_by_height(self) -> Tuple[Note, ...]:
        """Notes in draw order (ascending y position)."""
        return tuple(sorted(self.notes, key=lambda n: n.y_position))

    @property
    def pitch_classes(self) -> Tuple[str, ...]:
        return tuple(n.pitch_class for n in self.notes if n.pitch_class)


@dataclass(frozen=True)
class Layer:
    """One finished recording: a category plus its sealed measures."""

    category: Category
    measures: Tuple[Measure, ...] = field(default_factory=tuple)
    label: str = ""
    bpm: Optional[float] = None  # grid the measures were sealed on
    beats_per_measure: int = DEFAULT_BEATS_PER_MEASURE

    @property
    def note_count(self) -> int:
        return sum(len(m.notes) for m in self.measures)
