"""Pitch-to-color resolution.

Three layers, most specific first:
  1. Active user palette: pitch -> nearest scale degree -> curated swatch
  2. Song key offset: rotates the circle-of-fifths hues so the tonic sits at 0
  3. Modal tint: nudges hue/saturation/brightness by the measure's mode

Percussion bypasses all three. The result is always a plain ColorHSB;
turning it into a renderable color is left to the caller.
"""

from typing import Optional, Tuple, Union

from ..core import (
    ColorHSB,
    Mode,
    NEUTRAL_GRAY,
    clamp,
    is_percussion,
    resolve_enharmonic,
)
from ..core.constants import DEFAULT_OCTAVE, OCTAVE_MAX, OCTAVE_MIN
from ..core.theory import FIFTHS_BASE_HUE, MODAL_TINTS, PITCH_TO_SEMITONE
from .palette import Palette, PALETTE_SIZE

BASE_SATURATION = 92
BASE_BRIGHTNESS = 85

PERCUSSION_HUE = {
    "kick": 5, "bassdrum": 5, "snare": 20, "toms": 35,
    "hihat": 50, "crashsplash": 55, "tambourine": 45, "clap": 25,
}
DEFAULT_PERCUSSION_HUE = 20

UNKNOWN_PITCH_GRAY = ColorHSB(0, 0, 50)


def octave_modifiers(octave: Optional[int]) -> Tuple[float, float]:
    """
    Saturation and brightness deltas for an octave.

    Octave 1 maps to (-12, -28), octave 8 to (+8, +15), linearly between.

    Returns:
        Tuple of (saturation delta, brightness delta)
    """
    o = DEFAULT_OCTAVE if octave is None else octave
    o = min(OCTAVE_MAX, max(OCTAVE_MIN, o))
    t = (o - OCTAVE_MIN) / (OCTAVE_MAX - OCTAVE_MIN)
    return t * 20 - 12, t * 43 - 28


def palette_degree(pitch_class: str, palette: Palette) -> int:
    """
    Scale degree of the palette's mode closest to a pitch class.

    Distance is circular (mod 12) from the palette's root; earlier degrees
    win ties. Unknown pitch names map to degree I.
    """
    root_semi = PITCH_TO_SEMITONE.get(palette.root_key, 0)
    pitch_semi = PITCH_TO_SEMITONE.get(resolve_enharmonic(pitch_class))
    if pitch_semi is None:
        return 0

    dist = (pitch_semi - root_semi) % 12
    best_degree, best_gap = 0, 12
    for degree, interval in enumerate(palette.intervals):
        gap = abs(interval - dist)
        wrapped = min(gap, 12 - gap)
        if wrapped < best_gap:
            best_degree, best_gap = degree, wrapped
    return best_degree


class ColorResolver:
    """Resolve notes to color descriptors under the session's key and palette."""

    def __init__(self, palette: Optional[Palette] = None, key_hue_offset: float = 0.0):
        """
        Initialize ColorResolver.

        Args:
            palette: Active user palette, if any
            key_hue_offset: Global hue rotation (minus the tonic's hue)
        """
        self.palette = palette
        self.key_hue_offset = key_hue_offset

    @property
    def has_palette(self) -> bool:
        return self.palette is not None and len(self.palette) >= PALETTE_SIZE

    def resolve(
        self,
        pitch_class: Optional[str],
        octave: Optional[int],
        instrument: str,
        mode: Union[Mode, str, None] = None,
        intensity: Optional[float] = None,
    ) -> ColorHSB:
        """
        Resolve one note to a color.

        Args:
            pitch_class: Pitch-class name, None for unpitched notes
            octave: Octave number, None for unknown
            instrument: Canonical instrument identifier
            mode: Mode detected for the note's measure (enum or name)
            intensity: Loudness/brightness proxy (defaults to 0.5)

        Returns:
            ColorHSB descriptor
        """
        if isinstance(mode, str):
            mode = Mode.from_name(mode)
        if intensity is None:
            intensity = 0.5

        if is_percussion(instrument):
            hue = PERCUSSION_HUE.get(instrument, DEFAULT_PERCUSSION_HUE)
            sat = clamp(55 + intensity * 45, 55, 100)
            bri = clamp(40 + (DEFAULT_OCTAVE if octave is None else octave) * 7.8, 40, 95)
            return ColorHSB(hue, sat, bri)

        if not pitch_class:
            return NEUTRAL_GRAY

        canonical = resolve_enharmonic(pitch_class)

        if self.has_palette:
            entry = self.palette[palette_degree(canonical, self.palette)]
            _, bri_delta = octave_modifiers(octave)
            return ColorHSB(entry.h, entry.s, clamp(entry.b + bri_delta * 0.5, 25, 100))

        base_hue = FIFTHS_BASE_HUE.get(canonical)
        if base_hue is None:
            return UNKNOWN_PITCH_GRAY

        hue = (base_hue + self.key_hue_offset) % 360
        sat_delta, bri_delta = octave_modifiers(octave)
        sat = BASE_SATURATION + sat_delta
        bri = BASE_BRIGHTNESS + bri_delta

        tint = MODAL_TINTS.get(mode) if mode is not None else None
        if tint:
            tint_h, tint_s, tint_b = tint
            hue = (hue + tint_h) % 360
            sat = clamp(sat + tint_s, 30, 100)
            bri = clamp(bri + tint_b, 30, 100)

        return ColorHSB(hue, sat, bri)

    def resolve_gradient_right(
        self,
        pitch_class: Optional[str],
        octave: Optional[int],
        instrument: str,
        mode: Union[Mode, str, None] = None,
        intensity: Optional[float] = None,
    ) -> ColorHSB:
        """Right-edge color of a synth band: same hue, lighter and less saturated."""
        left = self.resolve(pitch_class, octave, instrument, mode, intensity)
        if self.has_palette:
            return ColorHSB(left.h, clamp(left.s - 18, 20, 100), clamp(left.b + 14, 25, 100))
        return ColorHSB(left.h, clamp(left.s - 15, 20, 100), clamp(left.b + 18, 25, 100))
