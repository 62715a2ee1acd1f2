"""Per-category heuristic classifiers.

Each instrument family has its own loudness floor, instrument choice and
articulation rules. Thresholds are heuristic and tuned for block-wise
features averaged over one eighth of a measure.
"""

from typing import Dict, Optional

from ..core import Category, Note, map_instrument_name
from .base import CategoryClassifier, centroid_height, linear_map
from .buffer import AveragedSlice


class KeysClassifier(CategoryClassifier):
    """Piano, organ and mallet-like sounds."""

    category = Category.KEYS

    def __init__(
        self,
        min_loudness: float = 0.008,
        max_flux: float = 10.0,
        sustain_loudness: float = 0.01,
        sustain_flux: float = 0.05,
    ):
        self.min_loudness = min_loudness
        self.max_flux = max_flux
        self.sustain_loudness = sustain_loudness
        self.sustain_flux = sustain_flux

    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        reading = self.resolve_pitch(features)
        if reading is None:
            return None

        # Confident only when audible and not a transient
        if not (features.loudness > self.min_loudness and features.flux < self.max_flux):
            return None

        if reading.y_position is not None:
            y_position = reading.y_position
        else:
            y_position = linear_map(reading.chroma_index, 0, 11, 0.85, 0.15)

        if features.centroid < 400:
            instrument = "electricorgan"
        elif features.centroid > 2000:
            instrument = "xylophone"
        else:
            instrument = "piano"

        return Note(
            instrument=map_instrument_name(instrument),
            slice_index=slice_index,
            y_position=y_position,
            pitch_class=reading.pitch_class,
            octave=reading.octave,
            sustained=(
                features.loudness > self.sustain_loudness
                and features.flux < self.sustain_flux
            ),
        )


class PercussionClassifier(CategoryClassifier):
    """Unpitched drums, chosen by a fixed decision ladder."""

    category = Category.PERCUSSION

    def __init__(self, min_loudness: float = 0.02):
        self.min_loudness = min_loudness

    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        if features.loudness < self.min_loudness:
            return None

        zcr, flux = features.zcr, features.flux
        if zcr > 0.15 and flux > 8:
            instrument, height = "snare", 0.6
        elif features.loudness > 0.08 and features.centroid < 200:
            instrument, height = "bassdrum", 0.9
        elif zcr > 0.1 and flux > 5:
            instrument, height = "hihat", 0.4
        elif zcr > 0.2:
            instrument, height = "tambourine", 0.3
        else:
            instrument, height = "tambourine", 0.5

        return Note(
            instrument=map_instrument_name(instrument),
            slice_index=slice_index,
            y_position=height,
            intensity=features.loudness,
        )


class WindClassifier(CategoryClassifier):
    """Flutes and brass."""

    category = Category.WIND

    def __init__(self, min_loudness: float = 0.006, sustain_flux: float = 0.03):
        self.min_loudness = min_loudness
        self.sustain_flux = sustain_flux

    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        if features.loudness < self.min_loudness:
            return None
        reading = self.resolve_pitch(features)
        if reading is None:
            return None

        y_position = reading.y_position
        if y_position is None:
            y_position = centroid_height(features.centroid)

        instrument = "trumpet" if features.centroid > 1200 else "flute"

        return Note(
            instrument=map_instrument_name(instrument),
            slice_index=slice_index,
            y_position=y_position,
            pitch_class=reading.pitch_class,
            octave=reading.octave,
            sustained=features.flux < self.sustain_flux,
        )


class StringsClassifier(CategoryClassifier):
    """Guitars, bass and bowed strings."""

    category = Category.STRINGS

    def __init__(
        self,
        min_loudness: float = 0.008,
        sustain_flux: float = 0.02,
        pluck_zcr: float = 0.12,
    ):
        self.min_loudness = min_loudness
        self.sustain_flux = sustain_flux
        self.pluck_zcr = pluck_zcr

    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        if features.loudness < self.min_loudness:
            return None
        reading = self.resolve_pitch(features)
        if reading is None:
            return None

        y_position = reading.y_position
        if y_position is None:
            y_position = centroid_height(features.centroid)

        centroid = features.centroid
        if centroid < 400:
            instrument = "electricbass"
        elif centroid < 800:
            instrument = "cello"
        elif features.zcr > 0.15:
            instrument = "electricguitar"
        else:
            instrument = "acousticguitar"

        return Note(
            instrument=map_instrument_name(instrument),
            slice_index=slice_index,
            y_position=y_position,
            pitch_class=reading.pitch_class,
            octave=reading.octave,
            sustained=features.flux < self.sustain_flux,
            plucked=features.zcr > self.pluck_zcr,
        )


class SynthsClassifier(CategoryClassifier):
    """Synth voices, drawn as gradient bands."""

    category = Category.SYNTHS

    def __init__(self, min_loudness: float = 0.005, sustain_flux: float = 0.02):
        self.min_loudness = min_loudness
        self.sustain_flux = sustain_flux

    def classify(self, features: AveragedSlice, slice_index: int) -> Optional[Note]:
        if features.loudness < self.min_loudness:
            return None
        reading = self.resolve_pitch(features)
        if reading is None:
            return None

        if features.sharpness > 2.5:
            synth_type = "lead"
        elif features.centroid < 400:
            synth_type = "bass_synth"
        elif features.flux < 0.01:
            synth_type = "pad"
        else:
            synth_type = "synth"

        y_position = reading.y_position
        if y_position is None:
            y_position = centroid_height(features.centroid)

        return Note(
            instrument=map_instrument_name(synth_type),
            slice_index=slice_index,
            y_position=y_position,
            pitch_class=reading.pitch_class,
            octave=reading.octave,
            sustained=features.flux < self.sustain_flux,
            intensity=features.sharpness or 1.0,
            band_height=linear_map(features.loudness, 0, 0.3, 0.12, 0.28, clamp=True),
        )


CLASSIFIERS: Dict[Category, type] = {
    Category.KEYS: KeysClassifier,
    Category.PERCUSSION: PercussionClassifier,
    Category.WIND: WindClassifier,
    Category.STRINGS: StringsClassifier,
    Category.SYNTHS: SynthsClassifier,
}


def classifier_for(category: Category) -> CategoryClassifier:
    """Instantiate the default classifier bound to a category."""
    return CLASSIFIERS[Category.from_name(category)]()
