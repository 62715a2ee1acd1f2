"""Transcription layer - From feature streams to symbolic notes.

This layer converts time-quantized feature slices into note events:
- Feature accumulation on the measure/subdivision grid
- Per-category heuristic classification (keys, percussion, wind, strings, synths)
"""

from .buffer import FeatureBuffer, SliceAccumulator, AveragedSlice, SealedMeasure
from .base import CategoryClassifier, PitchReading
from .classifiers import (
    KeysClassifier,
    PercussionClassifier,
    WindClassifier,
    StringsClassifier,
    SynthsClassifier,
    classifier_for,
)

__all__ = [
    "FeatureBuffer",
    "SliceAccumulator",
    "AveragedSlice",
    "SealedMeasure",
    "CategoryClassifier",
    "PitchReading",
    "KeysClassifier",
    "PercussionClassifier",
    "WindClassifier",
    "StringsClassifier",
    "SynthsClassifier",
    "classifier_for",
]
