"""Core types and constants for ChromaScore."""

from .note import Note, Measure, Layer, ColorHSB, NEUTRAL_GRAY, clamp
from .instruments import (
    Category,
    INSTRUMENTS_BY_CATEGORY,
    map_instrument_name,
    is_percussion,
    is_synth,
)
from .theory import Mode, resolve_enharmonic, index_to_pitch, tonic_hue
from .constants import (
    PITCH_NAMES,
    SUBDIVISIONS,
    DEFAULT_SR,
    DEFAULT_BPM,
    DEFAULT_BEATS_PER_MEASURE,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_WAVEFORM_SIZE,
)

__all__ = [
    "Note",
    "Measure",
    "Layer",
    "ColorHSB",
    "NEUTRAL_GRAY",
    "clamp",
    "Category",
    "INSTRUMENTS_BY_CATEGORY",
    "map_instrument_name",
    "is_percussion",
    "is_synth",
    "Mode",
    "resolve_enharmonic",
    "index_to_pitch",
    "tonic_hue",
    "PITCH_NAMES",
    "SUBDIVISIONS",
    "DEFAULT_SR",
    "DEFAULT_BPM",
    "DEFAULT_BEATS_PER_MEASURE",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_WAVEFORM_SIZE",
]
