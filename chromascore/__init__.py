"""ChromaScore - Audio to Colorized Symbolic Score.

Architecture Layers:
    1. input/         - Audio loading and decoding
    2. analysis/      - Low-level signal analysis (clock, features, pitch, tempo)
    3. transcription/ - Measure buffering and per-category note classification
    4. inference/     - Musical understanding (song key, per-measure mode)
    5. color/         - Palettes and pitch-to-color resolution
    6. session.py     - Recording state, layers and the feature queue
    7. pipeline.py    - Offline host driving a session from a file
    8. output/        - Export (JSON score, MIDI)
"""

__version__ = "0.1.0"

# Core types
from .core import Category, ColorHSB, Layer, Measure, Mode, Note

# Input layer
from .input import AudioDecodeError, AudioLoader

# Analysis layer
from .analysis import (
    FeatureExtractor,
    ManualTimeSource,
    PitchEstimator,
    PlaybackClock,
    TempoAnalyzer,
)

# Transcription layer
from .transcription import CategoryClassifier, FeatureBuffer, classifier_for

# Inference layer
from .inference import KeyModeDetector

# Color layer
from .color import ColorResolver, Palette, PaletteManager

# Session and host
from .session import SessionConfig, SessionState, TranscriptionSession
from .pipeline import OfflineTranscriber

# Output layer
from .output import MIDIExporter, ScoreExporter

__all__ = [
    # Core
    "Category",
    "ColorHSB",
    "Layer",
    "Measure",
    "Mode",
    "Note",
    # Input
    "AudioDecodeError",
    "AudioLoader",
    # Analysis
    "FeatureExtractor",
    "ManualTimeSource",
    "PitchEstimator",
    "PlaybackClock",
    "TempoAnalyzer",
    # Transcription
    "CategoryClassifier",
    "FeatureBuffer",
    "classifier_for",
    # Inference
    "KeyModeDetector",
    # Color
    "ColorResolver",
    "Palette",
    "PaletteManager",
    # Session
    "SessionConfig",
    "SessionState",
    "TranscriptionSession",
    "OfflineTranscriber",
    # Output
    "MIDIExporter",
    "ScoreExporter",
]
