"""Analysis layer - Low-level signal analysis.

This layer turns raw audio into the streams the transcription core consumes:
- Playback clock (pause-aware elapsed time)
- Block-wise spectral/timbral features
- Fundamental-frequency estimation
- Tempo estimation
"""

from .clock import PlaybackClock, ManualTimeSource, ClockState
from .features import FeatureExtractor, FeatureFrame
from .pitch import PitchEstimator
from .tempo import TempoAnalyzer, measure_duration

__all__ = [
    "PlaybackClock",
    "ManualTimeSource",
    "ClockState",
    "FeatureExtractor",
    "FeatureFrame",
    "PitchEstimator",
    "TempoAnalyzer",
    "measure_duration",
]
