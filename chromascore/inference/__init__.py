"""Inference layer - Musical understanding.

- Global tonic from a running pitch-class histogram
- Per-measure diatonic mode detection
"""

from .key import KeyModeDetector, KeyModeState

__all__ = [
    "KeyModeDetector",
    "KeyModeState",
]
