"""Output layer - Export to various formats.

This layer handles exporting transcribed layers to:
- JSON scores (color wire format, for renderers)
- MIDI files
"""

from .midi import MIDIExporter
from .score import ScoreExporter

__all__ = [
    "MIDIExporter",
    "ScoreExporter",
]
