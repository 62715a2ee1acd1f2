"""Global constants for ChromaScore."""

# Pitch names (enharmonics are normalized to sharps)
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Measure grid
SUBDIVISIONS = 8
DEFAULT_BPM = 120.0
DEFAULT_BEATS_PER_MEASURE = 4

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_BLOCK_SIZE = 512  # samples per feature record
DEFAULT_WAVEFORM_SIZE = 2048  # rolling time-domain window for pitch estimation

# Octave range used by the color pipeline
OCTAVE_MIN = 1
OCTAVE_MAX = 8
DEFAULT_OCTAVE = 4
