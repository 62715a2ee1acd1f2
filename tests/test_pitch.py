"""Tests for autocorrelation pitch estimation."""

import pytest
import numpy as np

from chromascore.analysis import PitchEstimator
from chromascore.analysis.pitch import (
    describe_frequency,
    freq_to_midi,
    freq_to_y_norm,
    midi_to_octave,
    midi_to_pitch_class,
)


SR = 44100


def sine(freq: float, n: int = 2048, amplitude: float = 0.8, sr: int = SR) -> np.ndarray:
    t = np.arange(n) / sr
    return (np.sin(2 * np.pi * freq * t) * amplitude).astype(np.float32)


@pytest.fixture
def estimator():
    return PitchEstimator()


class TestPitchEstimator:
    @pytest.mark.parametrize("freq", [220.0, 440.0, 659.25])
    def test_sine_within_two_percent(self, estimator, freq):
        estimate = estimator.estimate(sine(freq), SR)
        assert estimate is not None
        assert abs(estimate - freq) / freq < 0.02

    def test_silence_gives_none(self, estimator):
        assert estimator.estimate(np.zeros(2048, dtype=np.float32), SR) is None

    def test_quiet_window_gives_none(self, estimator):
        assert estimator.estimate(sine(440.0, amplitude=0.005), SR) is None

    def test_empty_window_gives_none(self, estimator):
        assert estimator.estimate(np.array([], dtype=np.float32), SR) is None

    def test_unsigned_byte_input(self, estimator):
        """Byte windows centered on 128 are read as [-1, 1]."""
        data = np.round(128 + sine(440.0) * 127).astype(np.uint8)
        estimate = estimator.estimate(data, SR)
        assert estimate is not None
        assert abs(estimate - 440.0) / 440.0 < 0.02

    def test_unnormalized_float_input(self, estimator):
        estimate = estimator.estimate(sine(440.0, amplitude=20000.0), SR)
        assert estimate is not None
        assert abs(estimate - 440.0) / 440.0 < 0.02

    def test_stateless(self, estimator):
        window = sine(330.0)
        assert estimator.estimate(window, SR) == estimator.estimate(window, SR)

    def test_trim_scans_middle_sample_of_odd_window(self, estimator):
        buf = np.array([0.5, 0.5, 0.0, 0.5, 0.5])
        trimmed = estimator._trim(buf)
        assert trimmed.tolist() == [0.0, 0.5]

    def test_trim_trailing_edge(self, estimator):
        buf = np.array([0.0, 0.5, 0.5, 0.1, 0.5])
        assert estimator._trim(buf).tolist() == [0.0, 0.5, 0.5]


class TestPitchHelpers:
    def test_freq_to_midi(self):
        assert freq_to_midi(440.0) == pytest.approx(69.0)
        assert freq_to_midi(880.0) == pytest.approx(81.0)

    def test_pitch_class_and_octave(self):
        assert midi_to_pitch_class(69) == "A"
        assert midi_to_octave(69) == 4
        assert midi_to_pitch_class(60) == "C"
        assert midi_to_octave(60) == 4
        assert midi_to_octave(59.6) == 4  # rounds to C4

    def test_y_norm_range(self):
        assert freq_to_y_norm(80.0) == pytest.approx(1.0)
        assert freq_to_y_norm(1200.0) == pytest.approx(0.0)
        assert freq_to_y_norm(20.0) == pytest.approx(1.0)
        assert freq_to_y_norm(5000.0) == pytest.approx(0.0)
        assert 0.0 < freq_to_y_norm(440.0) < 1.0

    def test_describe_a4(self):
        pitch_class, octave, y = describe_frequency(440.0)
        assert (pitch_class, octave) == ("A", 4)
        assert 0.0 <= y <= 1.0
