"""Tests for the per-category slice classifiers."""

import pytest
import numpy as np

from chromascore.core import Category
from chromascore.transcription import (
    AveragedSlice,
    KeysClassifier,
    PercussionClassifier,
    StringsClassifier,
    SynthsClassifier,
    WindClassifier,
    classifier_for,
)
from chromascore.transcription.base import centroid_height, octave_from_centroid


def chroma_peak(index: int) -> np.ndarray:
    chroma = np.full(12, 0.1)
    chroma[index] = 1.0
    return chroma


class TestHelpers:
    @pytest.mark.parametrize(
        "centroid,octave",
        [(0, 4), (150, 2), (300, 3), (600, 4), (1000, 5), (3000, 6)],
    )
    def test_octave_from_centroid(self, centroid, octave):
        assert octave_from_centroid(centroid) == octave

    def test_centroid_height_clamped(self):
        assert centroid_height(100) == pytest.approx(0.85)
        assert centroid_height(4000) == pytest.approx(0.15)
        assert centroid_height(9000) == pytest.approx(0.15)

    def test_classifier_for(self):
        assert isinstance(classifier_for(Category.SYNTHS), SynthsClassifier)
        assert isinstance(classifier_for("percussion"), PercussionClassifier)


class TestKeysClassifier:
    @pytest.fixture
    def classifier(self):
        return KeysClassifier()

    def test_fundamental_gives_a4(self, classifier):
        features = AveragedSlice(loudness=0.05, flux=0.5, centroid=900, pitch_hz=440.0)
        note = classifier.classify(features, 3)
        assert note.pitch_class == "A"
        assert note.octave == 4
        assert note.slice_index == 3
        assert note.instrument == "piano"

    def test_chroma_fallback(self, classifier):
        features = AveragedSlice(loudness=0.05, flux=0.5, centroid=300, chroma=chroma_peak(7))
        note = classifier.classify(features, 0)
        assert note.pitch_class == "G"
        assert note.octave == 3
        assert note.instrument == "electricorgan"
        assert note.y_position == pytest.approx(0.85 + (7 / 11) * (0.15 - 0.85))

    def test_no_pitch_discarded(self, classifier):
        assert classifier.classify(AveragedSlice(loudness=0.5), 0) is None

    def test_loudness_gate(self, classifier):
        features = AveragedSlice(loudness=0.008, pitch_hz=440.0)
        assert classifier.classify(features, 0) is None

    def test_transient_gate(self, classifier):
        features = AveragedSlice(loudness=0.5, flux=10.0, pitch_hz=440.0)
        assert classifier.classify(features, 0) is None

    def test_bright_sounds_are_xylophone(self, classifier):
        features = AveragedSlice(loudness=0.05, centroid=2500, pitch_hz=880.0)
        assert classifier.classify(features, 0).instrument == "xylophone"

    def test_sustain(self, classifier):
        held = AveragedSlice(loudness=0.05, flux=0.01, centroid=900, pitch_hz=440.0)
        struck = AveragedSlice(loudness=0.05, flux=2.0, centroid=900, pitch_hz=440.0)
        assert classifier.classify(held, 0).sustained
        assert not classifier.classify(struck, 0).sustained

    def test_pure(self, classifier):
        features = AveragedSlice(loudness=0.05, flux=0.5, centroid=900, pitch_hz=261.6)
        assert classifier.classify(features, 2) == classifier.classify(features, 2)


class TestPercussionClassifier:
    @pytest.fixture
    def classifier(self):
        return PercussionClassifier()

    def test_quiet_slice_discarded(self, classifier):
        assert classifier.classify(AveragedSlice(loudness=0.01, zcr=0.3, flux=20), 0) is None

    @pytest.mark.parametrize(
        "features,instrument,height",
        [
            (AveragedSlice(loudness=0.1, zcr=0.2, flux=9, centroid=150), "snare", 0.6),
            (AveragedSlice(loudness=0.1, zcr=0.05, flux=1, centroid=150), "bassdrum", 0.9),
            (AveragedSlice(loudness=0.05, zcr=0.12, flux=6, centroid=3000), "hihat", 0.4),
            (AveragedSlice(loudness=0.05, zcr=0.25, flux=1, centroid=3000), "tambourine", 0.3),
            (AveragedSlice(loudness=0.05, zcr=0.05, flux=1, centroid=3000), "tambourine", 0.5),
        ],
    )
    def test_decision_ladder(self, classifier, features, instrument, height):
        note = classifier.classify(features, 1)
        assert note.instrument == instrument
        assert note.y_position == pytest.approx(height)
        assert note.intensity == pytest.approx(features.loudness)
        assert note.pitch_class is None

    def test_snare_checked_before_kick(self, classifier):
        features = AveragedSlice(loudness=0.2, zcr=0.2, flux=9, centroid=100)
        assert classifier.classify(features, 0).instrument == "snare"


class TestWindClassifier:
    @pytest.fixture
    def classifier(self):
        return WindClassifier()

    def test_flute_and_trumpet(self, classifier):
        soft = AveragedSlice(loudness=0.02, centroid=800, pitch_hz=523.25)
        brassy = AveragedSlice(loudness=0.02, centroid=1500, pitch_hz=523.25)
        assert classifier.classify(soft, 0).instrument == "flute"
        assert classifier.classify(brassy, 0).instrument == "trumpet"

    def test_chroma_height_from_centroid(self, classifier):
        features = AveragedSlice(loudness=0.02, centroid=200, chroma=chroma_peak(0))
        note = classifier.classify(features, 0)
        assert note.pitch_class == "C"
        assert note.y_position == pytest.approx(0.85)

    def test_loudness_gate(self, classifier):
        assert classifier.classify(AveragedSlice(loudness=0.005, pitch_hz=440.0), 0) is None

    def test_sustain(self, classifier):
        features = AveragedSlice(loudness=0.02, flux=0.01, pitch_hz=440.0)
        assert classifier.classify(features, 0).sustained


class TestStringsClassifier:
    @pytest.fixture
    def classifier(self):
        return StringsClassifier()

    @pytest.mark.parametrize(
        "centroid,zcr,instrument",
        [
            (300, 0.05, "electricbass"),
            (600, 0.05, "cello"),
            (1000, 0.2, "electricguitar"),
            (1000, 0.05, "acousticguitar"),
        ],
    )
    def test_instrument_choice(self, classifier, centroid, zcr, instrument):
        features = AveragedSlice(loudness=0.05, centroid=centroid, zcr=zcr, pitch_hz=196.0)
        assert classifier.classify(features, 0).instrument == instrument

    def test_plucked(self, classifier):
        features = AveragedSlice(loudness=0.05, centroid=1000, zcr=0.13, pitch_hz=196.0)
        note = classifier.classify(features, 0)
        assert note.plucked
        assert note.pitch_class == "G"
        assert note.octave == 3


class TestSynthsClassifier:
    @pytest.fixture
    def classifier(self):
        return SynthsClassifier()

    def test_no_pitch_discarded(self, classifier):
        assert classifier.classify(AveragedSlice(loudness=0.2, sharpness=1.0), 0) is None

    @pytest.mark.parametrize(
        "sharpness,centroid,flux,instrument",
        [
            (3.0, 300, 1.0, "lead"),
            (1.0, 300, 1.0, "bass_synth"),
            (1.0, 900, 0.005, "pad"),
            (1.0, 900, 1.0, "synth"),
        ],
    )
    def test_synth_type(self, classifier, sharpness, centroid, flux, instrument):
        features = AveragedSlice(
            loudness=0.1, sharpness=sharpness, centroid=centroid, flux=flux, pitch_hz=440.0
        )
        assert classifier.classify(features, 0).instrument == instrument

    @pytest.mark.parametrize(
        "loudness,band",
        [(0.006, 0.12 + 0.006 / 0.3 * 0.16), (0.15, 0.20), (0.9, 0.28)],
    )
    def test_band_height(self, classifier, loudness, band):
        features = AveragedSlice(loudness=loudness, sharpness=1.0, pitch_hz=440.0)
        assert classifier.classify(features, 0).band_height == pytest.approx(band)

    def test_intensity_defaults_to_one(self, classifier):
        features = AveragedSlice(loudness=0.1, pitch_hz=440.0)
        assert classifier.classify(features, 0).intensity == 1.0
