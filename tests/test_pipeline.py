"""End-to-end tests for offline transcription of synthetic audio."""

import pytest
import numpy as np
import soundfile as sf

from chromascore.analysis import FeatureExtractor, PlaybackClock
from chromascore.core import Category
from chromascore.input import AudioDecodeError, AudioLoader
from chromascore.output import MIDIExporter
from chromascore.pipeline import OfflineTranscriber
from chromascore.session import TranscriptionSession


@pytest.fixture
def sample_rate():
    return 22050


@pytest.fixture
def sine_wave(sample_rate):
    """Five seconds of A4."""
    duration = 5.0
    t = np.arange(int(sample_rate * duration)) / sample_rate
    return (np.sin(2 * np.pi * 440.0 * t) * 0.5).astype(np.float32)


@pytest.fixture
def transcriber(sample_rate):
    return OfflineTranscriber(loader=AudioLoader(target_sr=sample_rate), bpm=120.0)


class TestFeatureExtractor:
    def test_frames_follow_requested_features(self, sine_wave, sample_rate):
        extractor = FeatureExtractor(sr=sample_rate)
        frame = next(extractor.frames(sine_wave, Category.PERCUSSION))
        assert frame.loudness is not None
        assert frame.zero_crossing_rate is not None
        assert frame.spectral_rolloff is not None
        assert frame.chroma is None
        assert frame.waveform is None

    def test_pitched_frames_carry_waveform(self, sine_wave, sample_rate):
        extractor = FeatureExtractor(sr=sample_rate)
        frames = list(extractor.frames(sine_wave, Category.KEYS))
        assert len(frames) == len(sine_wave) // 512
        assert frames[0].waveform.shape == (2048,)
        assert frames[-1].chroma.shape == (12,)
        assert int(np.argmax(frames[-1].chroma)) == 9  # A
        assert frames[-1].time == pytest.approx(len(frames) * 512 / sample_rate)

    def test_synth_sharpness(self, sine_wave, sample_rate):
        extractor = FeatureExtractor(sr=sample_rate)
        frame = next(extractor.frames(sine_wave, Category.SYNTHS))
        assert frame.perceptual_sharpness > 0

    def test_short_audio_yields_nothing(self, sample_rate):
        extractor = FeatureExtractor(sr=sample_rate)
        assert list(extractor.frames(np.zeros(100), Category.KEYS)) == []


class TestOfflineTranscriber:
    def test_sine_transcribes_to_a4(self, transcriber, sine_wave, sample_rate):
        layer = transcriber.transcribe_audio(sine_wave, sample_rate, Category.WIND)
        assert layer is not None
        assert layer.category is Category.WIND
        assert len(layer.measures) == 2
        second = layer.measures[1]
        assert len(second.notes) == 8
        assert all(n.pitch_class == "A" and n.octave == 4 for n in second.notes)
        assert transcriber.session.key_detector.tonic == "A"

    def test_percussion_layer(self, transcriber, sample_rate):
        rng = np.random.default_rng(0)
        clicks = np.zeros(int(sample_rate * 4.5), dtype=np.float32)
        for start in range(0, len(clicks), sample_rate // 2):
            burst = rng.standard_normal(2000).astype(np.float32) * 0.5
            clicks[start:start + 2000] = burst[: len(clicks) - start]
        layer = transcriber.transcribe_audio(clicks, sample_rate, "percussion")
        assert layer is not None
        assert all(n.pitch_class is None for m in layer.measures for n in m.notes)

    def test_each_layer_keeps_its_tempo(self, transcriber, sine_wave, sample_rate):
        transcriber.bpm = 130.0
        first = transcriber.transcribe_audio(sine_wave, sample_rate, Category.WIND)
        transcriber.bpm = 60.0
        second = transcriber.transcribe_audio(sine_wave, sample_rate, Category.STRINGS)
        assert first.bpm == 130.0
        assert second.bpm == 60.0

        midi = MIDIExporter(tempo=60.0).layers_to_pretty_midi([first, second])
        first_notes = [
            n for inst in midi.instruments if inst.name.startswith(first.label)
            for n in inst.notes
        ]
        assert first_notes
        # Two sealed measures on the 130 BPM grid
        last_end = 2 * (60.0 / 130.0) * 4
        assert max(n.end for n in first_notes) <= last_end + 1e-6

    def test_transcribe_file(self, transcriber, sine_wave, sample_rate, tmp_path):
        path = tmp_path / "a4.wav"
        sf.write(str(path), sine_wave, sample_rate)
        layer = transcriber.transcribe_file(path, "strings")
        assert layer.category is Category.STRINGS
        assert len(transcriber.session.layers) == 1

    def test_decode_error_leaves_session_untouched(self, transcriber, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"this is not audio")
        with pytest.raises(AudioDecodeError):
            transcriber.transcribe_file(path, Category.KEYS)
        assert transcriber.session.measures == []
        assert len(transcriber.session.layers) == 0

    def test_missing_file(self, transcriber, tmp_path):
        with pytest.raises(FileNotFoundError):
            transcriber.transcribe_file(tmp_path / "missing.wav")

    def test_unsupported_format(self, transcriber, tmp_path):
        path = tmp_path / "notes.xyz"
        path.write_text("dummy content")
        with pytest.raises(ValueError, match="Unsupported format"):
            transcriber.transcribe_file(path)

    def test_requires_audio_clock(self):
        session = TranscriptionSession(clock=PlaybackClock())
        with pytest.raises(ValueError):
            OfflineTranscriber(session)

    def test_bpm_from_duration(self, sine_wave, sample_rate):
        transcriber = OfflineTranscriber()
        assert transcriber.choose_bpm(sine_wave, sample_rate) == 130.0

    def test_fixed_bpm(self, transcriber, sine_wave, sample_rate):
        assert transcriber.choose_bpm(sine_wave, sample_rate) == 120.0


class TestAudioLoader:
    def test_normalize(self):
        loader = AudioLoader()
        audio = np.array([0.5, -0.5, 0.25, -0.25])
        normalized = loader._normalize(audio)
        assert np.abs(normalized).max() == 1.0

    def test_duration(self):
        loader = AudioLoader(target_sr=100)
        assert loader.get_duration(np.zeros(250)) == pytest.approx(2.5)

    def test_probe(self, sine_wave, sample_rate, tmp_path):
        path = tmp_path / "a4.wav"
        sf.write(str(path), sine_wave, sample_rate)
        info = AudioLoader().probe(path)
        assert info.channels == 1
        assert info.sample_rate == sample_rate
        assert info.duration == pytest.approx(5.0)
