"""Tests for JSON score and MIDI export."""

import json
from dataclasses import replace

import pytest
import pretty_midi

from chromascore.color import PaletteManager
from chromascore.core import Category, ColorHSB, Layer, Measure, Mode, Note
from chromascore.output import MIDIExporter, ScoreExporter


@pytest.fixture
def keys_layer():
    notes = (
        Note("piano", 0, 0.4, "C", 4, sustained=True, color=ColorHSB(0, 80, 70)),
        Note("piano", 2, 0.3, "A", 4, color=ColorHSB(90, 80, 70)),
    )
    return Layer(
        category=Category.KEYS,
        measures=(
            Measure(1, Category.KEYS, notes, Mode.IONIAN),
            Measure(2, Category.KEYS, notes[1:], None),
        ),
        label="Keys and Harmonics",
    )


@pytest.fixture
def drum_layer():
    notes = (
        Note("bassdrum", 0, 0.9, intensity=0.1),
        Note("snare", 4, 0.6, intensity=0.5),
    )
    return Layer(
        category=Category.PERCUSSION,
        measures=(Measure(1, Category.PERCUSSION, notes),),
        label="Drums and Percussion",
    )


class TestNoteModel:
    def test_pitch_name(self):
        assert Note("piano", 0, pitch_class="A", octave=4).pitch_name == "A4"
        assert Note("kick", 0).pitch_name is None

    def test_midi_pitch(self):
        assert Note("piano", 0, pitch_class="C", octave=4).midi_pitch == 60
        assert Note("piano", 0, pitch_class="A", octave=4).midi_pitch == 69
        assert Note("kick", 0).midi_pitch is None

    def test_y_position_clamped(self):
        assert Note("piano", 0, y_position=1.7).y_position == 1.0
        assert Note("piano", 0, y_position=-0.2).y_position == 0.0

    def test_notes_by_height(self, keys_layer):
        ordered = keys_layer.measures[0].notes_by_height()
        assert [n.pitch_class for n in ordered] == ["A", "C"]

    def test_note_count(self, keys_layer):
        assert keys_layer.note_count == 3


class TestMIDIExporter:
    def test_timing(self, keys_layer):
        midi = MIDIExporter(tempo=120.0).layers_to_pretty_midi([keys_layer])
        assert len(midi.instruments) == 1
        notes = sorted(midi.instruments[0].notes, key=lambda n: n.start)
        # Sustained C4 holds to the end of measure 1
        assert notes[0].pitch == 60
        assert notes[0].start == pytest.approx(0.0)
        assert notes[0].end == pytest.approx(2.0)
        # A4 in slice 2 lasts one slice
        assert notes[1].pitch == 69
        assert notes[1].start == pytest.approx(0.5)
        assert notes[1].end == pytest.approx(0.75)
        # Second measure starts one measure later
        assert notes[2].start == pytest.approx(2.5)

    def test_percussion_track(self, drum_layer):
        midi = MIDIExporter().layers_to_pretty_midi([drum_layer])
        assert all(inst.is_drum for inst in midi.instruments)
        pitches = sorted(n.pitch for inst in midi.instruments for n in inst.notes)
        assert pitches == [35, 38]
        velocities = {n.pitch: n.velocity for inst in midi.instruments for n in inst.notes}
        assert velocities[35] == 100
        assert velocities[38] == 127

    def test_export_roundtrip(self, keys_layer, drum_layer, tmp_path):
        path = tmp_path / "out" / "score.mid"
        MIDIExporter().export([keys_layer, drum_layer], str(path))
        loaded = pretty_midi.PrettyMIDI(str(path))
        assert sum(len(inst.notes) for inst in loaded.instruments) == 5

    def test_layers_keep_their_own_tempo(self, keys_layer):
        fast = replace(keys_layer, bpm=60.0, label="Fast")
        slow = replace(keys_layer, bpm=120.0, beats_per_measure=3, label="Slow")
        midi = MIDIExporter(tempo=100.0).layers_to_pretty_midi([fast, slow])
        starts = {
            inst.name: sorted(n.start for n in inst.notes) for inst in midi.instruments
        }
        # 60 BPM in 4/4: 4 s measures, 0.5 s slices
        assert starts["Fast: piano"] == pytest.approx([0.0, 1.0, 5.0])
        # 120 BPM in 3/4: 1.5 s measures
        assert starts["Slow: piano"] == pytest.approx([0.0, 0.375, 1.875])


class TestScoreExporter:
    def test_to_dict(self, keys_layer):
        palette = PaletteManager.build_local("C", "ionian")
        score = ScoreExporter(bpm=120.0).to_dict([keys_layer], palette, "C")
        assert score["key"] == "C"
        assert score["palette"]["rootKey"] == "C"
        assert len(score["palette"]["swatches"]) == 7
        measure = score["layers"][0]["measures"][0]
        assert measure["mode"] == "ionian"
        assert measure["notes"][1]["color"] == {"h": 90.0, "s": 80.0, "b": 70.0}
        assert score["layers"][0]["measures"][1]["mode"] is None

    def test_layer_tempo_in_json(self, keys_layer):
        tagged = replace(keys_layer, bpm=130.0)
        score = ScoreExporter(bpm=120.0).to_dict([keys_layer, tagged])
        assert score["bpm"] == 120.0
        assert [layer["bpm"] for layer in score["layers"]] == [120.0, 130.0]

    def test_export_json(self, keys_layer, drum_layer, tmp_path):
        path = tmp_path / "score.json"
        ScoreExporter().export([keys_layer, drum_layer], str(path))
        with open(path) as f:
            data = json.load(f)
        assert data["palette"] is None
        assert [layer["category"] for layer in data["layers"]] == ["keys", "percussion"]
        drum = data["layers"][1]["measures"][0]["notes"][0]
        assert drum["pitchClass"] is None
        assert drum["intensity"] == pytest.approx(0.1)
