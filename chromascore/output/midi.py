"""MIDI export functionality."""

import pretty_midi
from typing import Dict, Iterable
from pathlib import Path

from ..core import Category, Layer, Note, SUBDIVISIONS

# Canonical instrument -> General MIDI program
GM_PROGRAMS: Dict[str, int] = {
    "piano": 0, "keyboard": 0, "rhodes": 4, "yamaha": 2, "celesta": 8,
    "glockenspiel": 9, "xylophone": 13, "marimba": 12, "tubularbells": 14,
    "chime": 14, "organ": 19, "electricorgan": 16, "mellotron": 19,
    "stylophone": 80, "melodica": 22,
    "flute": 73, "piccolo": 72, "recorder": 74, "whistle": 78,
    "clarinet": 71, "oboe": 68, "bassoon": 70, "trumpet": 56,
    "acousticguitar": 24, "electricguitar": 27, "bass": 32,
    "electricbass": 33, "violin": 40, "viola": 41, "cello": 42,
    "synth": 81, "pad": 88, "lead": 80, "bass_synth": 38, "arpeggio": 81,
}

# Canonical percussion -> General MIDI drum key
GM_DRUMS: Dict[str, int] = {
    "kick": 36, "bassdrum": 35, "snare": 38, "toms": 45, "hihat": 42,
    "crashsplash": 49, "tambourine": 54, "clap": 39,
}


class MIDIExporter:
    """Export transcribed layers to MIDI format."""

    def __init__(
        self,
        tempo: float = 120.0,
        beats_per_measure: int = 4,
        subdivisions: int = SUBDIVISIONS,
        default_velocity: int = 80,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM for layers that carry no tempo of their own
            beats_per_measure: Beats per measure for such layers
            subdivisions: Slices per measure
            default_velocity: Velocity for notes without an intensity
        """
        self.tempo = tempo
        self.beats_per_measure = beats_per_measure
        self.subdivisions = subdivisions
        self.default_velocity = default_velocity

    def measure_duration(self, layer: Layer) -> float:
        """Seconds per measure on the grid the layer was sealed on."""
        bpm = layer.bpm or self.tempo
        beats = layer.beats_per_measure if layer.bpm else self.beats_per_measure
        return (60.0 / bpm) * beats

    def export(self, layers: Iterable[Layer], output_path: str) -> None:
        """
        Export layers to a MIDI file.

        Args:
            layers: Finished layers
            output_path: Path to output MIDI file
        """
        midi = self.layers_to_pretty_midi(layers)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def layers_to_pretty_midi(self, layers: Iterable[Layer]) -> pretty_midi.PrettyMIDI:
        """Convert layers to a PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        for layer in layers:
            tracks: Dict[str, pretty_midi.Instrument] = {}
            measure_duration = self.measure_duration(layer)
            for measure in layer.measures:
                measure_start = (measure.measure_number - 1) * measure_duration
                for note in measure.notes:
                    midi_note = self._to_midi_note(
                        note, measure_start, measure_duration, layer.category
                    )
                    if midi_note is None:
                        continue
                    track = tracks.get(note.instrument)
                    if track is None:
                        track = self._make_track(note.instrument, layer)
                        tracks[note.instrument] = track
                    track.notes.append(midi_note)
            midi.instruments.extend(tracks.values())

        return midi

    def _make_track(self, instrument: str, layer: Layer) -> pretty_midi.Instrument:
        is_drum = layer.category is Category.PERCUSSION
        return pretty_midi.Instrument(
            program=0 if is_drum else GM_PROGRAMS.get(instrument, 0),
            is_drum=is_drum,
            name=f"{layer.label}: {instrument}",
        )

    def _to_midi_note(
        self,
        note: Note,
        measure_start: float,
        measure_duration: float,
        category: Category,
    ):
        if category is Category.PERCUSSION:
            pitch = GM_DRUMS.get(note.instrument, 54)
        else:
            pitch = note.midi_pitch
        if pitch is None or not 0 <= pitch <= 127:
            return None

        slice_duration = measure_duration / self.subdivisions
        start = measure_start + note.slice_index * slice_duration
        if note.sustained:
            end = measure_start + measure_duration
        else:
            end = start + slice_duration

        return pretty_midi.Note(
            velocity=self._velocity(note, category),
            pitch=pitch,
            start=start,
            end=end,
        )

    def _velocity(self, note: Note, category: Category) -> int:
        # Only percussion intensity is a loudness; synth intensity is sharpness
        if category is Category.PERCUSSION and note.intensity is not None:
            return int(min(127, max(1, round(40 + note.intensity * 600))))
        return self.default_velocity

