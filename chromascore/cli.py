"""Command-line interface for ChromaScore.

Provides commands for:
- transcribe: Turn audio files into colored score layers (JSON / MIDI)
- palette: Generate and preview a scale-degree palette
- info: Show audio file information
"""

import typer
import time
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List
from rich.console import Console
from rich.table import Table
from rich.text import Text

app = typer.Typer(
    name="chromascore",
    help="Audio to colorized symbolic score",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage."""
        self._current_stage = stage
        self._start_time = time.time()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.time() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        """Get total time across all stages."""
        return sum(self.stages.values())

    def print_summary(self) -> None:
        """Print timing summary to console."""
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "stages": self.stages,
            "total_time": self.total_time,
        }


@app.command()
def transcribe(
    input_files: List[Path] = typer.Argument(..., help="Audio files, one layer each"),
    category: List[str] = typer.Option(
        ["keys"], "-c", "--category",
        help="Category per file: keys/percussion/wind/strings/synths (last one repeats)",
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output JSON score path"
    ),
    midi_output: Optional[Path] = typer.Option(
        None, "--midi", help="Also write a MIDI rendering"
    ),
    bpm: float = typer.Option(
        0.0, "-t", "--bpm", help="Tempo (BPM). 0 = estimate per file"
    ),
    beats: int = typer.Option(4, "--beats", help="Beats per measure"),
    detect_tempo: bool = typer.Option(
        False, "--detect-tempo", help="Estimate tempo with beat tracking"
    ),
    key: Optional[str] = typer.Option(
        None, "-k", "--key", help="Palette root key (enables the palette layer)"
    ),
    mode: str = typer.Option("ionian", "-m", "--mode", help="Palette mode"),
    remote_palette: bool = typer.Option(
        False, "--remote-palette", help="Ask the color scheme service for the palette"
    ),
    seal_tail: bool = typer.Option(
        True, "--seal-tail/--no-seal-tail", help="Keep the partial last measure"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Print the score as JSON (for scripting)"
    ),
):
    """Transcribe audio files into a layered, colorized score.

    **Examples:**

        chromascore transcribe piano.wav -o score.json

        chromascore transcribe drums.wav bass.wav -c percussion -c strings --midi out.mid

        chromascore transcribe song.mp3 -k D -m dorian --remote-palette
    """
    from .input import AudioDecodeError
    from .analysis import ManualTimeSource
    from .session import SessionConfig, TranscriptionSession
    from .pipeline import OfflineTranscriber
    from .output import MIDIExporter, ScoreExporter

    for input_file in input_files:
        if not input_file.exists():
            console.print(f"[red]Error: File not found: {input_file}[/red]")
            raise typer.Exit(1)

    timings = StageTimings()
    audio_time = ManualTimeSource()
    config = SessionConfig(
        beats_per_measure=beats,
        seal_trailing_measure=seal_tail,
    )
    session = TranscriptionSession(config, time_source=audio_time)
    transcriber = OfflineTranscriber(
        session,
        bpm=bpm or None,
        detect_tempo=detect_tempo,
    )

    if key:
        timings.start("Palette")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            session.generate_palette(key, mode, remote=remote_palette)
        for w in caught:
            console.print(f"[yellow]{w.message}[/yellow]")
        timings.stop()
        if not json_output:
            console.print(f"[cyan]{session.status}[/cyan]")
            _show_palette(session.active_palette)

    for i, input_file in enumerate(input_files):
        layer_category = category[min(i, len(category) - 1)]
        if not json_output:
            console.print(f"\n[bold blue]Layer {i + 1}: {input_file.name} ({layer_category})[/bold blue]")

        timings.start(f"Transcribe {input_file.name}")
        try:
            layer = transcriber.transcribe_file(input_file, layer_category)
        except (AudioDecodeError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        timings.stop()

        if json_output:
            continue
        if layer is None:
            console.print("[yellow]No measures transcribed[/yellow]")
            continue
        console.print(
            f"   {len(layer.measures)} measures, {layer.note_count} notes "
            f"at {layer.bpm:g} BPM"
        )
        if session.key_detector.tonic:
            console.print(f"   Detected key: {session.key_detector.tonic}")
        if verbose:
            _show_measures_table(layer)

    # The first layer sets the composition tempo; every layer also carries its own
    score_bpm = session.layers[0].bpm if len(session.layers) else session.config.bpm
    exporter = ScoreExporter(bpm=score_bpm, beats_per_measure=beats)
    score = exporter.to_dict(
        session.layers, session.active_palette, session.key_detector.tonic
    )

    if output:
        exporter.export(session.layers, str(output), session.active_palette,
                        session.key_detector.tonic)
        if not json_output:
            console.print(f"\n[green]Score saved: {output}[/green]")

    if midi_output:
        MIDIExporter(tempo=score_bpm, beats_per_measure=beats).export(
            session.layers, str(midi_output)
        )
        if not json_output:
            console.print(f"[green]MIDI saved: {midi_output}[/green]")

    if json_output:
        score["timing"] = timings.to_dict()
        console.print_json(data=score)
    elif verbose:
        timings.print_summary()


@app.command()
def palette(
    key: str = typer.Argument("C", help="Root key, e.g. C, F#, Bb"),
    mode: str = typer.Argument("ionian", help="Mode name"),
    remote: bool = typer.Option(
        False, "--remote", help="Ask the color scheme service (falls back to local)"
    ),
    variants: int = typer.Option(1, "-n", "--variants", help="Number of variants to generate"),
):
    """Generate and preview a scale-degree palette for a key and mode."""
    from .color import PaletteManager

    manager = PaletteManager()
    for _ in range(max(1, variants)):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            if remote:
                result = manager.request_remote(key, mode)
            else:
                result = manager.apply_local(key, mode)
        for w in caught:
            console.print(f"[yellow]{w.message}[/yellow]")
        console.print(f"[cyan]{manager.status}[/cyan]")
        _show_palette(result)


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    from .input import AudioLoader, AudioDecodeError
    from .analysis import TempoAnalyzer

    loader = AudioLoader()
    try:
        meta = loader.probe(input_file)
        audio, sr = loader.load(input_file)
    except (FileNotFoundError, AudioDecodeError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    if meta is not None:
        console.print(f"  Format: {meta.format} ({meta.subtype})")
        console.print(f"  Channels: {meta.channels}")
        console.print(f"  Native sample rate: {meta.sample_rate} Hz")

    duration = loader.get_duration(audio, sr)
    console.print(f"  Duration: {duration:.2f} seconds")
    console.print(f"  Sample rate: {sr} Hz")
    console.print(f"  Samples: {len(audio):,}")

    tempo_analyzer = TempoAnalyzer()
    tempo, _ = tempo_analyzer.detect(audio, sr)
    console.print(f"  Estimated tempo: {tempo:.1f} BPM")
    console.print(f"  Default grid tempo: {tempo_analyzer.estimate_from_duration(duration):g} BPM")


DEGREE_NAMES = ["I", "II", "III", "IV", "V", "VI", "VII"]


def _show_palette(palette):
    """Display palette swatches as a row of colored blocks."""
    from .color import hsb_to_hex

    if palette is None:
        return
    row = Text("   ")
    for i, swatch in enumerate(palette.swatches):
        row.append("  ", style=f"on {hsb_to_hex(swatch.h, swatch.s, swatch.b)}")
        row.append(f" {DEGREE_NAMES[i]:<4}")
    console.print(row)


def _show_measures_table(layer):
    """Display measures in a table."""
    from .color import hsb_to_hex

    table = Table(title=f"{layer.label}")
    table.add_column("Measure", style="cyan")
    table.add_column("Mode", style="green")
    table.add_column("Notes", style="yellow")

    for measure in layer.measures:
        notes = Text()
        for note in measure.notes:
            label = note.pitch_name or note.instrument
            style = None
            if note.color is not None:
                style = hsb_to_hex(note.color.h, note.color.s, note.color.b)
            notes.append(f"{label} ", style=style)
        table.add_row(
            str(measure.measure_number),
            measure.mode.value if measure.mode else "-",
            notes,
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
