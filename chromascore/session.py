"""Transcription session - the owner of all mutable transcription state.

Pipeline per feature record:
    FeatureFrame (+ pitch estimate) -> FeatureBuffer -> [measure sealed] ->
    CategoryClassifier -> KeyModeDetector (mode) -> ColorResolver -> Measure

Records arrive through a single-consumer queue; user actions (start, pause,
resume, finish, reset, palette generation) and record processing share one
lock so a multi-threaded host can drive the session safely.
"""

import queue
import threading
import warnings
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterator, List, Optional

from .analysis.clock import PlaybackClock
from .analysis.features import FeatureFrame
from .analysis.pitch import PitchEstimator
from .analysis.tempo import measure_duration
from .color import ColorResolver, Palette, PaletteManager
from .core import (
    Category,
    DEFAULT_SR,
    Layer,
    Measure,
    Mode,
    Note,
    SUBDIVISIONS,
    is_synth,
    tonic_hue,
)
from .inference import KeyModeDetector
from .transcription import CategoryClassifier, FeatureBuffer, SealedMeasure, classifier_for


@dataclass
class SessionConfig:
    """Configuration for a transcription session.

    Attributes:
        bpm: Tempo of the measure grid (default: 120)
        beats_per_measure: Beats per measure (default: 4)
        subdivisions: Slices per measure (default: 8)
        sample_rate: Sample rate of raw waveform windows (default: 44100)
        seal_trailing_measure: Seal the partial last measure on finish (default: False)
    """

    bpm: float = 120.0
    beats_per_measure: int = 4
    subdivisions: int = SUBDIVISIONS
    sample_rate: int = DEFAULT_SR
    seal_trailing_measure: bool = False

    @property
    def measure_duration(self) -> float:
        return measure_duration(self.bpm, self.beats_per_measure)


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    FINISHED = "finished"


class LayerStore:
    """Ordered stack of finished layers, composited oldest first."""

    def __init__(self):
        self._layers: List[Layer] = []

    def append(self, layer: Layer) -> None:
        self._layers.append(layer)

    def clear(self) -> None:
        self._layers.clear()

    @property
    def max_measures(self) -> int:
        return max((len(layer.measures) for layer in self._layers), default=0)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]


class TranscriptionSession:
    """Turn a stream of feature records into colored measures and layers."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        clock: Optional[PlaybackClock] = None,
        palette_manager: Optional[PaletteManager] = None,
        pitch_estimator: Optional[PitchEstimator] = None,
        time_source: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize TranscriptionSession.

        Args:
            config: Session configuration (tempo, grid, sample rate)
            clock: Playback clock (built from time_source if omitted)
            palette_manager: Palette holder (a fresh one if omitted)
            pitch_estimator: Fundamental-frequency estimator
            time_source: Monotonic time callable for a default clock
        """
        self.config = config or SessionConfig()
        self.clock = clock or PlaybackClock(time_source)
        self.palette_manager = palette_manager or PaletteManager()
        self.pitch_estimator = pitch_estimator or PitchEstimator()

        self.buffer = FeatureBuffer(
            self.clock,
            bpm=self.config.bpm,
            beats_per_measure=self.config.beats_per_measure,
            subdivisions=self.config.subdivisions,
        )
        self.key_detector = KeyModeDetector()
        self.resolver = ColorResolver()
        self.layers = LayerStore()

        self.category = Category.KEYS
        self.classifier: CategoryClassifier = classifier_for(self.category)
        self.measures: List[Measure] = []
        self.state = SessionState.IDLE
        self.status = "Ready"

        self._queue: "queue.Queue[FeatureFrame]" = queue.Queue()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.state is SessionState.RECORDING

    @property
    def active_palette(self) -> Optional[Palette]:
        return self.palette_manager.active

    def set_bpm(self, bpm: float) -> None:
        """Set the tempo of the measure grid."""
        if bpm <= 0:
            raise ValueError(f"BPM must be positive, got {bpm}")
        with self._lock:
            self.config.bpm = bpm
            self.buffer.bpm = bpm
            self.status = f"BPM: {bpm:g} - measure = {self.config.measure_duration:.3f}s"

    def start(self, category=Category.KEYS) -> None:
        """
        Begin recording a new layer.

        Args:
            category: Category (or its name) the recording is transcribed as
        """
        with self._lock:
            self.category = Category.from_name(category)
            self.classifier = classifier_for(self.category)
            self.measures = []
            self.buffer.clear()
            self._drop_queued()
            self.key_detector.reset()

            palette = self.palette_manager.active
            self.resolver.palette = palette
            self.resolver.key_hue_offset = -tonic_hue(palette.root_key) if palette else 0.0

            self.clock.reset()
            self.clock.resume()
            self.state = SessionState.RECORDING
            self.status = (
                f"Transcribing {self.category.label} at {self.config.bpm:g} BPM"
            )

    def pause(self) -> None:
        with self._lock:
            if self.state is not SessionState.RECORDING:
                return
            self.clock.pause()
            self.state = SessionState.PAUSED
            self.status = "Paused"

    def resume(self) -> None:
        with self._lock:
            if self.state is not SessionState.PAUSED:
                return
            self.clock.resume()
            self.state = SessionState.RECORDING
            self.status = f"Transcribing {self.category.label} at {self.config.bpm:g} BPM"

    def finish(self) -> Optional[Layer]:
        """
        End the recording naturally and keep its measures as a layer.

        Returns:
            The saved Layer, or None if nothing was transcribed
        """
        with self._lock:
            if self.state in (SessionState.RECORDING, SessionState.PAUSED):
                self.drain()
                if self.config.seal_trailing_measure:
                    sealed = self.buffer.seal_pending()
                    if sealed is not None:
                        self._build_measure(sealed)
            self.clock.pause()
            self.state = SessionState.FINISHED

            if not self.measures:
                self.status = "Nothing transcribed"
                return None

            layer = Layer(
                category=self.category,
                measures=tuple(self.measures),
                label=self.category.label,
                bpm=self.config.bpm,
                beats_per_measure=self.config.beats_per_measure,
            )
            self.layers.append(layer)
            self.measures = []
            self.status = f"Layer {len(self.layers)} saved ({layer.label})"
            return layer

    def reset(self) -> None:
        """Discard everything: buffers, working measures, layers, key state, clock."""
        with self._lock:
            self._drop_queued()
            self.measures = []
            self.layers.clear()
            self.buffer.clear()
            self.key_detector.reset()
            self.palette_manager.variant_index = 0
            self.resolver.key_hue_offset = 0.0
            self.clock.stop()
            self.state = SessionState.IDLE
            self.status = "Composition cleared"

    def generate_palette(self, root_key: str, mode_name: str, remote: bool = False) -> Palette:
        """
        Build and activate a palette for a key and mode.

        Args:
            root_key: Tonic name
            mode_name: Mode name (unknown names fall back to ionian)
            remote: Ask the remote scheme service first

        Returns:
            The newly active Palette
        """
        Mode.from_name(mode_name)  # warns on unknown names
        with self._lock:
            if remote:
                palette = self.palette_manager.request_remote(root_key, mode_name)
            else:
                palette = self.palette_manager.apply_local(root_key, mode_name)
            self.resolver.palette = palette
            self.resolver.key_hue_offset = self.palette_manager.key_hue_offset
            self.status = self.palette_manager.status
            return palette

    # ------------------------------------------------------------------
    # Feature stream
    # ------------------------------------------------------------------

    def submit(self, frame: FeatureFrame) -> None:
        """Queue a feature record from the audio host."""
        self._queue.put(frame)

    def drain(self) -> int:
        """
        Process every queued record in arrival order.

        Returns:
            Number of records consumed
        """
        consumed = 0
        while True:
            try:
                frame = self._queue.get_nowait()
            except queue.Empty:
                return consumed
            self.process(frame)
            consumed += 1

    def process(self, frame: FeatureFrame) -> Optional[Measure]:
        """
        Handle one feature record.

        Records arriving while not recording are ignored.

        Returns:
            The Measure sealed by this record, if any
        """
        if frame is None:
            return None
        with self._lock:
            if self.state is not SessionState.RECORDING:
                return None

            fundamental = None
            if self.category.is_pitched and frame.waveform is not None:
                fundamental = self.pitch_estimator.estimate(
                    frame.waveform, self.config.sample_rate
                )

            if frame.chroma is not None:
                self.key_detector.observe_chroma(frame.chroma)

            sealed = self.buffer.add(frame, fundamental)
            if sealed is None:
                return None
            return self._build_measure(sealed)

    # ------------------------------------------------------------------
    # Measure construction
    # ------------------------------------------------------------------

    def _build_measure(self, sealed: SealedMeasure) -> Measure:
        if self.key_detector.update_song_key():
            self.resolver.key_hue_offset = self.key_detector.key_hue_offset
            self.status = (
                f"Key: {self.key_detector.tonic} | {self.category.label} "
                f"at {self.config.bpm:g} BPM"
            )

        notes: List[Note] = []
        for slice_index, features in enumerate(sealed.slices):
            note = self.classifier.classify(features, slice_index)
            if note is not None:
                notes.append(note)

        mode = self.key_detector.detect_mode([n.pitch_class for n in notes])
        notes = [self._bake_color(note, mode) for note in notes]

        measure = Measure(
            measure_number=sealed.index + 1,
            category=self.category,
            notes=tuple(notes),
            mode=mode,
        )
        self.measures.append(measure)
        return measure

    def _bake_color(self, note: Note, mode: Optional[Mode]) -> Note:
        args = (note.pitch_class, note.octave, note.instrument, mode, note.intensity)
        color = self.resolver.resolve(*args)
        color_right = None
        if is_synth(note.instrument):
            color_right = self.resolver.resolve_gradient_right(*args)
        return replace(note, color=color, color_right=color_right)

    def _drop_queued(self) -> None:
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            dropped += 1
        if dropped and self.state is SessionState.RECORDING:
            warnings.warn(f"Discarded {dropped} unprocessed feature records")
