"""Offline host - drives a transcription session from an audio file.

Plays the role of the live audio graph: decodes the file, walks it block by
block, advances the audio clock by one block per record and feeds the
session's queue, then ends the recording so its layer is kept.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np

from .analysis import FeatureExtractor, ManualTimeSource, TempoAnalyzer
from .core import Category, Layer
from .input import AudioLoader
from .session import SessionConfig, TranscriptionSession


class OfflineTranscriber:
    """Transcribe whole recordings through a TranscriptionSession."""

    def __init__(
        self,
        session: Optional[TranscriptionSession] = None,
        loader: Optional[AudioLoader] = None,
        bpm: Optional[float] = None,
        detect_tempo: bool = False,
        block_size: int = 512,
    ):
        """
        Initialize OfflineTranscriber.

        Args:
            session: Session to drive; its clock must run on a ManualTimeSource
            loader: Audio loader
            bpm: Fixed tempo; None picks one per recording
            detect_tempo: Use beat tracking instead of the duration heuristic
            block_size: Samples per feature record

        Raises:
            ValueError: If the session's clock is not driven by audio time
        """
        if session is None:
            self.audio_time = ManualTimeSource()
            session = TranscriptionSession(SessionConfig(), time_source=self.audio_time)
        elif isinstance(session.clock.time_source, ManualTimeSource):
            self.audio_time = session.clock.time_source
        else:
            raise ValueError("Offline transcription needs a clock on a ManualTimeSource")

        self.session = session
        self.loader = loader or AudioLoader()
        self.bpm = bpm
        self.detect_tempo = detect_tempo
        self.block_size = block_size
        self.tempo_analyzer = TempoAnalyzer()

    def transcribe_file(
        self,
        path: Union[str, Path],
        category: Union[Category, str] = Category.KEYS,
    ) -> Optional[Layer]:
        """
        Decode a file and transcribe it as one layer.

        Decoding happens before the session is touched, so a file that cannot
        be read leaves no partial measures behind.

        Args:
            path: Audio file path
            category: Instrument-family lens

        Returns:
            The saved Layer, or None if nothing was transcribed

        Raises:
            FileNotFoundError, ValueError, AudioDecodeError: Setup failures
        """
        audio, sr = self.loader.load(str(path))
        return self.transcribe_audio(audio, sr, category)

    def transcribe_audio(
        self,
        audio: np.ndarray,
        sr: int,
        category: Union[Category, str] = Category.KEYS,
    ) -> Optional[Layer]:
        """
        Transcribe an in-memory signal as one layer.

        Args:
            audio: Mono audio array
            sr: Sample rate
            category: Instrument-family lens

        Returns:
            The saved Layer, or None if nothing was transcribed
        """
        category = Category.from_name(category)
        session = self.session

        session.set_bpm(self.choose_bpm(audio, sr))
        session.config.sample_rate = sr

        extractor = FeatureExtractor(sr=sr, block_size=self.block_size)

        session.start(category)
        for frame in extractor.frames(audio, category):
            self.audio_time.advance(extractor.block_duration)
            session.submit(frame)
            session.drain()

        return session.finish()

    def choose_bpm(self, audio: np.ndarray, sr: int) -> float:
        """Fixed tempo if given, else a detected or duration-based estimate."""
        if self.bpm:
            return self.bpm
        if self.detect_tempo:
            tempo, _ = self.tempo_analyzer.detect(audio, sr)
            if tempo > 0:
                return tempo
        return self.tempo_analyzer.estimate_from_duration(len(audio) / sr)
