"""Playback clock - pause-aware elapsed time on a monotonic audio clock."""

import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class ClockState:
    """Snapshot of the clock's bookkeeping."""

    banked_seconds: float = 0.0  # elapsed time before the current play segment
    anchor_timestamp: float = 0.0  # time basis at the last resume
    playing: bool = False


class ManualTimeSource:
    """Audio-graph time that advances only when told to.

    The offline host advances it by one processing block per feature record,
    which keeps the clock sample-accurate regardless of how fast the file is
    processed.
    """

    def __init__(self, start: float = 0.0):
        self.current_time = float(start)

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("Audio time cannot run backwards")
        self.current_time += seconds
        return self.current_time

    def __call__(self) -> float:
        return self.current_time


class PlaybackClock:
    """Converts audio time into playback-equivalent elapsed seconds.

    Invariant: elapsed = banked + (now - anchor) while playing, else banked.
    """

    def __init__(self, time_source: Optional[Callable[[], float]] = None):
        """
        Initialize PlaybackClock.

        Args:
            time_source: Zero-argument callable returning monotonic seconds
                (defaults to time.monotonic)
        """
        self.time_source = time_source or time.monotonic
        self.state = ClockState(anchor_timestamp=self.time_source())

    @property
    def is_playing(self) -> bool:
        return self.state.playing

    def elapsed(self) -> float:
        """Total seconds of playback, net of pauses."""
        if not self.state.playing:
            return max(0.0, self.state.banked_seconds)
        segment = self.time_source() - self.state.anchor_timestamp
        return max(0.0, self.state.banked_seconds + segment)

    def reset(self) -> None:
        """Zero the banked time and re-anchor to now."""
        self.state.banked_seconds = 0.0
        self.state.anchor_timestamp = self.time_source()

    def pause(self) -> None:
        """Bank the current play segment and stop counting."""
        if not self.state.playing:
            return
        self.state.banked_seconds = self.elapsed()
        self.state.playing = False

    def resume(self) -> None:
        """Re-anchor to now and start counting."""
        if self.state.playing:
            return
        self.state.anchor_timestamp = self.time_source()
        self.state.playing = True

    def stop(self) -> None:
        """Reset and leave the clock paused."""
        self.state.playing = False
        self.reset()
