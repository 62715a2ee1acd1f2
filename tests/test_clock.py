"""Tests for the pause-aware playback clock."""

import pytest

from chromascore.analysis import ManualTimeSource, PlaybackClock


@pytest.fixture
def audio_time():
    return ManualTimeSource()


@pytest.fixture
def clock(audio_time):
    return PlaybackClock(audio_time)


class TestManualTimeSource:
    def test_advance(self, audio_time):
        audio_time.advance(0.5)
        audio_time.advance(0.25)
        assert audio_time() == pytest.approx(0.75)

    def test_cannot_run_backwards(self, audio_time):
        with pytest.raises(ValueError):
            audio_time.advance(-0.1)


class TestPlaybackClock:
    def test_starts_paused_at_zero(self, clock, audio_time):
        audio_time.advance(3.0)
        assert not clock.is_playing
        assert clock.elapsed() == 0.0

    def test_counts_while_playing(self, clock, audio_time):
        clock.resume()
        audio_time.advance(1.5)
        assert clock.elapsed() == pytest.approx(1.5)

    def test_pause_resume_has_no_drift(self, clock, audio_time):
        """Time spent paused never shows up in elapsed()."""
        clock.resume()
        audio_time.advance(2.0)
        clock.pause()
        audio_time.advance(10.0)
        assert clock.elapsed() == pytest.approx(2.0)

        clock.resume()
        audio_time.advance(1.0)
        assert clock.elapsed() == pytest.approx(3.0)

    def test_pause_and_resume_are_idempotent(self, clock, audio_time):
        clock.resume()
        audio_time.advance(1.0)
        clock.resume()  # must not re-anchor
        audio_time.advance(1.0)
        clock.pause()
        clock.pause()
        assert clock.elapsed() == pytest.approx(2.0)

    def test_reset_zeroes_elapsed(self, clock, audio_time):
        clock.resume()
        audio_time.advance(4.0)
        clock.reset()
        assert clock.elapsed() == pytest.approx(0.0)
        audio_time.advance(0.5)
        assert clock.elapsed() == pytest.approx(0.5)

    def test_stop_leaves_clock_paused(self, clock, audio_time):
        clock.resume()
        audio_time.advance(4.0)
        clock.stop()
        audio_time.advance(1.0)
        assert not clock.is_playing
        assert clock.elapsed() == 0.0

    def test_elapsed_never_negative(self):
        ticks = iter([10.0, 10.0, 5.0])
        clock = PlaybackClock(lambda: next(ticks))
        clock.resume()
        assert clock.elapsed() == 0.0

    def test_defaults_to_monotonic_time(self):
        clock = PlaybackClock()
        clock.resume()
        assert clock.elapsed() >= 0.0
