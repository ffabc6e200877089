"""Tests for ActivityTracker."""

import pytest

from claude_watch.services.activity_tracker import SPARKLINE_GLYPHS, SPARKLINE_WIDTH, ActivityTracker


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return ActivityTracker(history_seconds=20, clock=clock)


class TestSparkline:
    """Tests for sparkline rendering."""

    def test_empty_session_is_flat(self, tracker):
        assert tracker.sparkline("nobody") == "▁" * 20

    def test_width_and_alphabet(self, tracker, clock):
        for count in (1, 3, 7, 2):
            tracker.record("s1", count)
            clock.now += 1

        line = tracker.sparkline("s1")

        assert len(line) == 20
        assert set(line) <= set(SPARKLINE_GLYPHS)

    def test_peak_maps_to_top_glyph(self, tracker, clock):
        tracker.record("s1", 2)
        clock.now += 1
        tracker.record("s1", 8)

        line = tracker.sparkline("s1")

        assert line[-1] == "█"
        assert line[-2] == SPARKLINE_GLYPHS[2 * 7 // 8]
        assert line[:-2] == "▁" * 18

    def test_deterministic(self, tracker, clock):
        tracker.record("s1", 3)
        clock.now += 2
        tracker.record("s1", 1)

        assert tracker.sparkline("s1") == tracker.sparkline("s1")

    def test_data_oldest_first_with_gaps(self, tracker, clock):
        tracker.record("s1", 4)
        clock.now += 3
        tracker.record("s1", 1)

        data = tracker.sparkline_data("s1")

        assert data[-4:] == [4, 0, 0, 1]


class TestRetention:
    """Tests for bucket pruning and counts."""

    def test_old_buckets_age_out(self, tracker, clock):
        tracker.record("s1", 5)
        clock.now += 25
        tracker.record("s1", 1)

        assert sum(tracker.sparkline_data("s1")) == 1

    def test_recent_activity_count(self, tracker, clock):
        tracker.record("s1", 2)
        clock.now += 3
        tracker.record("s1", 3)
        clock.now += 3

        assert tracker.recent_activity_count("s1", seconds=5) == 3
        assert tracker.recent_activity_count("s1", seconds=10) == 5

    def test_sessions_are_independent(self, tracker):
        tracker.record("s1", 5)

        assert sum(tracker.sparkline_data("s2")) == 0

    def test_clear_all(self, tracker):
        tracker.record("s1", 5)
        tracker.clear_all()

        assert tracker.sparkline("s1") == "▁" * 20


class TestWidth:
    """Tests for the fixed sparkline width."""

    @pytest.mark.parametrize("history_seconds", [5, 20, 120])
    def test_width_independent_of_retention(self, clock, history_seconds):
        tracker = ActivityTracker(history_seconds=history_seconds, clock=clock)
        tracker.record("s1", 3)

        assert len(tracker.sparkline_data("s1")) == SPARKLINE_WIDTH
        assert len(tracker.sparkline("s1")) == SPARKLINE_WIDTH
        assert tracker.sparkline("s1")[-1] == "█"

    def test_short_retention_blanks_older_seconds(self, clock):
        tracker = ActivityTracker(history_seconds=5, clock=clock)
        tracker.record("s1", 2)
        clock.now += 8

        assert sum(tracker.sparkline_data("s1")) == 0
