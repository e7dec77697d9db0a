"""
Unit tests for PracticeHistoryAggregator.

Tests:
- Trailing window filtering
- Mean score and per-objective breakdown
- Consecutive-day streak
- Empty history
"""

from datetime import UTC, datetime, timedelta

import pytest
from conftest import NOW, session

from readiness_engine.errors import StoreUnavailable
from readiness_engine.practice_history import compute_streak, success_rate


class TestComputeStreak:
    """Tests for the consecutive-day streak."""

    def test_no_timestamps(self):
        assert compute_streak([]) == 0

    def test_single_day(self):
        assert compute_streak([NOW, NOW - timedelta(hours=1)]) == 1

    def test_consecutive_days(self):
        assert compute_streak([NOW, NOW - timedelta(days=1), NOW - timedelta(days=2)]) == 3

    def test_gap_breaks_streak(self):
        timestamps = [NOW, NOW - timedelta(days=1), NOW - timedelta(days=3), NOW - timedelta(days=4)]
        assert compute_streak(timestamps) == 2

    def test_counts_back_from_most_recent_practice_day(self):
        # Last practice was a week ago; the streak is still counted from that day
        timestamps = [NOW - timedelta(days=7), NOW - timedelta(days=8)]
        assert compute_streak(timestamps) == 2

    def test_buckets_by_utc_date(self):
        late = datetime(2025, 6, 14, 23, 30, tzinfo=UTC)
        early = datetime(2025, 6, 15, 0, 30, tzinfo=UTC)
        assert compute_streak([late, early]) == 2


class TestSuccessRate:
    def test_empty(self):
        assert success_rate([]) == 0.0

    def test_threshold_is_inclusive(self):
        sessions = [session(0.7), session(0.69, n=1), session(0.9, n=2), session(0.2, n=3)]
        assert success_rate(sessions) == pytest.approx(0.5)


class TestSummarize:
    """Tests for PracticeHistoryAggregator.summarize()."""

    def test_empty_window(self, aggregator):
        summary = aggregator.summarize("student-1", "glo-sauces")

        assert summary.is_empty
        assert summary.total_sessions == 0
        assert summary.average_score == 0.0
        assert summary.streak_days == 0
        assert summary.last_practiced is None

    def test_summary_within_window(self, aggregator, session_store):
        session_store.sessions = [
            session(0.8, days_ago=0),
            session(0.6, days_ago=1),
            session(1.0, days_ago=2),
            session(0.4, days_ago=45),  # outside the 30 day window
        ]

        summary = aggregator.summarize("student-1", "glo-sauces")

        assert summary.total_sessions == 3
        assert summary.average_score == pytest.approx(0.8)
        assert summary.streak_days == 3
        assert summary.last_practiced == NOW

    def test_custom_window(self, aggregator, session_store):
        session_store.sessions = [session(0.8, days_ago=0), session(0.6, days_ago=10)]

        summary = aggregator.summarize("student-1", "glo-sauces", window_days=7)

        assert summary.total_sessions == 1
        assert summary.window_days == 7

    def test_all_objectives_breakdown(self, aggregator, session_store):
        session_store.sessions = [
            session(0.8, objective_id="glo-sauces"),
            session(0.4, objective_id="glo-sauces", hours_ago=2),
            session(0.9, objective_id="glo-knives", days_ago=1),
        ]

        summary = aggregator.summarize("student-1", None)

        assert summary.total_sessions == 3
        assert set(summary.by_objective) == {"glo-sauces", "glo-knives"}
        assert summary.by_objective["glo-sauces"].count == 2
        assert summary.by_objective["glo-sauces"].average_score == pytest.approx(0.6)
        assert summary.by_objective["glo-knives"].last_practiced == NOW - timedelta(days=1)

    def test_other_learners_are_ignored(self, aggregator, session_store):
        session_store.sessions = [session(0.8, learner_id="student-2")]

        assert aggregator.summarize("student-1", None).is_empty

    def test_non_positive_window_raises(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.summarize("student-1", "glo-sauces", window_days=0)

    def test_store_failure_propagates(self, aggregator, session_store):
        session_store.fail = True

        with pytest.raises(StoreUnavailable):
            aggregator.summarize("student-1", "glo-sauces")

    def test_recent_sessions_newest_first(self, aggregator, session_store):
        session_store.sessions = [session(0.5, days_ago=3), session(0.9, days_ago=0)]

        recent = aggregator.recent_sessions("student-1", "glo-sauces")

        assert [s.score for s in recent] == [0.9, 0.5]

    def test_summarize_practice_alias(self, aggregator):
        assert aggregator.summarize_practice("student-1", None).is_empty
