"""
Practice History Aggregator.

Summarizes a learner's practice sessions within a trailing window:
session count, mean score, consecutive-day streak and a per-objective
breakdown. Sessions are bucketed by UTC calendar date for the streak.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timedelta

from loguru import logger

from readiness_engine.models import (
    ObjectivePracticeStats,
    PracticeSession,
    PracticeSummary,
    as_utc,
    utc_now,
)
from readiness_engine.stores.base import PracticeSessionStore

DEFAULT_WINDOW_DAYS = 30


def compute_streak(timestamps: Iterable[datetime]) -> int:
    """
    Count consecutive practice days ending at the most recent practice day.

    The count starts from the latest calendar day that has a session and
    stops at the first day without one.

    Args:
        timestamps: Session creation times

    Returns:
        Streak length in days (0 if no timestamps)
    """
    days: set[date] = {as_utc(ts).date() for ts in timestamps}
    if not days:
        return 0

    streak = 0
    current = max(days)
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def success_rate(sessions: Sequence[PracticeSession], threshold: float = 0.7) -> float:
    """Fraction of sessions scoring at or above threshold (0 if none)."""
    if not sessions:
        return 0.0
    return sum(1 for s in sessions if s.score >= threshold) / len(sessions)


def build_summary(sessions: Sequence[PracticeSession], window_days: int = DEFAULT_WINDOW_DAYS) -> PracticeSummary:
    """Summarize an already-fetched list of sessions."""
    if not sessions:
        return PracticeSummary(window_days=window_days)

    by_objective: dict[str, ObjectivePracticeStats] = {}
    totals: dict[str, float] = {}
    for s in sessions:
        stats = by_objective.setdefault(s.objective_id, ObjectivePracticeStats(objective_id=s.objective_id))
        stats.count += 1
        totals[s.objective_id] = totals.get(s.objective_id, 0.0) + s.score
        if stats.last_practiced is None or s.created_at > stats.last_practiced:
            stats.last_practiced = s.created_at

    for objective_id, stats in by_objective.items():
        stats.average_score = totals[objective_id] / stats.count

    return PracticeSummary(
        total_sessions=len(sessions),
        average_score=sum(s.score for s in sessions) / len(sessions),
        streak_days=compute_streak(s.created_at for s in sessions),
        last_practiced=max(s.created_at for s in sessions),
        by_objective=by_objective,
        window_days=window_days,
    )


class PracticeHistoryAggregator:
    """
    Reads practice sessions and produces PracticeSummary objects.

    Store failures propagate as StoreUnavailable; callers that prefer a
    degraded answer (the predictor) decide how to handle them.
    """

    def __init__(
        self,
        sessions: PracticeSessionStore,
        clock: Callable[[], datetime] = utc_now,
        default_window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        self.sessions = sessions
        self.clock = clock
        self.default_window_days = default_window_days

    def recent_sessions(
        self,
        learner_id: str,
        objective_id: str | None,
        window_days: int | None = None,
    ) -> list[PracticeSession]:
        """Sessions within the trailing window, newest first."""
        window_days = self.default_window_days if window_days is None else window_days
        if window_days <= 0:
            raise ValueError(f"window_days must be positive, got {window_days}")

        since = self.clock() - timedelta(days=window_days)
        sessions = self.sessions.list_sessions(learner_id, objective_id, since)
        # Window is enforced here even if the store returns older rows
        return sorted(
            (s for s in sessions if s.created_at >= as_utc(since)),
            key=lambda s: s.created_at,
            reverse=True,
        )

    def summarize(
        self,
        learner_id: str,
        objective_id: str | None,
        window_days: int | None = None,
    ) -> PracticeSummary:
        """
        Summarize practice for a learner/objective over the trailing window.

        Args:
            learner_id: Learner identifier
            objective_id: Objective to summarize, or None for all objectives
            window_days: Window length (defaults to 30)

        Returns:
            PracticeSummary; the empty summary when there are no sessions
        """
        window_days = self.default_window_days if window_days is None else window_days
        sessions = self.recent_sessions(learner_id, objective_id, window_days)
        summary = build_summary(sessions, window_days)
        logger.debug(
            f"Practice summary for {learner_id}/{objective_id}: "
            f"{summary.total_sessions} sessions, avg={summary.average_score:.2f}, "
            f"streak={summary.streak_days}"
        )
        return summary

    # Public alias matching the exposed operation name
    summarize_practice = summarize
