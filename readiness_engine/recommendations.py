"""
Recommendation Ranker.

Picks the weakest objectives for an assessment and turns them into
fixed-cost remediation actions, weakest first.
"""

from __future__ import annotations

from collections.abc import Sequence

from readiness_engine.models import MasteryRecord, RecommendationItem

READY_MESSAGE = "You are ready for the assessment!"
MORE_PRACTICE_MESSAGE = (
    "More practice is needed before readiness can be estimated. "
    "Complete a few practice sessions for this objective."
)
SUGGESTED_PRACTICE = "Complete 3-5 practice questions"


class RecommendationRanker:
    """
    Rank weak objectives into remediation recommendations.

    Policy:
    - Weak = mastery score below weak_threshold (default 60)
    - Order ascending by mastery, ties broken by objective id
    - Keep the top max_items (default 3), each costing remediation_minutes
    """

    def __init__(
        self,
        weak_threshold: float = 60.0,
        max_items: int = 3,
        remediation_minutes: int = 15,
    ):
        self.weak_threshold = weak_threshold
        self.max_items = max_items
        self.remediation_minutes = remediation_minutes

    @classmethod
    def from_settings(cls, settings) -> RecommendationRanker:
        return cls(
            weak_threshold=settings.weak_mastery_threshold,
            max_items=settings.max_recommendations,
            remediation_minutes=settings.remediation_minutes,
        )

    def weak_records(self, records: Sequence[MasteryRecord]) -> list[MasteryRecord]:
        """All records below the weak threshold, weakest first."""
        weak = [r for r in records if r.mastery_score < self.weak_threshold]
        return sorted(weak, key=lambda r: (r.mastery_score, r.objective_id))

    def rank(self, records: Sequence[MasteryRecord]) -> list[RecommendationItem]:
        """
        Build the ordered recommendation list.

        Args:
            records: Mastery records for the assessment's objectives

        Returns:
            At most max_items RecommendationItem, never including an
            objective at or above the weak threshold
        """
        return [
            RecommendationItem(
                objective_id=record.objective_id,
                mastery_score=record.mastery_score,
                reason=f"Mastery at {round(record.mastery_score)}%",
                suggested_practice=SUGGESTED_PRACTICE,
                estimated_minutes=self.remediation_minutes,
            )
            for record in self.weak_records(records)[: self.max_items]
        ]

    @staticmethod
    def total_minutes(items: Sequence[RecommendationItem]) -> int:
        """Total estimated preparation time."""
        return sum(item.estimated_minutes for item in items)

    def summary_text(self, items: Sequence[RecommendationItem], has_records: bool) -> str:
        """
        Free-text recommendation stored with the prediction.

        Weak objectives produce a focus list; records with no weak objective
        produce the ready message; no records at all fall back to a generic
        more-practice message.
        """
        if items:
            focus = ", ".join(item.objective_id for item in items)
            return f"Focus on: {focus}. Estimated time: {self.total_minutes(items)} minutes."
        if has_records:
            return READY_MESSAGE
        return MORE_PRACTICE_MESSAGE
