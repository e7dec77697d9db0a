"""
Readiness check evaluation.

Scores a completed readiness check: classifies each topic, attaches
follow-up actions to weak topics and builds a short learning plan when the
learner is not yet ready.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

READY_SCORE = 80.0
ALMOST_READY_SCORE = 70.0


class TopicStatus(str, Enum):
    """Performance band for one topic of a check."""

    EXCELLENT = "excellent"  # 90+
    GOOD = "good"  # 80-89
    REVIEW = "review"  # 70-79
    NEEDS_WORK = "needs_work"  # < 70

    @classmethod
    def from_score(cls, score: float) -> TopicStatus:
        if score >= 90:
            return cls.EXCELLENT
        elif score >= 80:
            return cls.GOOD
        elif score >= 70:
            return cls.REVIEW
        return cls.NEEDS_WORK

    @property
    def is_weak(self) -> bool:
        return self in (TopicStatus.REVIEW, TopicStatus.NEEDS_WORK)


@dataclass
class FollowUp:
    """Suggested follow-up for a weak topic."""

    type: str
    title: str
    duration_minutes: int | None = None
    count: int | None = None


@dataclass
class TopicResult:
    name: str
    score: float
    status: TopicStatus
    follow_ups: list[FollowUp] = field(default_factory=list)


@dataclass
class PlanStep:
    action: str
    title: str
    duration_minutes: int


@dataclass
class PlanItem:
    topic: str
    type: str
    steps: list[PlanStep]

    @property
    def minutes(self) -> int:
        return sum(step.duration_minutes for step in self.steps)


@dataclass
class CheckEvaluation:
    """Outcome of a completed readiness check."""

    score: float
    readiness_status: str
    predicted_real_score: float
    confidence_level: str
    strong_topics: list[TopicResult]
    weak_topics: list[TopicResult]
    priority_items: list[PlanItem]

    @property
    def is_ready(self) -> bool:
        return self.readiness_status == "ready"

    @property
    def estimated_time_minutes(self) -> int:
        return sum(item.minutes for item in self.priority_items)


def _follow_ups(topic: str) -> list[FollowUp]:
    return [
        FollowUp("review", f"Review {topic} fundamentals", duration_minutes=20),
        FollowUp("practice", f"Practice {topic} exercises", count=10),
        FollowUp("watch", f"Watch {topic} tutorial", duration_minutes=15),
    ]


def _critical_plan_item(topic: str) -> PlanItem:
    return PlanItem(
        topic=topic,
        type="critical",
        steps=[
            PlanStep("review", "Review fundamentals", 20),
            PlanStep("practice", "Guided practice", 30),
            PlanStep("quiz", "Verification quiz", 10),
        ],
    )


def readiness_status_for(score: float) -> str:
    if score >= READY_SCORE:
        return "ready"
    elif score >= ALMOST_READY_SCORE:
        return "almost_ready"
    return "not_ready"


def confidence_label_for(score: float) -> str:
    if score >= 75:
        return "high"
    elif score >= 65:
        return "medium"
    return "low"


def evaluate_readiness_check(
    score: float, topics: Iterable[tuple[str, float]]
) -> CheckEvaluation:
    """
    Evaluate a completed readiness check.

    Args:
        score: Overall check score (0-100)
        topics: (topic name, topic score 0-100) pairs in presentation order

    Returns:
        CheckEvaluation with topic bands, readiness and a learning plan
    """
    if not 0 <= score <= 100:
        raise ValueError(f"score must be within 0-100, got {score}")

    results = []
    for name, topic_score in topics:
        status = TopicStatus.from_score(topic_score)
        results.append(
            TopicResult(
                name=name,
                score=topic_score,
                status=status,
                follow_ups=_follow_ups(name) if status.is_weak else [],
            )
        )

    status = readiness_status_for(score)
    priority_items = []
    if status != "ready" and results:
        weakest = next(
            (t for t in results if t.status == TopicStatus.NEEDS_WORK), results[-1]
        )
        priority_items.append(_critical_plan_item(weakest.name))

    return CheckEvaluation(
        score=score,
        readiness_status=status,
        predicted_real_score=score / 100,
        confidence_level=confidence_label_for(score),
        strong_topics=[t for t in results if not t.status.is_weak],
        weak_topics=[t for t in results if t.status.is_weak],
        priority_items=priority_items,
    )
