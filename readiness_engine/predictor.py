"""
Readiness Predictor.

Combines three signals into a predicted assessment score:
- Average mastery over the assessment's target objectives/cells (0-100)
- Recent success rate: share of practice sessions scoring >= 0.7
- Practice volume, saturating at 10 sessions

Formula (0-100 scale):
    predicted = mastery × 0.6 + success_rate × 100 × 0.3 + min(count / 10, 1) × 10

Confidence is a step function of practice volume (40 / 60 / 80) and the
readiness level buckets the predicted score at 40 / 60 / 80.

The weights and break points are a heuristic pending calibration; they live
in PredictionWeights, ConfidencePolicy and ReadinessThresholds so that a
recalibration is a configuration change.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from readiness_engine.errors import StoreUnavailable, UnresolvedAssessmentTarget
from readiness_engine.models import (
    MasteryRecord,
    PracticeSession,
    PredictionFactors,
    ReadinessLevel,
    ReadinessPrediction,
    utc_now,
)
from readiness_engine.practice_history import PracticeHistoryAggregator, success_rate
from readiness_engine.recommendations import RecommendationRanker
from readiness_engine.stores.base import AssessmentLookup, MasteryStore, PredictionStore

PREDICTION_ALGORITHM = "weighted_sum_v1"
MODEL_VERSION = "1.0"


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


@dataclass(frozen=True)
class PredictionWeights:
    """Weights of the predicted-score formula."""

    mastery: float = 0.6
    success: float = 0.3
    volume_points: float = 10.0
    practice_saturation: int = 10
    success_threshold: float = 0.7

    def score(self, avg_mastery: float, recent_success_rate: float, practice_count: int) -> float:
        """Predicted score on the 0-100 scale, clamped."""
        volume = min(practice_count / self.practice_saturation, 1.0)
        raw = (
            avg_mastery * self.mastery
            + recent_success_rate * 100 * self.success
            + volume * self.volume_points
        )
        return _clamp(raw, 0.0, 100.0)


@dataclass(frozen=True)
class ConfidencePolicy:
    """
    Confidence (0-100) as a non-decreasing step function of practice count.

    steps are (minimum sessions, confidence) pairs; the highest satisfied
    step wins, otherwise base applies.
    """

    steps: tuple[tuple[int, float], ...] = ((5, 80.0), (3, 60.0))
    base: float = 40.0
    ceiling: float = 100.0

    def confidence(self, practice_count: int) -> float:
        value = self.base
        for min_sessions, step_value in self.steps:
            if practice_count >= min_sessions:
                value = max(value, step_value)
        return _clamp(value, 0.0, self.ceiling)


@dataclass(frozen=True)
class ReadinessThresholds:
    """Lower bounds (0-100) of each readiness level."""

    ready: float = 80.0
    almost_ready: float = 60.0
    needs_practice: float = 40.0

    def level(self, predicted: float) -> ReadinessLevel:
        if predicted >= self.ready:
            return ReadinessLevel.READY
        elif predicted >= self.almost_ready:
            return ReadinessLevel.ALMOST_READY
        elif predicted >= self.needs_practice:
            return ReadinessLevel.NEEDS_PRACTICE
        return ReadinessLevel.NOT_READY


@dataclass(frozen=True)
class PredictionPolicy:
    """All tunable prediction parameters."""

    weights: PredictionWeights = field(default_factory=PredictionWeights)
    confidence: ConfidencePolicy = field(default_factory=ConfidencePolicy)
    thresholds: ReadinessThresholds = field(default_factory=ReadinessThresholds)
    window_days: int = 30

    @classmethod
    def from_settings(cls, settings) -> PredictionPolicy:
        """Build the policy from application Settings."""
        config = settings.get_prediction_config()
        weights = config["weights"]
        confidence = config["confidence"]
        thresholds = config["thresholds"]
        return cls(
            weights=PredictionWeights(
                mastery=weights["mastery"],
                success=weights["success"],
                volume_points=weights["volume_points"],
                practice_saturation=weights["practice_saturation"],
                success_threshold=config["success_threshold"],
            ),
            confidence=ConfidencePolicy(
                steps=(confidence["high"], confidence["medium"]),
                base=confidence["base"],
                ceiling=confidence["ceiling"],
            ),
            thresholds=ReadinessThresholds(
                ready=thresholds["ready"],
                almost_ready=thresholds["almost_ready"],
                needs_practice=thresholds["needs_practice"],
            ),
            window_days=config["window_days"],
        )


class ReadinessPredictor:
    """
    Produce and persist ReadinessPrediction objects.

    Hard failures (unknown assessment, unresolved target, prediction store
    write errors) propagate and nothing is stored. Mastery or practice
    lookups that fail with StoreUnavailable degrade to empty inputs, which
    yields a low-confidence prediction.
    """

    def __init__(
        self,
        assessments: AssessmentLookup,
        mastery: MasteryStore,
        practice: PracticeHistoryAggregator,
        predictions: PredictionStore,
        ranker: RecommendationRanker | None = None,
        policy: PredictionPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.assessments = assessments
        self.mastery = mastery
        self.practice = practice
        self.predictions = predictions
        self.ranker = ranker or RecommendationRanker()
        self.policy = policy or PredictionPolicy()
        self.clock = clock

    def predict(self, learner_id: str, assessment_id: str) -> ReadinessPrediction:
        """
        Predict readiness of a learner for an assessment and upsert the result.

        Args:
            learner_id: Learner identifier
            assessment_id: Assessment identifier

        Returns:
            The stored ReadinessPrediction, including ranked recommendations

        Raises:
            AssessmentNotFound: Assessment lookup failed
            UnresolvedAssessmentTarget: Assessment has no target objective
            PersistenceError: Prediction could not be saved
        """
        target = self.assessments.get_assessment(assessment_id)
        if not target.objective_id:
            raise UnresolvedAssessmentTarget(assessment_id)

        records = self._load_mastery(learner_id, list(target.mastery_refs))
        sessions = self._load_sessions(learner_id, target.objective_id)

        avg_mastery = (
            sum(r.mastery_score for r in records) / len(records) if records else 0.0
        )
        rate = success_rate(sessions, self.policy.weights.success_threshold)
        practice_count = len(sessions)

        predicted = self.policy.weights.score(avg_mastery, rate, practice_count)
        confidence = self.policy.confidence.confidence(practice_count)
        level = self.policy.thresholds.level(predicted)

        items = self.ranker.rank(records)
        weak = [r.objective_id for r in self.ranker.weak_records(records)]

        logger.debug(
            f"Readiness factors for {learner_id}/{assessment_id}: mastery={avg_mastery:.1f}, "
            f"success_rate={rate:.2f}, practice={practice_count} -> {predicted:.1f} ({level.value})"
        )

        prediction = ReadinessPrediction(
            learner_id=learner_id,
            assessment_id=assessment_id,
            objective_id=target.objective_id,
            predicted_score=round(predicted / 100, 4),
            confidence=round(confidence / 100, 4),
            readiness_level=level,
            factors=PredictionFactors(
                avg_mastery=avg_mastery,
                recent_success_rate=rate,
                practice_count=practice_count,
                weak_objectives=weak,
            ),
            recommendation=self.ranker.summary_text(items, has_records=bool(records)),
            estimated_prep_minutes=self.ranker.total_minutes(items),
            predicted_at=self.clock(),
            recommendations=items,
            prediction_algorithm=PREDICTION_ALGORITHM,
            model_version=MODEL_VERSION,
        )

        self.predictions.upsert_prediction(prediction)
        logger.info(
            f"Saved readiness prediction for {learner_id}/{assessment_id}: "
            f"{level.value} ({prediction.predicted_points:.0f}%, confidence {confidence:.0f}%)"
        )
        return prediction

    # Public alias matching the exposed operation name
    predict_readiness = predict

    def _load_mastery(self, learner_id: str, refs: list[str]) -> list[MasteryRecord]:
        try:
            return self.mastery.list_mastery(learner_id, refs)
        except StoreUnavailable as e:
            logger.warning(f"Mastery unavailable for {learner_id}, predicting without it: {e}")
            return []

    def _load_sessions(self, learner_id: str, objective_id: str) -> list[PracticeSession]:
        try:
            return self.practice.recent_sessions(
                learner_id, objective_id, self.policy.window_days
            )
        except StoreUnavailable as e:
            logger.warning(f"Practice history unavailable for {learner_id}, predicting without it: {e}")
            return []
