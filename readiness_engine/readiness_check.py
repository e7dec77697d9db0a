"""
Readiness Check Orchestrator.

Generates a short diagnostic check ahead of an assessment:
1. Run (and persist) a fresh readiness prediction
2. Draw questions from the question bank
3. Store the check configuration with a 24 hour expiry

Also builds the "upcoming assessment" overview used by dashboards.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from readiness_engine.errors import ReadinessEngineError, StoreUnavailable
from readiness_engine.models import (
    Difficulty,
    PracticeSummary,
    ReadinessCheck,
    ReadinessCheckConfig,
    UpcomingAssessmentOverview,
    utc_now,
)
from readiness_engine.practice_history import PracticeHistoryAggregator
from readiness_engine.predictor import ReadinessPredictor
from readiness_engine.stores.base import (
    AssessmentLookup,
    MasteryStore,
    QuestionBank,
    ReadinessCheckConfigStore,
)

DEFAULT_EXPIRY_HOURS = 24
DEFAULT_TIME_LIMIT_MINUTES = 10


def _parse_difficulty(difficulty_level: Difficulty | str) -> Difficulty:
    try:
        return Difficulty(difficulty_level)
    except ValueError:
        valid = ", ".join(d.value for d in Difficulty)
        raise ValueError(
            f"Unknown difficulty level {difficulty_level!r} (expected one of: {valid})"
        ) from None


class ReadinessCheckOrchestrator:
    """Coordinates prediction, question generation and config persistence."""

    def __init__(
        self,
        predictor: ReadinessPredictor,
        question_bank: QuestionBank,
        config_store: ReadinessCheckConfigStore,
        practice: PracticeHistoryAggregator,
        assessments: AssessmentLookup,
        mastery: MasteryStore,
        expiry_hours: int = DEFAULT_EXPIRY_HOURS,
        time_limit_minutes: int = DEFAULT_TIME_LIMIT_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.predictor = predictor
        self.question_bank = question_bank
        self.config_store = config_store
        self.practice = practice
        self.assessments = assessments
        self.mastery = mastery
        self.expiry_hours = expiry_hours
        self.time_limit_minutes = time_limit_minutes
        self.clock = clock

    def generate_readiness_check(
        self,
        learner_id: str,
        assessment_id: str,
        num_questions: int = 5,
        difficulty_level: Difficulty | str = Difficulty.ADAPTIVE,
    ) -> ReadinessCheck:
        """
        Generate and store a readiness check.

        Args:
            learner_id: Learner identifier
            assessment_id: Assessment the check prepares for
            num_questions: Number of questions (>= 1)
            difficulty_level: easy, medium, hard or adaptive

        Returns:
            ReadinessCheck with the stored config (config_id set), the fresh
            prediction and the questions

        Raises:
            ValueError: Invalid question count or difficulty (nothing is called)
            AssessmentNotFound: Unknown assessment
            PersistenceError: Prediction or config could not be saved
        """
        if num_questions < 1:
            raise ValueError(f"num_questions must be >= 1, got {num_questions}")
        difficulty = _parse_difficulty(difficulty_level)

        prediction = self.predictor.predict(learner_id, assessment_id)
        questions = self.question_bank.generate_questions(num_questions, difficulty)

        now = self.clock()
        config = ReadinessCheckConfig(
            learner_id=learner_id,
            assessment_id=assessment_id,
            num_questions=num_questions,
            difficulty_level=difficulty,
            questions=questions,
            expires_at=now + timedelta(hours=self.expiry_hours),
            time_limit_minutes=self.time_limit_minutes,
            include_feedback=True,
            created_at=now,
        )
        config.config_id = self.config_store.insert_config(config)

        logger.info(
            f"Created readiness check {config.config_id} for {learner_id}/{assessment_id}: "
            f"{num_questions} {difficulty.value} questions, expires {config.expires_at.isoformat()}"
        )
        return ReadinessCheck(config=config, prediction=prediction, questions=questions)

    def upcoming_overview(self, learner_id: str) -> UpcomingAssessmentOverview | None:
        """
        Overview of the next published assessment for a learner.

        Returns None when no assessment is published. A failed prediction
        leaves prediction as None, an unavailable practice store yields the
        empty summary and missing mastery defaults to 0.
        """
        assessment = self.assessments.get_upcoming_assessment()
        if assessment is None:
            return None

        prediction = None
        try:
            prediction = self.predictor.predict(learner_id, assessment.assessment_id)
        except ReadinessEngineError as e:
            logger.warning(
                f"Prediction failed for {learner_id}/{assessment.assessment_id}: {e}"
            )

        try:
            practice = self.practice.summarize(learner_id, assessment.objective_id)
        except StoreUnavailable as e:
            logger.warning(f"Practice summary unavailable for {learner_id}: {e}")
            practice = PracticeSummary(window_days=self.practice.default_window_days)

        mastery_score = 0.0
        streak = 0
        if assessment.objective_id:
            try:
                record = self.mastery.get_mastery(learner_id, assessment.objective_id)
            except StoreUnavailable as e:
                logger.warning(f"Mastery unavailable for {learner_id}: {e}")
                record = None
            if record is not None:
                mastery_score = record.mastery_score
                streak = record.successful_practice_streak

        return UpcomingAssessmentOverview(
            assessment=assessment,
            prediction=prediction,
            practice=practice,
            mastery_score=mastery_score,
            successful_practice_streak=streak,
        )
