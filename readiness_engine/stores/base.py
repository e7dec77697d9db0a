"""
Store contracts consumed by the readiness engine.

The data store is an external collaborator. Implementations raise
StoreUnavailable on read failures and PersistenceError on write failures;
missing mastery records are returned as None / empty lists, never errors.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from readiness_engine.models import (
    AssessmentTarget,
    Difficulty,
    MasteryRecord,
    PracticeSession,
    Question,
    ReadinessCheckConfig,
    ReadinessPrediction,
)


class AssessmentLookup(Protocol):
    """Resolves assessments to their target objective/cells."""

    def get_assessment(self, assessment_id: str) -> AssessmentTarget:
        """Return the assessment target. Raises AssessmentNotFound."""
        ...

    def get_upcoming_assessment(self) -> AssessmentTarget | None:
        """Return the next published assessment, or None if there is none."""
        ...


class MasteryStore(Protocol):
    """Read access to per-learner mastery records."""

    def get_mastery(self, learner_id: str, objective_id: str) -> MasteryRecord | None:
        ...

    def list_mastery(
        self, learner_id: str, objective_ids: Iterable[str] | None = None
    ) -> list[MasteryRecord]:
        """All records for a learner, optionally restricted to some objectives."""
        ...


class PracticeSessionStore(Protocol):
    """Read access to completed practice sessions."""

    def list_sessions(
        self, learner_id: str, objective_id: str | None, since: datetime
    ) -> list[PracticeSession]:
        """Sessions created at or after `since`, newest first. None spans all objectives."""
        ...


class PredictionStore(Protocol):
    """Persistence for readiness predictions, keyed by (learner_id, assessment_id)."""

    def upsert_prediction(self, prediction: ReadinessPrediction) -> None:
        """Insert or replace the prediction for its (learner_id, assessment_id)."""
        ...

    def get_prediction(self, learner_id: str, assessment_id: str) -> ReadinessPrediction | None:
        ...


class ReadinessCheckConfigStore(Protocol):
    """Persistence for generated readiness checks."""

    def insert_config(self, config: ReadinessCheckConfig) -> str:
        """Store the configuration and return its id."""
        ...


class QuestionBank(Protocol):
    """Source of diagnostic questions."""

    def generate_questions(self, count: int, difficulty: Difficulty) -> list[Question]:
        ...
