"""
SQLAlchemy implementations of the store contracts.

Every call runs in its own Database.session_scope(). SQLAlchemy errors are
logged and re-raised as StoreUnavailable (reads) or PersistenceError (writes).
Predictions are written with INSERT ... ON CONFLICT DO UPDATE on
(student_id, assessment_id), so concurrent writers for the same pair resolve
to last-writer-wins inside the database.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from readiness_engine.db import (
    Assessment,
    Database,
    PracticeSessionRow,
    ReadinessCheckConfigRow,
    ReadinessPredictionRow,
    StudentMastery,
)
from readiness_engine.errors import (
    AssessmentNotFound,
    InvalidRecord,
    PersistenceError,
    StoreUnavailable,
)
from readiness_engine.models import (
    AssessmentTarget,
    MasteryRecord,
    PracticeSession,
    PredictionFactors,
    ReadinessCheckConfig,
    ReadinessLevel,
    ReadinessPrediction,
    as_utc,
)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class _SqlStore:
    """Shared plumbing for the SQL stores."""

    def __init__(self, db: Database):
        self.db = db


def _to_mastery_record(row: StudentMastery) -> MasteryRecord:
    try:
        return MasteryRecord(
            learner_id=row.student_id,
            objective_id=row.glo_id,
            cell_code=row.cell_code,
            mastery_score=row.mastery_score,
            successful_practice_streak=row.successful_practice_streak or 0,
            updated_at=as_utc(row.updated_at) if row.updated_at else None,
        )
    except ValidationError as e:
        raise InvalidRecord(
            f"Invalid mastery row for student={row.student_id} glo={row.glo_id}: {e}"
        ) from e


def _to_assessment_target(row: Assessment) -> AssessmentTarget:
    try:
        return AssessmentTarget(
            assessment_id=row.id,
            title=row.title or "",
            objective_id=row.glo_id or None,
            cell_codes=tuple(row.target_cells or ()),
        )
    except ValidationError as e:
        raise InvalidRecord(f"Invalid assessment row {row.id}: {e}") from e


class SqlAssessmentLookup(_SqlStore):
    """Assessment lookup backed by the assessments table."""

    def get_assessment(self, assessment_id: str) -> AssessmentTarget:
        try:
            with self.db.session_scope() as session:
                row = session.get(Assessment, assessment_id)
                if row is None:
                    raise AssessmentNotFound(assessment_id)
                return _to_assessment_target(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch assessment {assessment_id}: {e}")
            raise StoreUnavailable(f"Assessment lookup failed: {e}") from e

    def get_upcoming_assessment(self) -> AssessmentTarget | None:
        try:
            with self.db.session_scope() as session:
                row = session.scalars(
                    select(Assessment)
                    .where(Assessment.status == "published")
                    .order_by(Assessment.created_at.desc())
                    .limit(1)
                ).first()
                return _to_assessment_target(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch upcoming assessment: {e}")
            raise StoreUnavailable(f"Upcoming assessment lookup failed: {e}") from e


class SqlMasteryStore(_SqlStore):
    """Mastery records backed by the student_mastery table."""

    def get_mastery(self, learner_id: str, objective_id: str) -> MasteryRecord | None:
        try:
            with self.db.session_scope() as session:
                row = session.scalars(
                    select(StudentMastery).where(
                        StudentMastery.student_id == learner_id,
                        StudentMastery.glo_id == objective_id,
                    )
                ).first()
                return _to_mastery_record(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch mastery for {learner_id}/{objective_id}: {e}")
            raise StoreUnavailable(f"Mastery lookup failed: {e}") from e

    def list_mastery(
        self, learner_id: str, objective_ids: Iterable[str] | None = None
    ) -> list[MasteryRecord]:
        query = select(StudentMastery).where(StudentMastery.student_id == learner_id)
        if objective_ids is not None:
            ids = list(objective_ids)
            if not ids:
                return []
            query = query.where(StudentMastery.glo_id.in_(ids))
        query = query.order_by(StudentMastery.glo_id)

        try:
            with self.db.session_scope() as session:
                return [_to_mastery_record(row) for row in session.scalars(query)]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list mastery for {learner_id}: {e}")
            raise StoreUnavailable(f"Mastery listing failed: {e}") from e


class SqlPracticeSessionStore(_SqlStore):
    """Practice sessions backed by the practice_sessions table."""

    def list_sessions(
        self, learner_id: str, objective_id: str | None, since: datetime
    ) -> list[PracticeSession]:
        query = select(PracticeSessionRow).where(
            PracticeSessionRow.student_id == learner_id,
            PracticeSessionRow.created_at >= as_utc(since),
        )
        if objective_id is not None:
            query = query.where(PracticeSessionRow.glo_id == objective_id)
        query = query.order_by(PracticeSessionRow.created_at.desc())

        try:
            with self.db.session_scope() as session:
                rows = list(session.scalars(query))
                sessions = []
                for row in rows:
                    try:
                        sessions.append(
                            PracticeSession(
                                session_id=str(row.id),
                                learner_id=row.student_id,
                                objective_id=row.glo_id,
                                score=row.score,
                                created_at=row.created_at,
                            )
                        )
                    except ValidationError as e:
                        raise InvalidRecord(f"Invalid practice session {row.id}: {e}") from e
                return sessions
        except SQLAlchemyError as e:
            logger.error(f"Failed to list practice sessions for {learner_id}: {e}")
            raise StoreUnavailable(f"Practice session listing failed: {e}") from e


class SqlPredictionStore(_SqlStore):
    """Readiness predictions backed by the readiness_predictions table."""

    def upsert_prediction(self, prediction: ReadinessPrediction) -> None:
        insert = _UPSERT_INSERTS.get(self.db.dialect)
        if insert is None:
            raise PersistenceError(f"Upsert is not supported on dialect {self.db.dialect}")

        values = {
            "student_id": prediction.learner_id,
            "assessment_id": prediction.assessment_id,
            "glo_id": prediction.objective_id,
            "predicted_score": prediction.predicted_score,
            "confidence": prediction.confidence,
            "readiness_level": prediction.readiness_level.value,
            "factors": prediction.factors.to_dict(),
            "recommendation": prediction.recommendation,
            "estimated_prep_time_minutes": prediction.estimated_prep_minutes,
            "predicted_at": as_utc(prediction.predicted_at),
            "prediction_algorithm": prediction.prediction_algorithm,
            "model_version": prediction.model_version,
        }
        stmt = insert(ReadinessPredictionRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["student_id", "assessment_id"],
            set_={
                key: stmt.excluded[key]
                for key in values
                if key not in ("student_id", "assessment_id")
            },
        )

        try:
            with self.db.session_scope() as session:
                session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Prediction upsert failed: {e}")
            raise PersistenceError(f"Failed to save prediction: {e}") from e

    def get_prediction(self, learner_id: str, assessment_id: str) -> ReadinessPrediction | None:
        try:
            with self.db.session_scope() as session:
                row = session.scalars(
                    select(ReadinessPredictionRow).where(
                        ReadinessPredictionRow.student_id == learner_id,
                        ReadinessPredictionRow.assessment_id == assessment_id,
                    )
                ).first()
                if row is None:
                    return None
                return ReadinessPrediction(
                    learner_id=row.student_id,
                    assessment_id=row.assessment_id,
                    objective_id=row.glo_id,
                    predicted_score=row.predicted_score,
                    confidence=row.confidence,
                    readiness_level=ReadinessLevel(row.readiness_level),
                    factors=PredictionFactors.from_dict(row.factors or {}),
                    recommendation=row.recommendation or "",
                    estimated_prep_minutes=row.estimated_prep_time_minutes or 0,
                    predicted_at=as_utc(row.predicted_at),
                    prediction_algorithm=row.prediction_algorithm or "",
                    model_version=row.model_version or "",
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch prediction for {learner_id}/{assessment_id}: {e}")
            raise StoreUnavailable(f"Prediction lookup failed: {e}") from e


class SqlReadinessCheckConfigStore(_SqlStore):
    """Readiness check configurations backed by readiness_check_configs."""

    def insert_config(self, config: ReadinessCheckConfig) -> str:
        row = ReadinessCheckConfigRow(
            student_id=config.learner_id,
            assessment_id=config.assessment_id,
            num_questions=config.num_questions,
            difficulty_level=config.difficulty_level.value,
            questions_generated=[q.to_dict() for q in config.questions],
            time_limit_minutes=config.time_limit_minutes,
            include_feedback=config.include_feedback,
            expires_at=as_utc(config.expires_at),
            created_at=as_utc(config.created_at),
        )
        try:
            with self.db.session_scope() as session:
                session.add(row)
                session.flush()
                return str(row.id)
        except SQLAlchemyError as e:
            logger.error(f"Readiness check config insert failed: {e}")
            raise PersistenceError(f"Failed to save configuration: {e}") from e
