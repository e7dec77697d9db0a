"""
Readiness Engine Table Models.

SQLAlchemy models for the tables the engine reads and writes:
- Assessments and their target objective/cells (read)
- Learner mastery per objective or taxonomy cell (read)
- Practice sessions (read)
- Readiness predictions, one per (student, assessment) (upsert)
- Readiness check configurations (insert)

Column types are portable between PostgreSQL and SQLite.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime


class Assessment(Base):
    """Graded assessment and the GLO/cells it targets."""

    __tablename__ = "assessments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, default="")
    glo_id: Mapped[str | None] = mapped_column(String(64))
    target_cells: Mapped[list | None] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(32), default="published")  # 'draft', 'published', 'archived'
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=func.now())

    __table_args__ = (Index("idx_assessments_status_created", "status", "created_at"),)

    def __repr__(self) -> str:
        return f"<Assessment id={self.id} glo={self.glo_id} status={self.status}>"


class StudentMastery(Base):
    """
    Latest mastery per learner per objective (GLO id or cell code).

    Written by the practice-completion flow; the engine only reads it.
    """

    __tablename__ = "student_mastery"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    glo_id: Mapped[str] = mapped_column(String(64), nullable=False)
    cell_code: Mapped[str] = mapped_column(String(2), nullable=False)

    # 0-100 scale
    mastery_score: Mapped[float] = mapped_column(Float, default=0.0)
    successful_practice_streak: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=func.now(), onupdate=func.now()
    )

    __table_args__ = (UniqueConstraint("student_id", "glo_id", name="uq_student_mastery_glo"),)

    def __repr__(self) -> str:
        return f"<StudentMastery student={self.student_id} glo={self.glo_id} mastery={self.mastery_score}>"


class PracticeSessionRow(Base):
    """A completed practice session (score 0-1)."""

    __tablename__ = "practice_sessions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    glo_id: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=func.now())

    __table_args__ = (
        Index("idx_practice_sessions_lookup", "student_id", "glo_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PracticeSessionRow student={self.student_id} glo={self.glo_id} score={self.score}>"


class ReadinessPredictionRow(Base):
    """Current readiness prediction. Upserted on (student_id, assessment_id)."""

    __tablename__ = "readiness_predictions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assessment_id: Mapped[str] = mapped_column(String(64), nullable=False)
    glo_id: Mapped[str | None] = mapped_column(String(64))

    # 0-1 scale
    predicted_score: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    readiness_level: Mapped[str] = mapped_column(String(32), nullable=False)

    factors: Mapped[dict | None] = mapped_column(JSON)
    recommendation: Mapped[str | None] = mapped_column(Text)
    estimated_prep_time_minutes: Mapped[int] = mapped_column(Integer, default=0)

    predicted_at: Mapped[datetime] = mapped_column(UTCDateTime, default=func.now())
    prediction_algorithm: Mapped[str | None] = mapped_column(String(64))
    model_version: Mapped[str | None] = mapped_column(String(32))

    __table_args__ = (
        UniqueConstraint("student_id", "assessment_id", name="uq_prediction_student_assessment"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReadinessPredictionRow student={self.student_id} assessment={self.assessment_id} "
            f"level={self.readiness_level}>"
        )


class ReadinessCheckConfigRow(Base):
    """A generated diagnostic readiness check."""

    __tablename__ = "readiness_check_configs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    assessment_id: Mapped[str] = mapped_column(String(64), nullable=False)
    num_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty_level: Mapped[str] = mapped_column(String(16), nullable=False)
    questions_generated: Mapped[list | None] = mapped_column(JSON)
    time_limit_minutes: Mapped[int] = mapped_column(Integer, default=10)
    include_feedback: Mapped[bool] = mapped_column(Boolean, default=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<ReadinessCheckConfigRow id={self.id} student={self.student_id} assessment={self.assessment_id}>"
