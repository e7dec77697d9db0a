"""
Readiness Engine Domain Models.

Store-facing records (MasteryRecord, PracticeSession, AssessmentTarget) are
validated Pydantic models: rows that violate field ranges are rejected at the
store boundary instead of being clamped inside the prediction logic.

Computed results (PracticeSummary, ReadinessPrediction, RecommendationItem,
ReadinessCheckConfig) are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from readiness_engine.taxonomy import is_cell_code, normalize_cell_code


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ============================================================================
# Enums
# ============================================================================


class ReadinessLevel(str, Enum):
    """Categorical readiness bucket derived from the predicted score."""

    NOT_READY = "not_ready"  # < 40
    NEEDS_PRACTICE = "needs_practice"  # 40-59
    ALMOST_READY = "almost_ready"  # 60-79
    READY = "ready"  # 80+

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            ReadinessLevel.NOT_READY: "red",
            ReadinessLevel.NEEDS_PRACTICE: "yellow",
            ReadinessLevel.ALMOST_READY: "cyan",
            ReadinessLevel.READY: "green",
        }[self]


class Difficulty(str, Enum):
    """Difficulty requested for a readiness check question set."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    ADAPTIVE = "adaptive"


# ============================================================================
# Store Records
# ============================================================================


class MasteryRecord(BaseModel):
    """Latest mastery state for one (learner, objective-or-cell) pair."""

    model_config = ConfigDict(frozen=True)

    learner_id: str = Field(..., min_length=1)
    objective_id: str = Field(..., min_length=1, description="GLO id or taxonomy cell code")
    cell_code: str = Field(..., description="Taxonomy cell the objective is bound to")
    mastery_score: float = Field(..., ge=0, le=100)
    successful_practice_streak: int = Field(0, ge=0)
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_cell_code(cls, data: Any) -> Any:
        # Cell-level records use the cell code itself as objective id
        if isinstance(data, dict) and not data.get("cell_code"):
            objective_id = data.get("objective_id")
            if isinstance(objective_id, str) and is_cell_code(objective_id):
                data = {**data, "cell_code": objective_id}
        return data

    @field_validator("cell_code")
    @classmethod
    def _validate_cell_code(cls, value: str) -> str:
        return normalize_cell_code(value)


class PracticeSession(BaseModel):
    """One completed practice session. Immutable."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    learner_id: str
    objective_id: str
    score: float = Field(..., ge=0, le=1)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class AssessmentTarget(BaseModel):
    """What an upcoming assessment measures, as returned by the assessment lookup."""

    model_config = ConfigDict(frozen=True)

    assessment_id: str
    title: str = ""
    objective_id: str | None = None
    cell_codes: tuple[str, ...] = ()

    @field_validator("cell_codes")
    @classmethod
    def _validate_cells(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(normalize_cell_code(code) for code in value)

    @property
    def mastery_refs(self) -> tuple[str, ...]:
        """Objective/cell ids whose mastery feeds the prediction."""
        if self.cell_codes:
            return self.cell_codes
        return (self.objective_id,) if self.objective_id else ()


# ============================================================================
# Practice History
# ============================================================================


@dataclass
class ObjectivePracticeStats:
    """Practice counts for one objective within the window."""

    objective_id: str
    count: int = 0
    average_score: float = 0.0
    last_practiced: datetime | None = None


@dataclass
class PracticeSummary:
    """Summary of a learner's practice within a trailing window."""

    total_sessions: int = 0
    average_score: float = 0.0
    streak_days: int = 0
    last_practiced: datetime | None = None
    by_objective: dict[str, ObjectivePracticeStats] = field(default_factory=dict)
    window_days: int = 30

    @property
    def is_empty(self) -> bool:
        return self.total_sessions == 0


# ============================================================================
# Predictions
# ============================================================================


@dataclass
class RecommendationItem:
    """One remediation action for a weak objective. Not persisted on its own."""

    objective_id: str
    mastery_score: float
    reason: str
    suggested_practice: str
    estimated_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "objective_id": self.objective_id,
            "mastery_score": self.mastery_score,
            "reason": self.reason,
            "suggested_practice": self.suggested_practice,
            "estimated_minutes": self.estimated_minutes,
        }


@dataclass
class PredictionFactors:
    """Signals that went into a prediction."""

    avg_mastery: float = 0.0
    recent_success_rate: float = 0.0
    practice_count: int = 0
    weak_objectives: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "avg_mastery": self.avg_mastery,
            "recent_success_rate": self.recent_success_rate,
            "practice_count": self.practice_count,
            "weak_objectives": list(self.weak_objectives),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PredictionFactors:
        return cls(
            avg_mastery=float(data.get("avg_mastery", 0.0)),
            recent_success_rate=float(data.get("recent_success_rate", 0.0)),
            practice_count=int(data.get("practice_count", 0)),
            weak_objectives=list(data.get("weak_objectives", [])),
        )


@dataclass
class ReadinessPrediction:
    """
    Current readiness prediction for a (learner, assessment) pair.

    predicted_score and confidence are 0-1 fractions; the raw 0-100 score is
    kept in predicted_points for display and threshold checks.
    """

    learner_id: str
    assessment_id: str
    objective_id: str | None
    predicted_score: float
    confidence: float
    readiness_level: ReadinessLevel
    factors: PredictionFactors
    recommendation: str
    estimated_prep_minutes: int
    predicted_at: datetime
    recommendations: list[RecommendationItem] = field(default_factory=list)
    prediction_algorithm: str = "weighted_sum_v1"
    model_version: str = "1.0"

    @property
    def predicted_points(self) -> float:
        """Predicted score on the 0-100 scale."""
        return self.predicted_score * 100

    @property
    def confidence_percentage(self) -> float:
        return self.confidence * 100


# ============================================================================
# Readiness Check
# ============================================================================


@dataclass
class Question:
    """A diagnostic question. Opaque to the engine apart from its id."""

    question_id: str
    question_type: str
    prompt: str
    options: list[str]
    correct_answer: str
    explanation: str
    bloom_level: str
    points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "question_type": self.question_type,
            "prompt": self.prompt,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "bloom_level": self.bloom_level,
            "points": self.points,
        }


@dataclass
class ReadinessCheckConfig:
    """Configuration of a generated readiness check."""

    learner_id: str
    assessment_id: str
    num_questions: int
    difficulty_level: Difficulty
    questions: list[Question]
    expires_at: datetime
    time_limit_minutes: int = 10
    include_feedback: bool = True
    created_at: datetime = field(default_factory=utc_now)
    config_id: str | None = None


@dataclass
class ReadinessCheck:
    """Result of generate_readiness_check."""

    config: ReadinessCheckConfig
    prediction: ReadinessPrediction
    questions: list[Question]


@dataclass
class UpcomingAssessmentOverview:
    """Dashboard view of the next assessment for a learner."""

    assessment: AssessmentTarget
    prediction: ReadinessPrediction | None
    practice: PracticeSummary
    mastery_score: float = 0.0
    successful_practice_streak: int = 0
