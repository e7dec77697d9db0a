"""
Store contracts and their SQLAlchemy implementations.
"""
from readiness_engine.stores.base import (
    AssessmentLookup,
    MasteryStore,
    PracticeSessionStore,
    PredictionStore,
    QuestionBank,
    ReadinessCheckConfigStore,
)
from readiness_engine.stores.sql import (
    SqlAssessmentLookup,
    SqlMasteryStore,
    SqlPracticeSessionStore,
    SqlPredictionStore,
    SqlReadinessCheckConfigStore,
)

__all__ = [
    # Contracts
    "AssessmentLookup",
    "MasteryStore",
    "PracticeSessionStore",
    "PredictionStore",
    "QuestionBank",
    "ReadinessCheckConfigStore",
    # SQL implementations
    "SqlAssessmentLookup",
    "SqlMasteryStore",
    "SqlPracticeSessionStore",
    "SqlPredictionStore",
    "SqlReadinessCheckConfigStore",
]
