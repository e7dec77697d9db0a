"""
GLO Readiness Engine.

Predicts how ready a learner is for an upcoming assessment from their
per-objective mastery and recent practice history, and turns weak
objectives into a short remediation plan.

Components:
- taxonomy: Revised Bloom's grid (6 cognitive levels × 4 knowledge types)
- PracticeHistoryAggregator: Trailing-window practice summaries and streaks
- RecommendationRanker: Weakest objectives -> remediation actions
- ReadinessPredictor: Weighted prediction, confidence and readiness level
- ReadinessCheckOrchestrator: Prediction + questions + stored check config
- evaluate_readiness_check: Scores a completed readiness check
"""
from readiness_engine.check_evaluation import CheckEvaluation, TopicStatus, evaluate_readiness_check
from readiness_engine.errors import (
    AssessmentLookupError,
    AssessmentNotFound,
    InvalidCellCode,
    InvalidRecord,
    PersistenceError,
    ReadinessEngineError,
    StoreError,
    StoreUnavailable,
    UnresolvedAssessmentTarget,
)
from readiness_engine.models import (
    AssessmentTarget,
    Difficulty,
    MasteryRecord,
    PracticeSession,
    PracticeSummary,
    PredictionFactors,
    Question,
    ReadinessCheck,
    ReadinessCheckConfig,
    ReadinessLevel,
    ReadinessPrediction,
    RecommendationItem,
    UpcomingAssessmentOverview,
)
from readiness_engine.practice_history import PracticeHistoryAggregator
from readiness_engine.predictor import (
    ConfidencePolicy,
    PredictionPolicy,
    PredictionWeights,
    ReadinessPredictor,
    ReadinessThresholds,
)
from readiness_engine.question_bank import TemplateQuestionBank
from readiness_engine.readiness_check import ReadinessCheckOrchestrator
from readiness_engine.recommendations import RecommendationRanker
from readiness_engine.taxonomy import (
    CognitiveLevel,
    KnowledgeType,
    LevelMastery,
    LevelStatus,
    TaxonomyCell,
    cell_code,
    parse_cell_code,
    summarize_levels,
)

__all__ = [
    # Taxonomy
    "CognitiveLevel",
    "KnowledgeType",
    "LevelMastery",
    "LevelStatus",
    "TaxonomyCell",
    "cell_code",
    "parse_cell_code",
    "summarize_levels",
    # Models
    "AssessmentTarget",
    "Difficulty",
    "MasteryRecord",
    "PracticeSession",
    "PracticeSummary",
    "PredictionFactors",
    "Question",
    "ReadinessCheck",
    "ReadinessCheckConfig",
    "ReadinessLevel",
    "ReadinessPrediction",
    "RecommendationItem",
    "UpcomingAssessmentOverview",
    # Services
    "CheckEvaluation",
    "ConfidencePolicy",
    "PracticeHistoryAggregator",
    "PredictionPolicy",
    "PredictionWeights",
    "ReadinessCheckOrchestrator",
    "ReadinessPredictor",
    "ReadinessThresholds",
    "RecommendationRanker",
    "TemplateQuestionBank",
    "TopicStatus",
    "evaluate_readiness_check",
    # Errors
    "AssessmentLookupError",
    "AssessmentNotFound",
    "InvalidCellCode",
    "InvalidRecord",
    "PersistenceError",
    "ReadinessEngineError",
    "StoreError",
    "StoreUnavailable",
    "UnresolvedAssessmentTarget",
]
