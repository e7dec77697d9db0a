"""
Readiness engine errors.

Hard failures (missing assessment data, store outages on writes) abort the
operation with no persisted side effect. Soft degradations are handled by the
predictor and never surface as exceptions.
"""

from __future__ import annotations


class ReadinessEngineError(Exception):
    """Base class for all readiness engine errors."""


class InvalidCellCode(ReadinessEngineError, ValueError):
    """Raised when a taxonomy cell code does not match the 6x4 grid."""

    def __init__(self, code: object):
        self.code = code
        super().__init__(f"Invalid taxonomy cell code: {code!r} (expected 1A-6D)")


class InvalidRecord(ReadinessEngineError, ValueError):
    """Raised when a stored row violates the validated field ranges."""


class StoreError(ReadinessEngineError):
    """Base class for backing-store failures."""


class StoreUnavailable(StoreError):
    """Raised when a read from the backing store fails."""


class PersistenceError(StoreError):
    """Raised when a write to the backing store fails."""


class AssessmentLookupError(ReadinessEngineError):
    """Base class for missing upstream assessment data."""


class AssessmentNotFound(AssessmentLookupError):
    """Raised when the assessment does not exist."""

    def __init__(self, assessment_id: str):
        self.assessment_id = assessment_id
        super().__init__(f"Assessment not found: {assessment_id}")


class UnresolvedAssessmentTarget(AssessmentLookupError):
    """Raised when an assessment has no target objective."""

    def __init__(self, assessment_id: str):
        self.assessment_id = assessment_id
        super().__init__(f"Assessment {assessment_id} has no target objective")
