"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests:
in-memory stores, a fixed clock and a temporary SQLite database.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from readiness_engine.db import Database  # noqa: E402
from readiness_engine.errors import AssessmentNotFound, PersistenceError, StoreUnavailable  # noqa: E402
from readiness_engine.models import (  # noqa: E402
    AssessmentTarget,
    MasteryRecord,
    PracticeSession,
)
from readiness_engine.practice_history import PracticeHistoryAggregator  # noqa: E402
from readiness_engine.predictor import ReadinessPredictor  # noqa: E402

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (temporary SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# In-memory stores
# ========================================


class InMemoryAssessmentLookup:
    """Assessment lookup over a dict."""

    def __init__(self, assessments=None, upcoming_id=None):
        self.assessments = {a.assessment_id: a for a in (assessments or [])}
        self.upcoming_id = upcoming_id

    def get_assessment(self, assessment_id):
        if assessment_id not in self.assessments:
            raise AssessmentNotFound(assessment_id)
        return self.assessments[assessment_id]

    def get_upcoming_assessment(self):
        if self.upcoming_id is None:
            return None
        return self.assessments[self.upcoming_id]


class InMemoryMasteryStore:
    """Mastery store over a list of records. Set `fail` to simulate an outage."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.fail = False
        self.calls = []

    def get_mastery(self, learner_id, objective_id):
        self.calls.append(("get_mastery", learner_id, objective_id))
        if self.fail:
            raise StoreUnavailable("mastery store down")
        for record in self.records:
            if record.learner_id == learner_id and record.objective_id == objective_id:
                return record
        return None

    def list_mastery(self, learner_id, objective_ids=None):
        self.calls.append(("list_mastery", learner_id, objective_ids))
        if self.fail:
            raise StoreUnavailable("mastery store down")
        wanted = None if objective_ids is None else set(objective_ids)
        return [
            r
            for r in self.records
            if r.learner_id == learner_id and (wanted is None or r.objective_id in wanted)
        ]


class InMemoryPracticeSessionStore:
    """Practice session store over a list. Set `fail` to simulate an outage."""

    def __init__(self, sessions=None):
        self.sessions = list(sessions or [])
        self.fail = False
        self.calls = []

    def list_sessions(self, learner_id, objective_id, since):
        self.calls.append((learner_id, objective_id, since))
        if self.fail:
            raise StoreUnavailable("practice store down")
        return sorted(
            (
                s
                for s in self.sessions
                if s.learner_id == learner_id
                and (objective_id is None or s.objective_id == objective_id)
                and s.created_at >= since
            ),
            key=lambda s: s.created_at,
            reverse=True,
        )


class InMemoryPredictionStore:
    """Prediction store keyed by (learner_id, assessment_id)."""

    def __init__(self):
        self.predictions = {}
        self.writes = 0
        self.fail = False

    def upsert_prediction(self, prediction):
        if self.fail:
            raise PersistenceError("prediction store down")
        self.writes += 1
        self.predictions[(prediction.learner_id, prediction.assessment_id)] = prediction

    def get_prediction(self, learner_id, assessment_id):
        return self.predictions.get((learner_id, assessment_id))


class InMemoryConfigStore:
    """Readiness check config store that hands out sequential ids."""

    def __init__(self):
        self.configs = []
        self.fail = False

    def insert_config(self, config):
        if self.fail:
            raise PersistenceError("config store down")
        self.configs.append(config)
        return f"cfg-{len(self.configs)}"


# ========================================
# Builders
# ========================================


def mastery(objective_id, score, learner_id="student-1", streak=0):
    """Build a MasteryRecord for an objective or cell code."""
    return MasteryRecord(
        learner_id=learner_id,
        objective_id=objective_id,
        cell_code=objective_id if len(objective_id) == 2 else "3C",
        mastery_score=score,
        successful_practice_streak=streak,
    )


def session(score, days_ago=0, objective_id="glo-sauces", learner_id="student-1", hours_ago=0, n=0):
    """Build a PracticeSession relative to NOW."""
    return PracticeSession(
        session_id=f"s-{objective_id}-{days_ago}-{hours_ago}-{n}",
        learner_id=learner_id,
        objective_id=objective_id,
        score=score,
        created_at=NOW - timedelta(days=days_ago, hours=hours_ago),
    )


# ========================================
# Fixtures
# ========================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    """Fixed clock at NOW."""
    return lambda: NOW


@pytest.fixture
def sauces_assessment():
    """Assessment targeting two taxonomy cells of one objective."""
    return AssessmentTarget(
        assessment_id="final-sauces",
        title="Mother Sauces Final",
        objective_id="glo-sauces",
        cell_codes=("1A", "1B"),
    )


@pytest.fixture
def assessments(sauces_assessment):
    return InMemoryAssessmentLookup([sauces_assessment], upcoming_id="final-sauces")


@pytest.fixture
def mastery_store():
    return InMemoryMasteryStore()


@pytest.fixture
def session_store():
    return InMemoryPracticeSessionStore()


@pytest.fixture
def prediction_store():
    return InMemoryPredictionStore()


@pytest.fixture
def config_store():
    return InMemoryConfigStore()


@pytest.fixture
def aggregator(session_store, clock):
    return PracticeHistoryAggregator(session_store, clock=clock)


@pytest.fixture
def predictor(assessments, mastery_store, aggregator, prediction_store, clock):
    return ReadinessPredictor(
        assessments=assessments,
        mastery=mastery_store,
        practice=aggregator,
        predictions=prediction_store,
        clock=clock,
    )


@pytest.fixture
def db(tmp_path):
    """Temporary SQLite database with all tables created."""
    database = Database(f"sqlite:///{tmp_path / 'readiness.db'}")
    database.init_db()
    yield database
    database.dispose()
