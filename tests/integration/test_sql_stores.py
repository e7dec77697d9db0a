"""
Integration tests for the SQL stores.

Runs the SQLAlchemy stores against a temporary SQLite database:
- Assessment, mastery and practice session reads
- Prediction upsert (one row per learner/assessment)
- Readiness check config insert
- Error wrapping (StoreUnavailable, InvalidRecord)
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from readiness_engine.db import (
    Assessment,
    Database,
    PracticeSessionRow,
    ReadinessCheckConfigRow,
    ReadinessPredictionRow,
    StudentMastery,
)
from readiness_engine.errors import AssessmentNotFound, InvalidRecord, StoreUnavailable
from readiness_engine.models import ReadinessLevel
from readiness_engine.practice_history import PracticeHistoryAggregator
from readiness_engine.predictor import ReadinessPredictor
from readiness_engine.question_bank import TemplateQuestionBank
from readiness_engine.readiness_check import ReadinessCheckOrchestrator
from readiness_engine.stores import (
    SqlAssessmentLookup,
    SqlMasteryStore,
    SqlPracticeSessionStore,
    SqlPredictionStore,
    SqlReadinessCheckConfigStore,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def seeded_db(db):
    """Database with one assessment, two cell mastery rows and six sessions."""
    with db.session_scope() as session:
        session.add(
            Assessment(
                id="final-sauces",
                title="Mother Sauces Final",
                glo_id="glo-sauces",
                target_cells=["1A", "1B"],
                status="published",
                created_at=NOW - timedelta(days=2),
            )
        )
        session.add(
            Assessment(
                id="old-quiz",
                title="Old Quiz",
                glo_id="glo-knives",
                target_cells=[],
                status="archived",
                created_at=NOW,
            )
        )
        session.add(StudentMastery(student_id="student-1", glo_id="1A", cell_code="1A", mastery_score=90))
        session.add(StudentMastery(student_id="student-1", glo_id="1B", cell_code="1B", mastery_score=40))
        session.add(
            StudentMastery(
                student_id="student-1",
                glo_id="glo-sauces",
                cell_code="3C",
                mastery_score=65,
                successful_practice_streak=3,
            )
        )
        for i in range(6):
            session.add(
                PracticeSessionRow(
                    student_id="student-1",
                    glo_id="glo-sauces",
                    score=0.8,
                    created_at=NOW - timedelta(days=i),
                )
            )
        session.add(
            PracticeSessionRow(
                student_id="student-1",
                glo_id="glo-sauces",
                score=0.1,
                created_at=NOW - timedelta(days=60),
            )
        )
    return db


@pytest.fixture
def predictor(seeded_db):
    return ReadinessPredictor(
        assessments=SqlAssessmentLookup(seeded_db),
        mastery=SqlMasteryStore(seeded_db),
        practice=PracticeHistoryAggregator(SqlPracticeSessionStore(seeded_db), clock=lambda: NOW),
        predictions=SqlPredictionStore(seeded_db),
        clock=lambda: NOW,
    )


class TestReadStores:
    """Tests for the read-side SQL stores."""

    def test_get_assessment(self, seeded_db):
        target = SqlAssessmentLookup(seeded_db).get_assessment("final-sauces")

        assert target.objective_id == "glo-sauces"
        assert target.cell_codes == ("1A", "1B")
        assert target.mastery_refs == ("1A", "1B")

    def test_missing_assessment(self, seeded_db):
        with pytest.raises(AssessmentNotFound):
            SqlAssessmentLookup(seeded_db).get_assessment("nope")

    def test_upcoming_assessment_is_published_only(self, seeded_db):
        upcoming = SqlAssessmentLookup(seeded_db).get_upcoming_assessment()

        assert upcoming.assessment_id == "final-sauces"

    def test_no_upcoming_assessment(self, db):
        assert SqlAssessmentLookup(db).get_upcoming_assessment() is None

    def test_list_mastery_filtered(self, seeded_db):
        records = SqlMasteryStore(seeded_db).list_mastery("student-1", ["1B", "1A"])

        assert [(r.objective_id, r.mastery_score) for r in records] == [("1A", 90), ("1B", 40)]

    def test_list_mastery_empty_filter(self, seeded_db):
        assert SqlMasteryStore(seeded_db).list_mastery("student-1", []) == []

    def test_get_mastery_absent_is_none(self, seeded_db):
        assert SqlMasteryStore(seeded_db).get_mastery("student-2", "1A") is None

    def test_get_mastery(self, seeded_db):
        record = SqlMasteryStore(seeded_db).get_mastery("student-1", "glo-sauces")

        assert record.mastery_score == 65
        assert record.cell_code == "3C"
        assert record.successful_practice_streak == 3

    def test_list_sessions_since(self, seeded_db):
        sessions = SqlPracticeSessionStore(seeded_db).list_sessions(
            "student-1", "glo-sauces", NOW - timedelta(days=30)
        )

        assert len(sessions) == 6
        assert sessions[0].created_at == NOW
        assert all(s.created_at.tzinfo is not None for s in sessions)


class TestPredictionUpsert:
    """Tests for prediction persistence."""

    def test_end_to_end_prediction(self, predictor, seeded_db):
        prediction = predictor.predict("student-1", "final-sauces")

        assert prediction.predicted_points == pytest.approx(75)
        assert prediction.readiness_level == ReadinessLevel.ALMOST_READY

        stored = SqlPredictionStore(seeded_db).get_prediction("student-1", "final-sauces")
        assert stored.predicted_score == pytest.approx(0.75)
        assert stored.confidence == pytest.approx(0.8)
        assert stored.factors.weak_objectives == ["1B"]
        assert stored.recommendation == "Focus on: 1B. Estimated time: 15 minutes."
        assert stored.estimated_prep_minutes == 15

    def test_repeat_prediction_keeps_one_row(self, predictor, seeded_db):
        predictor.predict("student-1", "final-sauces")
        with seeded_db.session_scope() as session:
            row = session.scalars(select(StudentMastery).where(StudentMastery.glo_id == "1B")).one()
            row.mastery_score = 95
        predictor.predict("student-1", "final-sauces")

        with seeded_db.session_scope() as session:
            count = session.scalar(select(func.count()).select_from(ReadinessPredictionRow))
        assert count == 1

        stored = SqlPredictionStore(seeded_db).get_prediction("student-1", "final-sauces")
        assert stored.readiness_level == ReadinessLevel.READY
        assert stored.factors.weak_objectives == []

    def test_missing_prediction_is_none(self, seeded_db):
        assert SqlPredictionStore(seeded_db).get_prediction("student-1", "nope") is None


class TestReadinessCheckConfig:
    def test_generate_readiness_check_persists_config(self, predictor, seeded_db):
        orchestrator = ReadinessCheckOrchestrator(
            predictor=predictor,
            question_bank=TemplateQuestionBank(),
            config_store=SqlReadinessCheckConfigStore(seeded_db),
            practice=predictor.practice,
            assessments=predictor.assessments,
            mastery=predictor.mastery,
            clock=lambda: NOW,
        )

        result = orchestrator.generate_readiness_check("student-1", "final-sauces", num_questions=3)

        with seeded_db.session_scope() as session:
            row = session.scalars(select(ReadinessCheckConfigRow)).one()
            assert str(row.id) == result.config.config_id
            assert row.num_questions == 3
            assert row.difficulty_level == "adaptive"
            assert len(row.questions_generated) == 3
            assert row.time_limit_minutes == 10


class TestErrorWrapping:
    """Store errors are translated into engine errors."""

    def test_missing_tables_raise_store_unavailable(self, tmp_path):
        empty = Database(f"sqlite:///{tmp_path / 'empty.db'}")
        try:
            with pytest.raises(StoreUnavailable):
                SqlMasteryStore(empty).list_mastery("student-1")
        finally:
            empty.dispose()

    def test_predictor_degrades_when_tables_missing(self, db, tmp_path):
        # Assessments and predictions live in db; mastery/practice point at an empty database
        with db.session_scope() as session:
            session.add(Assessment(id="quiz", title="Quiz", glo_id="glo-sauces", target_cells=[]))
        empty = Database(f"sqlite:///{tmp_path / 'empty.db'}")
        try:
            predictor = ReadinessPredictor(
                assessments=SqlAssessmentLookup(db),
                mastery=SqlMasteryStore(empty),
                practice=PracticeHistoryAggregator(SqlPracticeSessionStore(empty), clock=lambda: NOW),
                predictions=SqlPredictionStore(db),
                clock=lambda: NOW,
            )

            prediction = predictor.predict("student-1", "quiz")
        finally:
            empty.dispose()

        assert prediction.predicted_score == 0
        assert prediction.confidence == pytest.approx(0.4)

    def test_out_of_range_mastery_is_invalid_record(self, db):
        with db.session_scope() as session:
            session.add(StudentMastery(student_id="student-1", glo_id="1A", cell_code="1A", mastery_score=140))

        with pytest.raises(InvalidRecord):
            SqlMasteryStore(db).list_mastery("student-1")

    def test_out_of_range_session_is_invalid_record(self, db):
        with db.session_scope() as session:
            session.add(PracticeSessionRow(student_id="student-1", glo_id="glo-sauces", score=3.0, created_at=NOW))

        with pytest.raises(InvalidRecord):
            SqlPracticeSessionStore(db).list_sessions("student-1", None, NOW - timedelta(days=1))


class TestSchemaConstraints:
    """Rows the engine cannot read are rejected by the schema."""

    def test_mastery_without_cell_code_is_rejected(self, db):
        with pytest.raises(IntegrityError):
            with db.session_scope() as session:
                session.add(StudentMastery(student_id="student-1", glo_id="glo-sauces", mastery_score=50))

        assert SqlMasteryStore(db).list_mastery("student-1") == []


class TestTimestampsStoredAsUTC:
    """Offset-aware timestamps keep their instant on SQLite."""

    TOKYO = timezone(timedelta(hours=9))

    def test_offset_timestamp_reads_back_as_utc(self, db):
        with db.session_scope() as session:
            session.add(
                PracticeSessionRow(
                    student_id="student-1",
                    glo_id="glo-sauces",
                    score=0.8,
                    created_at=datetime(2025, 6, 15, 3, 0, tzinfo=self.TOKYO),
                )
            )

        sessions = SqlPracticeSessionStore(db).list_sessions("student-1", None, NOW - timedelta(days=30))

        assert [s.created_at for s in sessions] == [datetime(2025, 6, 14, 18, 0, tzinfo=UTC)]

    def test_window_edge_uses_utc_instant(self, db):
        with db.session_scope() as session:
            session.add(
                PracticeSessionRow(
                    student_id="student-1",
                    glo_id="glo-sauces",
                    score=0.8,
                    created_at=datetime(2025, 6, 15, 3, 0, tzinfo=self.TOKYO),
                )
            )

        store = SqlPracticeSessionStore(db)

        assert len(store.list_sessions("student-1", None, datetime(2025, 6, 14, 18, 0, tzinfo=UTC))) == 1
        assert store.list_sessions("student-1", None, datetime(2025, 6, 14, 19, 0, tzinfo=UTC)) == []

    def test_streak_buckets_by_utc_date(self, db):
        with db.session_scope() as session:
            # 2025-06-14 18:00 UTC, the day before NOW
            session.add(
                PracticeSessionRow(
                    student_id="student-1",
                    glo_id="glo-sauces",
                    score=0.8,
                    created_at=datetime(2025, 6, 15, 3, 0, tzinfo=self.TOKYO),
                )
            )
            session.add(PracticeSessionRow(student_id="student-1", glo_id="glo-sauces", score=0.9, created_at=NOW))

        aggregator = PracticeHistoryAggregator(SqlPracticeSessionStore(db), clock=lambda: NOW)
        summary = aggregator.summarize("student-1", "glo-sauces")

        assert summary.total_sessions == 2
        assert summary.streak_days == 2
