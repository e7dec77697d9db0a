"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
temporary SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

from datetime import timedelta

import pytest
from typer.testing import CliRunner

from readiness_engine.cli import app
from readiness_engine.db import Assessment, Database, PracticeSessionRow, StudentMastery
from readiness_engine.models import utc_now

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture
def database_url(tmp_path):
    """SQLite URL with tables created and a small data set."""
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    result = runner.invoke(app, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output

    db = Database(url)
    now = utc_now()
    with db.session_scope() as session:
        session.add(
            Assessment(id="final-sauces", title="Mother Sauces Final", glo_id="glo-sauces", target_cells=["1A", "1B"])
        )
        session.add(StudentMastery(student_id="student-1", glo_id="1A", cell_code="1A", mastery_score=90))
        session.add(StudentMastery(student_id="student-1", glo_id="1B", cell_code="1B", mastery_score=40))
        for i in range(4):
            session.add(
                PracticeSessionRow(
                    student_id="student-1",
                    glo_id="glo-sauces",
                    score=0.8,
                    created_at=now - timedelta(days=i),
                )
            )
    db.dispose()
    return url


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list the commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("init-db", "predict", "practice", "check", "matrix"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["init-db", "predict", "practice", "check", "matrix"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])

        assert result.exit_code == 0
        assert "--database-url" in result.output


class TestCLICommands:
    """Run each command end to end."""

    def test_init_db_is_idempotent(self, database_url):
        result = runner.invoke(app, ["init-db", "--database-url", database_url])

        assert result.exit_code == 0
        assert "Database initialized" in result.output

    def test_predict(self, database_url):
        result = runner.invoke(app, ["predict", "student-1", "final-sauces", "--database-url", database_url])

        assert result.exit_code == 0, result.output
        assert "Almost Ready" in result.output
        assert "Focus on: 1B" in result.output

    def test_predict_unknown_assessment_exits_1(self, database_url):
        result = runner.invoke(app, ["predict", "student-1", "nope", "--database-url", database_url])

        assert result.exit_code == 1
        assert "Assessment not found" in result.output

    def test_practice(self, database_url):
        result = runner.invoke(app, ["practice", "student-1", "--database-url", database_url])

        assert result.exit_code == 0, result.output
        assert "glo-sauces" in result.output
        assert "Total sessions" in result.output

    def test_practice_empty(self, database_url):
        result = runner.invoke(app, ["practice", "student-2", "--database-url", database_url])

        assert result.exit_code == 0
        assert "No practice sessions" in result.output

    def test_practice_invalid_window_exits_1(self, database_url):
        result = runner.invoke(app, ["practice", "student-1", "--days", "0", "--database-url", database_url])

        assert result.exit_code == 1

    def test_check(self, database_url):
        result = runner.invoke(
            app,
            ["check", "student-1", "final-sauces", "-n", "3", "--difficulty", "easy", "--database-url", database_url],
        )

        assert result.exit_code == 0, result.output
        assert "rdc_q3" in result.output

    def test_check_invalid_difficulty_exits_1(self, database_url):
        result = runner.invoke(
            app, ["check", "student-1", "final-sauces", "--difficulty", "brutal", "--database-url", database_url]
        )

        assert result.exit_code == 1
        assert "Unknown difficulty" in result.output

    def test_matrix(self, database_url):
        result = runner.invoke(app, ["matrix", "student-1", "--database-url", database_url])

        assert result.exit_code == 0, result.output
        assert "Remember" in result.output
        assert "not_started" in result.output


class TestCLIReleasesConnections:
    """Every command disposes its engine, including on failure."""

    @pytest.fixture
    def dispose_calls(self, monkeypatch):
        calls = []
        original = Database.dispose

        def counting_dispose(db):
            calls.append(db.database_url)
            original(db)

        monkeypatch.setattr(Database, "dispose", counting_dispose)
        return calls

    @pytest.mark.parametrize(
        "args",
        [
            ["predict", "student-1", "final-sauces"],
            ["predict", "student-1", "nope"],
            ["practice", "student-1"],
            ["check", "student-1", "final-sauces", "-n", "2"],
            ["matrix", "student-1"],
        ],
    )
    def test_command_disposes_engine(self, database_url, dispose_calls, args):
        runner.invoke(app, [*args, "--database-url", database_url])

        assert dispose_calls == [database_url]
